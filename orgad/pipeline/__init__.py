"""
orgAD Pipeline Module
=====================

Run orchestration: configuration -> directory -> document -> file.
"""

from .export_runner import run_export
