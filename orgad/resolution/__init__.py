"""
orgAD Resolution Module
=======================

Identity normalization and manager-reference resolution.

Key Components:
- sid.py: Binary objectSid <-> string SID conversion
- identity_resolver.py: Cached DN -> SID resolution for one export run
"""

from .sid import convert_sid, sid_to_bytes
from .identity_resolver import IdentityResolver
