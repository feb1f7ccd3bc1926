"""
orgAD Reporting Module
======================

Document serialization and run summaries.

Components:
- opengraph_writer.py: GraphDocument <-> OpenGraph JSON
- report_builder.py: Plain text summary of an export
"""

from .opengraph_writer import serialize_document, write_document, load_document
from .report_builder import generate_text_report, hierarchy_stats
