"""
orgAD - Active Directory Manager Hierarchy Exporter
===================================================

Reads the "manager" relationship from Active Directory and writes it out as
ManagerOf edges in BloodHound's OpenGraph JSON format.

Architecture Overview:
----------------------
- ingestion/: LDAP record source and manager lookups
- resolution/: SID normalization and cached manager resolution
- model/: Typed records, edges, documents and the graph builder
- reporting/: OpenGraph serialization and run summaries
- pipeline/: End-to-end export runner used by the CLI

Design Decisions:
-----------------
1. Edges are keyed by SID strings; DNs are only used to look managers up
2. Each manager DN is looked up at most once per run, failures included
3. A bad record is skipped, it never stops the export
4. All data models use Python dataclasses
"""

__version__ = "1.0.0"

from .config import ExportConfig, ConfigurationError
