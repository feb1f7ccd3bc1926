"""
orgAD Ingestion Module
======================

Record sources for the ManagerOf export.

Supported Sources:
- LDAP live collection (using ldap3)

Design Philosophy:
- A source yields DirectoryRecord objects and answers DN -> objectSid lookups
- Any object with iter_records() and lookup_sid() can stand in for LDAP
"""

from .ldap_loader import LDAPDirectory, record_from_entry
