"""Shared fixtures: an in-memory stand-in for the LDAP directory."""

from collections import Counter

import pytest

from orgad.model.schemas import DirectoryRecord
from orgad.resolution.sid import sid_to_bytes

DOMAIN_SID = "S-1-5-21-1004336348-1177238915-682003330"


def user_sid(rid: int) -> str:
    return f"{DOMAIN_SID}-{rid}"


class FakeDirectory:
    """Record source with scripted entries and manager lookups.

    lookups maps a manager DN to a string SID, None (entry without SID) or an
    exception instance to raise. DNs missing from the map behave like
    noSuchObject.
    """

    def __init__(self, records=None, lookups=None, base_dn="DC=corp,DC=local"):
        self.records = list(records or [])
        self.lookups = dict(lookups or {})
        self.base_dn = base_dn
        self.lookup_calls = Counter()

    def iter_records(self):
        for record in self.records:
            yield record

    def lookup_sid(self, dn):
        self.lookup_calls[dn] += 1
        value = self.lookups.get(dn)
        if isinstance(value, Exception):
            raise value
        if value is None:
            return None
        return sid_to_bytes(value)


def make_record(rid, manager=None, name=None):
    name = name or f"user{rid}"
    return DirectoryRecord(
        object_sid=sid_to_bytes(user_sid(rid)) if rid is not None else None,
        manager=manager,
        distinguished_name=f"CN={name},OU=Staff,DC=corp,DC=local"
    )


MANAGER_M = "CN=Morgan,OU=Staff,DC=corp,DC=local"
MANAGER_N = "CN=Nobody,OU=Gone,DC=corp,DC=local"


@pytest.fixture
def scenario_directory():
    """A and B report to M (resolvable); C reports to N (broken)."""
    records = [
        make_record(1101, MANAGER_M, "Avery"),
        make_record(1102, MANAGER_M, "Blake"),
        make_record(1103, MANAGER_N, "Casey"),
    ]
    return FakeDirectory(records, {MANAGER_M: user_sid(1000)})
