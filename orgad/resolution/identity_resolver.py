"""
Identity Resolver
=================

Turns directory records and manager references into canonical SID strings.

Design Decisions:
-----------------
1. The reference -> SID cache belongs to one resolver instance, so it lives
   exactly as long as one export run
2. Failed lookups are cached too; a broken manager DN costs one round-trip
3. Results are Resolution values; the caller branches on them
4. No retries: a lookup that raises is recorded as unresolvable
"""

from typing import Optional, Callable

from ..model.schemas import DirectoryRecord, Resolution, ResolutionFailure
from .sid import convert_sid


class IdentityResolver:
    """Resolves record SIDs and memoizes manager DN lookups.

    Usage:
        resolver = IdentityResolver(directory.lookup_sid)
        me = resolver.resolve_self(record)
        boss = resolver.resolve_manager(record.manager)
        if me.ok and boss.ok:
            ...

    The lookup callable receives a manager DN and returns the raw objectSid
    of that entry, or None if the entry is missing or has no SID. It may
    raise on transport errors.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[bytes]],
        verbose: bool = False,
        progress_callback: Optional[Callable[[str], None]] = None
    ):
        self.lookup = lookup
        self.verbose = verbose
        self.progress_callback = progress_callback

        # manager DN (as given) -> Resolution, positive or negative
        self.cache: dict[str, Resolution] = {}
        self.lookup_count = 0

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)
        if self.progress_callback:
            self.progress_callback(message)

    def resolve_self(self, record: DirectoryRecord) -> Resolution:
        """Resolve a record's own objectSid."""
        if not record.object_sid:
            return Resolution.fail(
                ResolutionFailure.MISSING_IDENTIFIER,
                f"no objectSid on {record.distinguished_name}"
            )

        sid = convert_sid(record.object_sid)
        if not sid:
            return Resolution.fail(
                ResolutionFailure.MISSING_IDENTIFIER,
                f"unreadable objectSid on {record.distinguished_name}"
            )
        return Resolution.success(sid)

    def resolve_manager(self, reference: Optional[str]) -> Resolution:
        """Resolve a manager DN to a SID, at most one lookup per DN.

        Args:
            reference: Manager DN exactly as read from the subordinate

        Returns:
            Resolution with the manager's SID or UNRESOLVABLE_MANAGER
        """
        if not reference:
            return Resolution.fail(ResolutionFailure.UNRESOLVABLE_MANAGER, "no manager reference")

        cached = self.cache.get(reference)
        if cached is not None:
            return cached

        result = self._lookup(reference)
        self.cache[reference] = result
        return result

    def _lookup(self, reference: str) -> Resolution:
        self.lookup_count += 1
        try:
            sid_bytes = self.lookup(reference)
        except Exception as e:
            self._log(f"[!] Manager lookup failed for {reference}: {e}")
            return Resolution.fail(ResolutionFailure.UNRESOLVABLE_MANAGER, f"lookup error: {e}")

        if not sid_bytes:
            return Resolution.fail(
                ResolutionFailure.UNRESOLVABLE_MANAGER,
                f"no objectSid found for {reference}"
            )

        sid = convert_sid(sid_bytes)
        if not sid:
            return Resolution.fail(
                ResolutionFailure.UNRESOLVABLE_MANAGER,
                f"unreadable objectSid on {reference}"
            )
        return Resolution.success(sid)
