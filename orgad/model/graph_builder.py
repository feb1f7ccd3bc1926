"""
orgAD Graph Builder
===================

Turns a stream of directory records into the ManagerOf graph document.

Design Decisions:
-----------------
1. One record yields at most one edge: manager --ManagerOf--> subordinate
2. A record is skipped whole when either endpoint fails to resolve; there
   are no partial edges
3. Unexpected errors are contained per record, one bad entry never aborts
   the run
4. Edges keep the order in which records were read

The empty-result condition (zero records from the source) is reported via
BuildStats.is_empty rather than an exception; the caller decides what to do.
"""

from typing import Iterable, Optional, Callable

from .schemas import (
    DirectoryRecord, OpenGraphEdge, GraphDocument, BuildStats,
    EdgeType
)


class ManagerGraphBuilder:
    """Builds a GraphDocument from directory records.

    Usage:
        resolver = IdentityResolver(directory.lookup_sid)
        builder = ManagerGraphBuilder(resolver)
        document = builder.build(directory.iter_records())
        if builder.stats.is_empty:
            ...

    The resolver is any object exposing resolve_self(record),
    resolve_manager(reference) and lookup_count, normally an IdentityResolver.
    """

    def __init__(
        self,
        resolver,
        verbose: bool = True,
        progress_callback: Optional[Callable[[str], None]] = None
    ):
        self.resolver = resolver
        self.verbose = verbose
        self.progress_callback = progress_callback
        self.stats = BuildStats()
        self.edges: list[OpenGraphEdge] = []

    def _log(self, message: str) -> None:
        """Log a message to console and/or callback."""
        if self.verbose:
            print(message)
        if self.progress_callback:
            self.progress_callback(message)

    def process(self, record: DirectoryRecord) -> Optional[OpenGraphEdge]:
        """Resolve one record and build its edge.

        Returns:
            The ManagerOf edge, or None if the record was skipped
        """
        try:
            me = self.resolver.resolve_self(record)
            if not me.ok:
                self.stats.missing_identifier += 1
                self._log(f"[!] Skipping record: {me.detail}")
                return None

            boss = self.resolver.resolve_manager(record.manager)
            if not boss.ok:
                self.stats.unresolvable_manager += 1
                self._log(f"[!] Skipping {record.distinguished_name}: {boss.detail}")
                return None

            return OpenGraphEdge(
                start_id=boss.identity,
                end_id=me.identity,
                kind=EdgeType.MANAGER_OF
            )

        except Exception as e:
            self.stats.record_errors += 1
            self._log(f"[!] Error processing {getattr(record, 'distinguished_name', record)}: {e}")
            return None

    def build(self, records: Iterable[DirectoryRecord]) -> GraphDocument:
        """Consume the record stream and assemble the document.

        Args:
            records: Forward-only iterable of DirectoryRecord

        Returns:
            GraphDocument holding every edge produced, in record order
        """
        self.stats = BuildStats()
        self.edges = []

        self._log("[*] Resolving manager relationships...")

        for record in records:
            self.stats.records_seen += 1
            edge = self.process(record)
            if edge is not None:
                self.edges.append(edge)

        self.stats.edges_written = len(self.edges)
        self.stats.manager_lookups = getattr(self.resolver, "lookup_count", 0)

        if not self.stats.is_empty:
            self._log(
                f"[+] Processed {self.stats.records_seen} records: "
                f"{self.stats.edges_written} edges, {self.stats.skipped} skipped, "
                f"{self.stats.manager_lookups} manager lookups"
            )

        return GraphDocument(edges=list(self.edges))
