"""
orgAD Data Schemas
==================

Typed dataclasses for directory records, resolution results and the
OpenGraph document.

Design Decisions:
-----------------
1. Directory entries are mapped to DirectoryRecord right after retrieval;
   nothing downstream touches raw LDAP attribute bags
2. Resolution is an explicit success/failure value, not an exception
3. Edges are keyed by SID strings only; DNs are a lookup intermediate
4. The document carries no node objects, nodes are implied by edge endpoints

Schema Hierarchy:
- DirectoryRecord: one person entry from the directory
- Resolution: outcome of turning a record or reference into a SID
- OpenGraphEdge: one ManagerOf relationship
- GraphDocument: metadata + empty node list + edges
- BuildStats / ExportResult: run bookkeeping
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any

import networkx as nx


class EdgeType(Enum):
    """Edge kinds emitted into the OpenGraph document."""
    MANAGER_OF = "ManagerOf"


SOURCE_KIND = EdgeType.MANAGER_OF.value
MATCH_BY_ID = "id"


class ResolutionFailure(Enum):
    """Why a record or reference could not be turned into a SID."""
    MISSING_IDENTIFIER = "MissingIdentifier"
    UNRESOLVABLE_MANAGER = "UnresolvableManager"


class ExportStatus(Enum):
    """Outcome of an export run."""
    WRITTEN = "Written"
    EMPTY = "Empty"


@dataclass(frozen=True)
class DirectoryRecord:
    """A person entry as returned by the record source.

    Attributes:
        object_sid: Raw binary objectSid, None when the attribute is absent
        manager: DN of the manager entry, not yet resolved
        distinguished_name: DN of this entry (used for tracing only)
    """
    object_sid: Optional[bytes]
    manager: Optional[str]
    distinguished_name: str = ""


@dataclass(frozen=True)
class Resolution:
    """Result of a SID resolution: either an identity or a failure reason."""
    identity: Optional[str] = None
    failure: Optional[ResolutionFailure] = None
    detail: str = ""

    @classmethod
    def success(cls, identity: str) -> "Resolution":
        return cls(identity=identity)

    @classmethod
    def fail(cls, failure: ResolutionFailure, detail: str = "") -> "Resolution":
        return cls(failure=failure, detail=detail)

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.identity)


@dataclass(frozen=True)
class OpenGraphEdge:
    """A directed ManagerOf relationship.

    Attributes:
        start_id: SID of the manager
        end_id: SID of the subordinate
        kind: Edge kind label
        start_match_by: How the ingestor matches the start endpoint to a node
        end_match_by: How the ingestor matches the end endpoint to a node

    Design Decision:
        Direction follows the relationship name: manager --ManagerOf--> report.
    """
    start_id: str
    end_id: str
    kind: EdgeType = EdgeType.MANAGER_OF
    start_match_by: str = MATCH_BY_ID
    end_match_by: str = MATCH_BY_ID

    def to_dict(self) -> dict:
        """Convert to the OpenGraph edge shape."""
        return {
            "kind": self.kind.value,
            "start": {"value": self.start_id, "match_by": self.start_match_by},
            "end": {"value": self.end_id, "match_by": self.end_match_by},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OpenGraphEdge":
        start = data["start"]
        end = data["end"]
        return cls(
            start_id=start["value"],
            end_id=end["value"],
            kind=EdgeType(data["kind"]),
            start_match_by=start.get("match_by", MATCH_BY_ID),
            end_match_by=end.get("match_by", MATCH_BY_ID)
        )


@dataclass
class GraphDocument:
    """The exported OpenGraph document.

    Nodes are never materialised; the ingestor matches edge endpoints to
    existing nodes by id, so the node list is always empty.
    """
    edges: list = field(default_factory=list)  # List of OpenGraphEdge
    nodes: list = field(default_factory=list)
    source_kind: str = SOURCE_KIND

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "metadata": {"source_kind": self.source_kind},
            "graph": {
                "nodes": list(self.nodes),
                "edges": [e.to_dict() for e in self.edges],
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphDocument":
        """Rebuild a document from its parsed JSON form."""
        graph = data.get("graph", {})
        return cls(
            edges=[OpenGraphEdge.from_dict(e) for e in graph.get("edges", [])],
            nodes=list(graph.get("nodes", [])),
            source_kind=data.get("metadata", {}).get("source_kind", SOURCE_KIND)
        )

    def to_networkx(self) -> nx.DiGraph:
        """Directed manager -> subordinate view of the edges."""
        graph = nx.DiGraph()
        for edge in self.edges:
            graph.add_edge(edge.start_id, edge.end_id, edge_type=edge.kind)
        return graph


@dataclass
class BuildStats:
    """Counters collected while building a document."""
    records_seen: int = 0
    edges_written: int = 0
    missing_identifier: int = 0
    unresolvable_manager: int = 0
    record_errors: int = 0
    manager_lookups: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the record source produced nothing at all."""
        return self.records_seen == 0

    @property
    def skipped(self) -> int:
        return self.missing_identifier + self.unresolvable_manager + self.record_errors

    def to_dict(self) -> dict:
        return {
            "records_seen": self.records_seen,
            "edges_written": self.edges_written,
            "missing_identifier": self.missing_identifier,
            "unresolvable_manager": self.unresolvable_manager,
            "record_errors": self.record_errors,
            "manager_lookups": self.manager_lookups,
        }


@dataclass
class ExportResult:
    """What a run hands back to its caller.

    Attributes:
        status: WRITTEN, or EMPTY when no records matched and nothing was written
        output_path: Path of the written document (None when EMPTY)
        stats: Build counters
        document: The in-memory document, only when pass-thru was requested
        metadata: Extra run details (search base, timestamps)
    """
    status: ExportStatus
    output_path: Optional[str] = None
    stats: BuildStats = field(default_factory=BuildStats)
    document: Optional[GraphDocument] = None
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "output_path": self.output_path,
            "stats": self.stats.to_dict(),
            "document": self.document.to_dict() if self.document else None,
            "metadata": self.metadata,
        }
