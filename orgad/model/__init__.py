"""
orgAD Model Module
==================

Data models and graph construction for the ManagerOf export.

Key Components:
- schemas.py: Typed dataclasses for records, resolutions, edges and documents
- graph_builder.py: Record stream -> GraphDocument
"""

from .schemas import (
    EdgeType,
    ResolutionFailure,
    ExportStatus,
    DirectoryRecord,
    Resolution,
    OpenGraphEdge,
    GraphDocument,
    BuildStats,
    ExportResult
)
from .graph_builder import ManagerGraphBuilder
