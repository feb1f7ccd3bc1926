"""
Report Builder Module
=====================

Human-readable summary of an export run.

The summary is informational only; it is not part of the data contract.
"""

from typing import Optional

import networkx as nx

from ..model.schemas import ExportResult, ExportStatus, GraphDocument


def hierarchy_stats(document: GraphDocument) -> dict:
    """Count distinct managers and reports in a document.

    Returns:
        Dict with managers, subordinates and top_level (managers with no
        manager of their own in this export)
    """
    graph = document.to_networkx()
    managers = {n for n in graph.nodes if graph.out_degree(n) > 0}
    subordinates = {n for n in graph.nodes if graph.in_degree(n) > 0}
    return {
        "managers": len(managers),
        "subordinates": len(subordinates),
        "top_level": len(managers - subordinates),
        "components": nx.number_weakly_connected_components(graph) if graph.number_of_nodes() else 0,
    }


def generate_text_report(result: ExportResult, document: Optional[GraphDocument] = None) -> str:
    """Generate a plain text summary of an export.

    Args:
        result: ExportResult from run_export
        document: Document to describe; defaults to result.document

    Returns:
        Multi-line summary string
    """
    stats = result.stats
    lines = [
        "=" * 60,
        "orgAD ManagerOf Export",
        "=" * 60,
        "",
        f"Records found:          {stats.records_seen}",
        f"Edges written:          {stats.edges_written}",
        f"Manager lookups:        {stats.manager_lookups}",
        f"Skipped (no SID):       {stats.missing_identifier}",
        f"Skipped (bad manager):  {stats.unresolvable_manager}",
        f"Skipped (errors):       {stats.record_errors}",
    ]

    document = document or result.document
    if document is not None and document.edges:
        hierarchy = hierarchy_stats(document)
        lines.extend([
            "",
            f"Distinct managers:      {hierarchy['managers']}",
            f"Distinct reports:       {hierarchy['subordinates']}",
            f"Top-level managers:     {hierarchy['top_level']}",
            f"Separate trees:         {hierarchy['components']}",
        ])

    lines.append("")
    if result.status == ExportStatus.EMPTY:
        lines.append("No matching records; no file written.")
    else:
        lines.append(f"Output: {result.output_path}")

    return "\n".join(lines)
