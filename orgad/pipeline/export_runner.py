"""
Export Runner Module
====================

High-level entry point for a ManagerOf export.

This module orchestrates one run:
1. Configuration validation (before any directory traffic)
2. LDAP connection
3. Record enumeration and manager resolution
4. Document assembly
5. Serialization to the output file

Design Decisions:
-----------------
1. Single entry point (run_export) for the CLI and programmatic callers
2. The resolver (and its cache) is created per run and dropped afterwards
3. Connections opened here are released on every path
4. An empty result writes nothing unless write_empty is set
"""

from datetime import datetime
from typing import Optional, Callable, Union

from ..config import ExportConfig
from ..ingestion.ldap_loader import LDAPDirectory
from ..model.graph_builder import ManagerGraphBuilder
from ..model.schemas import ExportResult, ExportStatus, GraphDocument
from ..resolution.identity_resolver import IdentityResolver
from ..reporting.opengraph_writer import write_document


def _build_document(
    directory,
    config: ExportConfig,
    progress_callback: Optional[Callable[[str], None]]
) -> tuple[GraphDocument, ManagerGraphBuilder]:
    resolver = IdentityResolver(
        directory.lookup_sid,
        verbose=config.verbose,
        progress_callback=progress_callback
    )
    builder = ManagerGraphBuilder(
        resolver,
        verbose=config.verbose,
        progress_callback=progress_callback
    )
    document = builder.build(directory.iter_records())
    return document, builder


def run_export(
    config: Union[ExportConfig, dict, None] = None,
    directory=None,
    progress_callback: Optional[Callable[[str], None]] = None
) -> ExportResult:
    """Run a ManagerOf export end to end.

    Args:
        config: ExportConfig or a dict accepted by ExportConfig.from_dict
        directory: Already-connected record source (anything with
            iter_records() and lookup_sid()); when omitted an LDAPDirectory
            is opened from config and closed before returning
        progress_callback: Function to call with progress messages

    Returns:
        ExportResult with WRITTEN or EMPTY status

    Raises:
        ConfigurationError: If the configuration is invalid
        ConnectionError: If the LDAP server cannot be reached
    """
    if config is None:
        config = ExportConfig()
    elif isinstance(config, dict):
        config = ExportConfig.from_dict(config)

    def log(msg: str) -> None:
        if config.verbose:
            print(msg)
        if progress_callback:
            progress_callback(msg)

    config.validate()

    started = datetime.now()

    if directory is None:
        dir_cfg = config.directory
        with LDAPDirectory(
            domain=dir_cfg.domain,
            server=dir_cfg.server,
            username=dir_cfg.username,
            password=dir_cfg.password,
            ntlm_hash=dir_cfg.ntlm_hash,
            search_base=dir_cfg.search_base,
            config=config.ldap,
            verbose=config.verbose,
            progress_callback=progress_callback
        ) as ldap_directory:
            search_base = ldap_directory.base_dn
            document, builder = _build_document(ldap_directory, config, progress_callback)
    else:
        search_base = getattr(directory, "base_dn", config.directory.search_base)
        document, builder = _build_document(directory, config, progress_callback)

    metadata = {
        "search_base": search_base,
        "started": started.isoformat(),
        "finished": datetime.now().isoformat(),
    }

    result = ExportResult(
        status=ExportStatus.WRITTEN,
        stats=builder.stats,
        document=document if config.output.pass_thru else None,
        metadata=metadata
    )

    if builder.stats.is_empty and not config.output.write_empty:
        log("[!] No users with a manager were found; no output written")
        result.status = ExportStatus.EMPTY
        return result

    output_path = write_document(document, config.output.output_path)
    result.output_path = str(output_path)
    log(f"[+] Wrote {document.edge_count} ManagerOf edges to {output_path}")

    return result
