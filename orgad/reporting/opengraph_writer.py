"""
OpenGraph Writer Module
=======================

Serializes a GraphDocument to BloodHound OpenGraph JSON and reads it back.

Output format:
    {"metadata":{"source_kind":"ManagerOf"},
     "graph":{"nodes":[],"edges":[{"kind":"ManagerOf",
                                   "start":{"value":"S-1-5-...","match_by":"id"},
                                   "end":{"value":"S-1-5-...","match_by":"id"}}]}}

Design Decisions:
-----------------
1. Compact separators and a fixed key order, so identical input gives
   byte-identical output
2. The whole document is written in one pass to a temp file in the target
   directory, then renamed over the destination
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from ..model.schemas import GraphDocument


def serialize_document(document: GraphDocument) -> bytes:
    """Encode the document as compact UTF-8 JSON."""
    text = json.dumps(document.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_document(document: GraphDocument, path: Union[str, Path]) -> Path:
    """Write the document atomically.

    Args:
        document: GraphDocument to persist
        path: Destination file; its directory must exist

    Returns:
        Path of the written file
    """
    target = Path(path)
    payload = serialize_document(document)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        # mkstemp creates 0600; give the document the usual umask-based mode
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    return target


def load_document(source: Union[str, Path, bytes]) -> GraphDocument:
    """Parse a document from a file path or raw JSON bytes."""
    if isinstance(source, bytes):
        data = json.loads(source.decode("utf-8"))
    else:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    return GraphDocument.from_dict(data)
