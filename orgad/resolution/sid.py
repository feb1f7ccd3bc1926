"""
SID normalization.

Binary objectSid values are turned into the standard S-R-I-S-S... string form.
"""

import struct


def convert_sid(sid_bytes: bytes) -> str:
    """Convert binary SID to string format.

    Args:
        sid_bytes: Binary SID data

    Returns:
        String SID (e.g., "S-1-5-21-..."), or "" if the data is not a valid SID
    """
    if not sid_bytes or len(sid_bytes) < 8:
        return ""

    # SID structure:
    # Byte 0: Revision
    # Byte 1: Number of sub-authorities
    # Bytes 2-7: Identifier authority (big-endian)
    # Remaining: Sub-authorities (little-endian 32-bit)
    revision = sid_bytes[0]
    sub_auth_count = sid_bytes[1]

    if len(sid_bytes) != 8 + sub_auth_count * 4:
        return ""

    id_auth = int.from_bytes(sid_bytes[2:8], 'big')
    sub_auths = struct.unpack(f'<{sub_auth_count}I', sid_bytes[8:])

    sid = f"S-{revision}-{id_auth}"
    for sub_auth in sub_auths:
        sid += f"-{sub_auth}"

    return sid


def sid_to_bytes(sid: str) -> bytes:
    """Encode a string SID back to its binary form.

    Raises:
        ValueError: If the string is not a SID
    """
    parts = sid.split('-')
    if len(parts) < 3 or parts[0].upper() != 'S':
        raise ValueError(f"Not a SID: {sid}")

    revision = int(parts[1])
    id_auth = int(parts[2])
    sub_auths = [int(p) for p in parts[3:]]

    return (
        bytes([revision, len(sub_auths)])
        + id_auth.to_bytes(6, 'big')
        + struct.pack(f'<{len(sub_auths)}I', *sub_auths)
    )
