"""
LDAP Directory Module
=====================

Read-only access to Active Directory person entries and their managers.

Features:
- Enumerates person entries that carry a manager reference
- Point lookups of a manager entry's objectSid by DN
- Supports LDAP (389) and LDAPS (636)
- Handles large environments with paging

Design Decisions:
-----------------
1. Uses ldap3 library for cross-platform LDAP support
2. Entries are mapped to DirectoryRecord as soon as they arrive; only three
   attributes are ever requested
3. Manager lookups run on their own connection so they never interleave
   with the paged enumeration
4. Supports NTLM (password or hash), simple and anonymous binds

Security Consideration:
This module performs read-only operations. No modifications are made to the AD.
"""

from typing import Iterator, Optional, Callable

from ldap3 import Server, Connection, ALL, SUBTREE, BASE, NTLM, SIMPLE

from ..model.schemas import DirectoryRecord
from ..config import LDAPConfig


PERSON_WITH_MANAGER_FILTER = "(&(objectCategory=person)(objectClass=user)(manager=*))"
RECORD_ATTRIBUTES = ['objectSid', 'manager', 'distinguishedName']


def _first_raw(raw_attributes: dict, name: str) -> Optional[bytes]:
    values = raw_attributes.get(name) or []
    if isinstance(values, (bytes, str)):
        values = [values]
    return values[0] if values else None


def _as_text(value) -> Optional[str]:
    """Decode an attribute value; undecodable bytes become None."""
    if value is None:
        return None
    if isinstance(value, bytes):
        try:
            return value.decode('utf-8')
        except UnicodeDecodeError:
            return None
    return str(value)


def _as_sid_bytes(value) -> Optional[bytes]:
    if isinstance(value, str):
        try:
            return value.encode('latin-1')
        except UnicodeEncodeError:
            return None
    return value or None


def record_from_entry(entry: dict) -> Optional[DirectoryRecord]:
    """Map one ldap3 search response entry to a DirectoryRecord.

    Args:
        entry: Response dict from ldap3 (with 'dn' and 'raw_attributes')

    Returns:
        DirectoryRecord, or None for non-entry responses such as referrals
    """
    if entry.get('type', 'searchResEntry') != 'searchResEntry':
        return None

    raw = entry.get('raw_attributes') or {}

    dn = _as_text(_first_raw(raw, 'distinguishedName')) or entry.get('dn', '')

    return DirectoryRecord(
        object_sid=_as_sid_bytes(_first_raw(raw, 'objectSid')),
        manager=_as_text(_first_raw(raw, 'manager')) or None,
        distinguished_name=str(dn)
    )


class LDAPDirectory:
    """Record source and manager lookup over LDAP.

    Usage:
        with LDAPDirectory(domain="corp.local", username="user", password="pw") as directory:
            for record in directory.iter_records():
                ...
            sid_bytes = directory.lookup_sid("CN=Boss,OU=Staff,DC=corp,DC=local")

    Both connections are unbound when the context exits or disconnect() is
    called, whether the run succeeded or not.
    """

    def __init__(
        self,
        domain: Optional[str] = None,
        server: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        ntlm_hash: Optional[str] = None,
        search_base: Optional[str] = None,
        config: Optional[LDAPConfig] = None,
        verbose: bool = True,
        progress_callback: Optional[Callable[[str], None]] = None
    ):
        """Initialize the directory source.

        Args:
            domain: Domain name (e.g., "corp.local")
            server: Domain controller host; defaults to the domain name
            username: Username for authentication (domain\\user or user@domain)
            password: Password for authentication
            ntlm_hash: NTLM hash for Pass-the-Hash (format: LM:NT or just NT)
            search_base: DN to enumerate under; defaults to the domain root
            config: LDAPConfig object for connection settings
            verbose: Whether to print progress messages
            progress_callback: Optional callback for progress updates
        """
        self.domain = domain
        self.server_host = server or domain
        self.username = username
        self.password = password
        self.ntlm_hash = ntlm_hash
        self.config = config or LDAPConfig()
        self.verbose = verbose
        self.progress_callback = progress_callback

        # Connection state
        self.connection: Optional[Connection] = None
        self.lookup_connection: Optional[Connection] = None

        if search_base:
            self.base_dn = search_base
        elif domain:
            self.base_dn = ",".join([f"DC={part}" for part in domain.split(".")])
        else:
            self.base_dn = ""

    def _log(self, message: str) -> None:
        """Log a message to console and/or callback."""
        if self.verbose:
            print(message)
        if self.progress_callback:
            self.progress_callback(message)

    def __enter__(self) -> "LDAPDirectory":
        if not self.connect():
            raise ConnectionError(f"Failed to connect to LDAP server {self.server_host}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def _open_connection(self, server: Server) -> Connection:
        """Bind a new connection using the configured credentials."""
        if self.username and (self.password or self.ntlm_hash):
            # Format username for NTLM
            if '\\' not in self.username and '@' not in self.username and self.domain:
                ntlm_user = f"{self.domain.split('.')[0].upper()}\\{self.username}"
            else:
                ntlm_user = self.username

            # Pass-the-Hash: NTLM accepts the hash in place of the password
            credential = self.ntlm_hash or self.password

            try:
                return Connection(
                    server,
                    user=ntlm_user,
                    password=credential,
                    authentication=NTLM,
                    auto_bind=True,
                    receive_timeout=self.config.timeout
                )
            except Exception:
                if self.ntlm_hash:
                    raise
                self._log("[*] NTLM auth failed, trying simple bind...")
                if '@' in self.username or not self.domain:
                    simple_user = self.username
                else:
                    simple_user = f"{self.username}@{self.domain}"
                return Connection(
                    server,
                    user=simple_user,
                    password=self.password,
                    authentication=SIMPLE,
                    auto_bind=True,
                    receive_timeout=self.config.timeout
                )

        return Connection(server, auto_bind=True, receive_timeout=self.config.timeout)

    def connect(self) -> bool:
        """Establish the enumeration and lookup connections.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            port = self.config.port or (636 if self.config.use_ssl else 389)
            server = Server(
                self.server_host,
                port=port,
                use_ssl=self.config.use_ssl,
                get_info=ALL,
                connect_timeout=self.config.timeout
            )

            if self.username:
                auth = "Pass-the-Hash" if self.ntlm_hash else "Password"
                self._log(f"[*] Connecting to {self.server_host}:{port} as {self.username} ({auth})")
            else:
                self._log(f"[*] Connecting anonymously to {self.server_host}:{port}")

            self.connection = self._open_connection(server)
            self.lookup_connection = self._open_connection(server)

            if not self.base_dn:
                self.base_dn = self._default_naming_context(server)

            self._log(f"[+] Connected successfully to {self.server_host}")
            self._log(f"[*] Search base: {self.base_dn}")
            return True

        except Exception as e:
            self._log(f"[!] Connection failed: {e}")
            self.disconnect()
            return False

    def _default_naming_context(self, server: Server) -> str:
        info = getattr(server, 'info', None)
        contexts = info.other.get('defaultNamingContext', []) if info else []
        if not contexts:
            raise ConnectionError("Server did not report a defaultNamingContext; pass a search base")
        return str(contexts[0])

    def iter_records(self) -> Iterator[DirectoryRecord]:
        """Enumerate person entries that have a manager.

        Yields:
            DirectoryRecord per entry, in server order
        """
        if not self.connection:
            raise ConnectionError("Not connected to LDAP server")

        self._log(f"[*] Enumerating users with a manager under {self.base_dn}...")

        entries = self.connection.extend.standard.paged_search(
            search_base=self.base_dn,
            search_filter=PERSON_WITH_MANAGER_FILTER,
            search_scope=SUBTREE,
            attributes=RECORD_ATTRIBUTES,
            paged_size=self.config.page_size,
            generator=True
        )

        count = 0
        for entry in entries:
            try:
                record = record_from_entry(entry)
            except Exception as e:
                self._log(f"[!] Skipping unreadable entry {entry.get('dn', '')}: {e}")
                continue
            if record is None:
                continue
            count += 1
            yield record

        self._log(f"[+] Found {count} user records")

    def lookup_sid(self, dn: str) -> Optional[bytes]:
        """Look up the raw objectSid of the entry at a DN.

        Args:
            dn: Distinguished name of the entry

        Returns:
            Binary objectSid, or None if the entry does not exist or has none

        Raises:
            LDAPException: On transport or protocol errors
        """
        if not self.lookup_connection:
            raise ConnectionError("Not connected to LDAP server")

        found = self.lookup_connection.search(
            search_base=dn,
            search_filter="(objectClass=*)",
            search_scope=BASE,
            attributes=['objectSid']
        )
        if not found:
            return None

        for entry in self.lookup_connection.response or []:
            if entry.get('type') != 'searchResEntry':
                continue
            return _as_sid_bytes(_first_raw(entry.get('raw_attributes') or {}, 'objectSid'))
        return None

    def disconnect(self) -> None:
        """Close every LDAP connection."""
        for name in ('connection', 'lookup_connection'):
            conn = getattr(self, name)
            if conn is not None:
                try:
                    conn.unbind()
                except Exception as e:
                    self._log(f"[!] Error closing LDAP connection: {e}")
                setattr(self, name, None)
