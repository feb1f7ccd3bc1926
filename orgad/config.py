"""
orgAD Configuration Module
==========================

Centralized configuration management for the orgAD exporter.

Design Decision:
- Configuration is a dataclass tree that is passed through the pipeline
- Output settings are validated up front so a bad path fails before any
  directory query is sent
- Credentials never appear in to_dict() output
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Optional


OUTPUT_EXTENSION = ".json"


class ConfigurationError(ValueError):
    """Raised when the run configuration is unusable."""


@dataclass
class DirectoryConfig:
    """Where and how to reach the directory.

    Attributes:
        domain: DNS domain name (e.g., "corp.local")
        server: Domain controller host; defaults to the domain name
        search_base: DN to search under; defaults to the domain root
        username: Username (domain\\user, user@domain or bare user)
        password: Password for authentication
        ntlm_hash: NTLM hash for Pass-the-Hash (LM:NT or just NT)
    """
    domain: Optional[str] = None
    server: Optional[str] = None
    search_base: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    ntlm_hash: Optional[str] = None


@dataclass
class LDAPConfig:
    """Configuration for LDAP data collection.

    Attributes:
        use_ssl: Whether to use LDAPS (port 636) vs LDAP (port 389)
        page_size: Page size for LDAP queries
        timeout: Connection timeout in seconds
    """
    use_ssl: bool = False
    port: Optional[int] = None  # Auto-detect based on use_ssl
    page_size: int = 1000
    timeout: int = 30

    def __post_init__(self):
        if self.port is None:
            self.port = 636 if self.use_ssl else 389


@dataclass
class OutputConfig:
    """Configuration for the exported graph document.

    Attributes:
        output_dir: Existing directory the document is written to
        file_name: Document file name; must end in .json
        write_empty: Write an empty graph document when no records match
        pass_thru: Return the in-memory document alongside the file
    """
    output_dir: str = "."
    file_name: Optional[str] = None
    write_empty: bool = False
    pass_thru: bool = False

    def __post_init__(self):
        if not self.file_name:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.file_name = f"ManagerOf_{stamp}{OUTPUT_EXTENSION}"

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir) / self.file_name

    def validate(self) -> None:
        """Check the output directory and file name.

        Raises:
            ConfigurationError: If the directory is missing or the name is bad
        """
        out_dir = Path(self.output_dir)
        if not out_dir.is_dir():
            raise ConfigurationError(f"Output directory does not exist: {self.output_dir}")

        name = self.file_name or ""
        if Path(name).name != name:
            raise ConfigurationError(f"File name must not contain a path: {name}")
        if not name.lower().endswith(OUTPUT_EXTENSION) or len(name) <= len(OUTPUT_EXTENSION):
            raise ConfigurationError(f"File name must end in {OUTPUT_EXTENSION}: {name}")


@dataclass
class ExportConfig:
    """Main configuration container for an orgAD export run.

    Usage:
        config = ExportConfig(directory=DirectoryConfig(domain="corp.local"))
        config = ExportConfig.from_dict({"directory": {"domain": "corp.local"}})
    """
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    ldap: LDAPConfig = field(default_factory=LDAPConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    verbose: bool = True
    debug: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ExportConfig":
        """Create configuration from a dictionary (CLI or JSON input)."""
        return cls(
            directory=DirectoryConfig(**config_dict.get("directory", {})),
            ldap=LDAPConfig(**config_dict.get("ldap", {})),
            output=OutputConfig(**config_dict.get("output", {})),
            verbose=config_dict.get("verbose", True),
            debug=config_dict.get("debug", False)
        )

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary with secrets redacted."""
        data = asdict(self)
        for secret in ("password", "ntlm_hash"):
            if data["directory"].get(secret):
                data["directory"][secret] = "***"
        return data

    def validate(self) -> None:
        """Validate the whole run configuration before any work starts.

        Raises:
            ConfigurationError: On the first problem found
        """
        if not (self.directory.domain or self.directory.server):
            raise ConfigurationError("A domain or a server must be given")
        if self.directory.ntlm_hash and not self.directory.username:
            raise ConfigurationError("--ntlm-hash requires a username")
        if self.ldap.page_size < 1:
            raise ConfigurationError(f"Page size must be positive: {self.ldap.page_size}")
        self.output.validate()
