#!/usr/bin/env python3
"""
orgAD - Active Directory Manager Hierarchy Exporter
===================================================

Command-line interface for exporting ManagerOf edges as OpenGraph JSON.

Usage:
    # Current domain, default output file in the working directory
    python -m orgad -d corp.local -u analyst -p Password123

    # Specific DC, scoped to one OU
    python -m orgad -d corp.local -s 192.168.1.100 -b "OU=Staff,DC=corp,DC=local" -u analyst -p Password123

Options:
    --domain, -d        Domain name (e.g., corp.local)
    --server, -s        Domain controller host (default: the domain name)
    --search-base, -b   DN to search under (default: domain root)
    --username, -u      Domain username
    --password, -p      Domain password
    --ntlm-hash         NTLM hash for Pass-the-Hash authentication
    --output-dir, -o    Existing output directory (default: .)
    --file-name, -f     Output file name, must end in .json
    --write-empty       Write an empty document when nothing matches
    --verbose, -v       Verbose output
"""

import argparse
import sys

from . import __version__
from .config import ExportConfig, ConfigurationError
from .model.schemas import ExportStatus
from .pipeline.export_runner import run_export
from .reporting.report_builder import generate_text_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orgad",
        description="orgAD - Export Active Directory manager relationships as BloodHound OpenGraph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export the whole domain
  %(prog)s -d corp.local -u analyst -p Password123

  # One OU, named output file
  %(prog)s -d corp.local -b "OU=Staff,DC=corp,DC=local" -u analyst -p Password123 -f staff.json

  # Pass-the-Hash authentication
  %(prog)s -d corp.local -u analyst --ntlm-hash 31d6cfe0d16ae931b73c59d7e0c089c0
        """
    )

    # LDAP options
    ldap_group = parser.add_argument_group("LDAP Collection")
    ldap_group.add_argument(
        "-d", "--domain",
        help="Domain name (e.g., corp.local)"
    )
    ldap_group.add_argument(
        "-s", "--server",
        help="Domain controller IP address or hostname (default: the domain name)"
    )
    ldap_group.add_argument(
        "-b", "--search-base",
        dest="search_base",
        help="Distinguished name to search under (default: domain root)"
    )
    ldap_group.add_argument(
        "-u", "--username",
        help="Domain username for LDAP authentication"
    )
    ldap_group.add_argument(
        "-p", "--password",
        help="Domain password for LDAP authentication"
    )
    ldap_group.add_argument(
        "--ntlm-hash",
        dest="ntlm_hash",
        help="NTLM hash for Pass-the-Hash authentication (instead of password)"
    )
    ldap_group.add_argument(
        "--ssl",
        action="store_true",
        help="Use LDAPS (port 636)"
    )
    ldap_group.add_argument(
        "--page-size",
        type=int,
        default=1000,
        help="LDAP page size (default: 1000)"
    )

    # Output options
    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "-o", "--output-dir",
        dest="output_dir",
        default=".",
        help="Existing directory for the output file (default: .)"
    )
    output_group.add_argument(
        "-f", "--file-name",
        dest="file_name",
        help="Output file name ending in .json (default: ManagerOf_<timestamp>.json)"
    )
    output_group.add_argument(
        "--write-empty",
        action="store_true",
        help="Write an empty graph document when no records match"
    )

    # General options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"orgAD {__version__}"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ExportConfig:
    """Translate parsed arguments into an ExportConfig."""
    return ExportConfig.from_dict({
        "directory": {
            "domain": args.domain,
            "server": args.server,
            "search_base": args.search_base,
            "username": args.username,
            "password": args.password,
            "ntlm_hash": args.ntlm_hash,
        },
        "ldap": {
            "use_ssl": args.ssl,
            "page_size": args.page_size,
        },
        "output": {
            "output_dir": args.output_dir,
            "file_name": args.file_name,
            "write_empty": args.write_empty,
            # The summary needs the in-memory document
            "pass_thru": True,
        },
        "verbose": args.verbose,
    })


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = config_from_args(args)
    try:
        config.validate()
    except ConfigurationError as e:
        print(f"[!] Configuration error: {e}", file=sys.stderr)
        return 1

    print_banner()

    try:
        result = run_export(config, progress_callback=None)
    except Exception as e:
        print(f"\n[!] Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    if result.status == ExportStatus.EMPTY:
        print("[!] Warning: no users with a manager matched the query; nothing was written.")
    else:
        print(f"[+] {result.stats.edges_written} ManagerOf edges written to {result.output_path}")

    if args.verbose or result.status == ExportStatus.WRITTEN:
        print()
        print(generate_text_report(result))

    return 0


def print_banner():
    """Print the orgAD banner."""
    banner = r"""
                        _    ____
   ___  _ __ __ _      / \  |  _ \
  / _ \| '__/ _` |    / _ \ | | | |
 | (_) | | | (_| |   / ___ \| |_| |
  \___/|_|  \__, |  /_/   \_\____/
            |___/
  Active Directory ManagerOf -> OpenGraph exporter
    """
    print(banner)


if __name__ == "__main__":
    sys.exit(main())
