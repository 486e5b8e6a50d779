# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Lister (zcl)

Command-line tool listing ZIP archive entries, either locally or through a
running ZipCheck daemon (zcd).

Usage:
    zcl archive.zip [...]                 # List files in archives
    zcl --all archive.zip                 # Include directories and __MACOSX
    zcl --encrypted-only archive.zip      # Only encrypted entries
    zcl --server http://host:8312 a.zip   # List through the daemon
    zcl --server http://host:8312 --ping  # Check daemon status
"""

import argparse
import json
import logging
import os
import sys
import urllib.error
import urllib.parse
import urllib.request
from typing import List, Optional, Tuple

from zipcheck import __version__ as ZIPCHECK_VERSION
from zipcheck.core.zcerror import ArchiveReadError
from zipcheck.core.zchost import ZipCheckHost, summarize
from zipcheck.core.zcscan import ZipEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


class ZipCheckClient:
    """Client for the zcd REST API."""

    def __init__(self, server: str, api_key: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT):
        self.server = server.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _http_request(
        self,
        method: str,
        endpoint: str,
        files: Optional[dict] = None,
        query: Optional[dict] = None,
    ) -> Tuple[bool, dict]:
        """Make HTTP request to REST API."""
        url = f"{self.server}{endpoint}"
        if query:
            url += "?" + urllib.parse.urlencode(query)

        headers = {}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        body = None
        if files:
            # Multipart form data for file upload
            boundary = "----ZipCheckClientBoundary"
            body = b""

            for field_name, (filename, content) in files.items():
                body += f"--{boundary}\r\n".encode()
                body += f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"\r\n'.encode()
                body += b"Content-Type: application/zip\r\n\r\n"
                body += content
                body += b"\r\n"

            body += f"--{boundary}--\r\n".encode()
            headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"

        req = urllib.request.Request(url, data=body, headers=headers, method=method)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return True, json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            try:
                error_body = json.loads(e.read().decode("utf-8"))
                return False, {"error": error_body.get("detail", str(e))}
            except ValueError:
                return False, {"error": str(e)}
        except urllib.error.URLError as e:
            return False, {"error": f"Connection failed: {e.reason}"}
        except OSError as e:
            return False, {"error": str(e)}

    def ping(self) -> Tuple[bool, str]:
        success, result = self._http_request("GET", "/ping")
        if success:
            return True, result.get("message", "pong")
        return False, result.get("error", "Unknown error")

    def list_file(self, path: str, include_all: bool = False) -> Tuple[bool, dict]:
        """Upload an archive and return the listing."""
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            return False, {"error": f"Cannot read file: {e}"}

        query = {"include_all": "true"} if include_all else None
        return self._http_request("POST", "/list/file", files={"file": (os.path.basename(path), content)}, query=query)


def print_banner():
    """Print client banner."""
    print("=" * 60)
    print(f"ZipCheck Lister (zcl) v{ZIPCHECK_VERSION}")
    print("=" * 60)


def format_entry(entry: ZipEntry) -> str:
    """Format one entry as a listing line."""
    marker = "*" if entry.is_encrypted else " "
    return f" {marker} {entry.path}"


def print_listing(filename: str, entries: List[ZipEntry], json_output: bool = False) -> None:
    """Print the listing of one archive."""
    summary = summarize(entries)

    if json_output:
        result = {
            "filename": filename,
            "entries": [e.to_dict() for e in entries],
            "summary": summary.to_dict(),
        }
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return

    print(f"{filename}:")
    for entry in entries:
        print(format_entry(entry))
    print(
        f"  {summary.files} file(s), {summary.directories} dir(s), "
        f"{summary.encrypted} encrypted (* marks encrypted entries)"
    )


def print_error(filename: str, message: str, json_output: bool = False) -> None:
    if json_output:
        print(json.dumps({"filename": filename, "status": "error", "error": message}, ensure_ascii=False))
    else:
        print(f"{filename}  error : {message}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ZipCheck Lister - List ZIP archive entries without extracting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  zcl archive.zip                       List files in an archive
  zcl --all archive.zip                 Include directories and __MACOSX entries
  zcl --json a.zip b.zip                JSON output
  zcl --server http://127.0.0.1:8312 archive.zip
""",
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Archives to list",
    )

    list_group = parser.add_argument_group("Listing options")
    list_group.add_argument(
        "--all",
        dest="include_all",
        action="store_true",
        help="Include directory and __MACOSX entries",
    )
    list_group.add_argument(
        "--encrypted-only",
        action="store_true",
        help="Show only encrypted entries",
    )

    server_group = parser.add_argument_group("Server options")
    server_group.add_argument(
        "--server",
        metavar="URL",
        help="List through a zcd daemon (e.g. http://127.0.0.1:8312)",
    )
    server_group.add_argument(
        "--api-key",
        metavar="KEY",
        help="API key for the daemon",
    )
    server_group.add_argument(
        "--ping",
        action="store_true",
        help="Check daemon status",
    )
    server_group.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        metavar="SEC",
        help="Request timeout in seconds",
    )

    output_group = parser.add_argument_group("Output options")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    output_group.add_argument(
        "--no-banner",
        action="store_true",
        help="Don't print banner",
    )
    output_group.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    output_group.add_argument(
        "--version",
        action="version",
        version=f"ZipCheck Lister v{ZIPCHECK_VERSION}",
    )

    return parser.parse_args(argv)


def list_local(paths: List[str], args: argparse.Namespace) -> int:
    host = ZipCheckHost()
    exit_code = 0

    for path in paths:
        try:
            entries = host.load_zip_entries(path, include_all=args.include_all)
        except ArchiveReadError as e:
            print_error(path, str(e), args.json)
            exit_code = 1
            continue

        if args.encrypted_only:
            entries = [e for e in entries if e.is_encrypted]
        print_listing(path, entries, args.json)

    return exit_code


def list_remote(client: ZipCheckClient, paths: List[str], args: argparse.Namespace) -> int:
    exit_code = 0

    for path in paths:
        success, result = client.list_file(path, include_all=args.include_all)
        if not success or result.get("status") != "ok":
            print_error(path, result.get("error", "Unknown error"), args.json)
            exit_code = 1
            continue

        entries = [ZipEntry.from_dict(item) for item in result.get("entries", [])]
        if args.encrypted_only:
            entries = [e for e in entries if e.is_encrypted]
        print_listing(path, entries, args.json)

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.no_banner and not args.json:
        print_banner()
        print()

    if args.ping:
        if not args.server:
            print("Error: --ping requires --server")
            return 1
        success, message = ZipCheckClient(args.server, args.api_key, args.timeout).ping()
        if args.json:
            print(json.dumps({"status": "ok" if success else "error", "message": message}))
        else:
            print(f"Server is running: {message}" if success else f"Error: {message}")
        return 0 if success else 1

    if not args.paths:
        print("Error: no archive given")
        return 1

    if args.server:
        client = ZipCheckClient(args.server, args.api_key, args.timeout)
        return list_remote(client, args.paths, args)

    return list_local(args.paths, args)


if __name__ == "__main__":
    sys.exit(main())
