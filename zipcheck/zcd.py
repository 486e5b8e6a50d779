# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon (zcd)

Main entry point for the ZipCheck REST API server.

Usage:
    zcd                           # Start with default settings
    zcd --port 8080               # Custom HTTP port
    zcd --max-pages 1024          # Limit linear memory per listing (64MB)
    zcd --generate-key            # Generate API key
"""

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from zipcheck import __version__ as ZIPCHECK_VERSION
from zipcheck.daemon.config import ZipCheckConfig, get_config, set_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def print_banner():
    """Print the daemon banner."""
    print("=" * 60)
    print(f"ZipCheck Daemon (zcd) v{ZIPCHECK_VERSION}")
    print("=" * 60)


def write_pid_file(pid_file: str) -> None:
    """Write PID to file."""
    with open(pid_file, "w") as f:
        f.write(str(os.getpid()))
    logger.info("PID file written: %s", pid_file)


def remove_pid_file(pid_file: str) -> None:
    """Remove PID file."""
    try:
        os.unlink(pid_file)
        logger.info("PID file removed: %s", pid_file)
    except OSError as e:
        logger.debug("PID file not removed: %s", e)


def run_http_server(config: ZipCheckConfig) -> None:
    """Run the HTTP REST API server.

    Args:
        config: Daemon configuration
    """
    from zipcheck.daemon.api import create_api_app

    import uvicorn

    app = create_api_app()

    uvicorn.run(
        app,
        host=config.http_host,
        port=config.http_port,
        log_level="info",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ZipCheck Daemon - REST API for listing ZIP archive entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ZC_HTTP_HOST, ZC_HTTP_PORT, ZC_MAX_UPLOAD_SIZE, ZC_INITIAL_MEMORY_PAGES,
  ZC_MAX_MEMORY_PAGES, ZC_API_KEY, ZC_REQUIRE_AUTH, ZC_PID_FILE, ZC_LOG_FILE
""",
    )

    # Server options
    parser.add_argument(
        "--host",
        dest="http_host",
        metavar="HOST",
        help="HTTP bind address",
    )
    parser.add_argument(
        "--port",
        dest="http_port",
        type=int,
        metavar="PORT",
        help="HTTP port",
    )

    # Resource options
    parser.add_argument(
        "--max-size",
        type=int,
        metavar="BYTES",
        help="Maximum archive size in bytes",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        metavar="N",
        help="Linear memory page limit per listing (64KB pages)",
    )

    # Authentication
    parser.add_argument(
        "--api-key",
        metavar="KEY",
        help="Set API key for authentication",
    )
    parser.add_argument(
        "--require-auth",
        action="store_true",
        help="Require authentication for API access",
    )
    parser.add_argument(
        "--generate-key",
        action="store_true",
        help="Generate a new API key and exit",
    )

    # Daemon options
    parser.add_argument(
        "--pid-file",
        metavar="PATH",
        help="PID file path",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Log file path",
    )

    # Misc
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ZipCheck Daemon v{ZIPCHECK_VERSION}",
    )

    return parser.parse_args(argv)


def apply_args_to_config(args: argparse.Namespace, config: ZipCheckConfig) -> ZipCheckConfig:
    """Apply command line arguments to configuration.

    Args:
        args: Parsed arguments
        config: Base configuration

    Returns:
        Updated configuration
    """
    if args.http_host:
        config.http_host = args.http_host
    if args.http_port:
        config.http_port = args.http_port
    if args.max_size:
        config.max_upload_size = args.max_size
    if args.max_pages:
        config.max_memory_pages = args.max_pages
    if args.api_key:
        config.api_key = args.api_key
    if args.require_auth:
        config.require_auth = True
    if args.pid_file:
        config.pid_file = args.pid_file
    if args.log_file:
        config.log_file = args.log_file

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    args = parse_args(argv)

    if args.generate_key:
        key = get_config().generate_api_key()
        print("Generated API key:", key)
        print()
        print("Add to your environment:")
        print(f"  ZC_API_KEY={key}")
        print("  ZC_REQUIRE_AUTH=true")
        return 0

    print_banner()

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = apply_args_to_config(args, get_config())
    set_config(config)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error("Configuration error: %s", error)
        return 1

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)

    if config.pid_file:
        write_pid_file(config.pid_file)

    logger.info("Configuration:")
    logger.info("  HTTP API: http://%s:%d", config.http_host, config.http_port)
    logger.info("  Max upload: %.1f MB", config.max_upload_size_mb)
    logger.info("  Memory pages: %d initial, %d max", config.initial_memory_pages, config.max_memory_pages)
    logger.info("  Auth required: %s", config.require_auth)

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        if config.pid_file:
            remove_pid_file(config.pid_file)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        run_http_server(config)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1
    finally:
        if config.pid_file:
            remove_pid_file(config.pid_file)

    return 0


if __name__ == "__main__":
    sys.exit(main())
