# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon Listing Service

This module wraps the listing engine for the daemon:
- One boundary module per request (no arena shared between requests)
- Thread-safe statistics tracking
- Stream and local file listing
"""

import datetime
import hashlib
import logging
import os
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from zipcheck.core.zcarena import LinearMemory
from zipcheck.core.zcboundary import ZipCheckModule
from zipcheck.core.zchost import ListingSummary, ZipCheckHost, filter_entries, summarize
from zipcheck.core.zcscan import ZipEntry

from .config import get_config

logger = logging.getLogger(__name__)


class ListingStatus(str, Enum):
    """Listing result status."""

    OK = "ok"
    ERROR = "error"


@dataclass
class ListingResult:
    """Result of listing one archive."""

    filename: str
    status: ListingStatus
    entries: List[ZipEntry] = field(default_factory=list)
    summary: ListingSummary = field(default_factory=ListingSummary)
    list_time_ms: int = 0
    error_message: Optional[str] = None
    sha256: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "filename": self.filename,
            "status": self.status.value,
            "entries": [e.to_dict() for e in self.entries],
            "summary": self.summary.to_dict(),
            "list_time_ms": self.list_time_ms,
        }
        if self.error_message:
            result["error"] = self.error_message
        if self.sha256:
            result["sha256"] = self.sha256
        return result


@dataclass
class Stats:
    """Daemon statistics."""

    start_time: datetime.datetime = field(default_factory=datetime.datetime.now)
    requests_total: int = 0
    archives_listed: int = 0
    entries_listed: int = 0
    errors: int = 0
    total_list_time_ms: int = 0

    @property
    def uptime_seconds(self) -> int:
        """Get uptime in seconds."""
        delta = datetime.datetime.now() - self.start_time
        return int(delta.total_seconds())

    @property
    def avg_list_time_ms(self) -> float:
        """Get average listing time in milliseconds."""
        if self.requests_total == 0:
            return 0.0
        return self.total_list_time_ms / self.requests_total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "uptime_seconds": self.uptime_seconds,
            "requests_total": self.requests_total,
            "archives_listed": self.archives_listed,
            "entries_listed": self.entries_listed,
            "errors": self.errors,
            "avg_list_time_ms": round(self.avg_list_time_ms, 2),
        }

    def record(self, result: ListingResult) -> None:
        """Record a listing result in statistics."""
        self.requests_total += 1
        self.total_list_time_ms += result.list_time_ms
        if result.status == ListingStatus.OK:
            self.archives_listed += 1
            self.entries_listed += len(result.entries)
        else:
            self.errors += 1


class ListingService:
    """Shared listing wrapper for daemon mode."""

    _instance: Optional["ListingService"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ListingService":
        """Singleton pattern implementation."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._stats = Stats()
        self._stats_lock = threading.Lock()
        self._running = False
        self._initialized = True

    def start(self) -> None:
        """Mark the service as accepting requests."""
        if self._running:
            return
        self._stats = Stats()
        self._running = True
        logger.info("ZipCheck listing service started")

    def shutdown(self) -> None:
        """Stop accepting requests."""
        if not self._running:
            return
        self._running = False
        logger.info("ZipCheck listing service stopped")

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> Stats:
        with self._stats_lock:
            return replace(self._stats)

    def _new_host(self) -> ZipCheckHost:
        config = get_config()
        memory = LinearMemory(config.initial_memory_pages, config.max_memory_pages)
        return ZipCheckHost(ZipCheckModule(memory))

    def list_stream(
        self,
        data: bytes,
        filename: str = "stream",
        include_all: bool = False,
        include_hash: bool = False,
    ) -> ListingResult:
        """List the entries of an in-memory archive.

        Args:
            data: Raw archive bytes
            filename: Name reported in the result
            include_all: Keep directory and __MACOSX entries
            include_hash: Compute the SHA256 of the archive

        Returns:
            ListingResult (status ERROR when the listing failed)
        """
        start_time = time.time()
        sha256 = hashlib.sha256(data).hexdigest() if include_hash else None

        try:
            entries = self._new_host().list_entries(data)
            if not include_all:
                entries = filter_entries(entries)
            result = ListingResult(
                filename=filename,
                status=ListingStatus.OK,
                entries=entries,
                summary=summarize(entries),
                sha256=sha256,
            )
        except MemoryError as e:
            logger.error("Out of linear memory listing %s: %s", filename, e)
            result = ListingResult(filename=filename, status=ListingStatus.ERROR, error_message=str(e), sha256=sha256)
        except Exception as e:
            logger.exception("Listing failed for %s: %s", filename, e)
            result = ListingResult(filename=filename, status=ListingStatus.ERROR, error_message=str(e), sha256=sha256)

        result.list_time_ms = int((time.time() - start_time) * 1000)

        with self._stats_lock:
            self._stats.record(result)

        return result

    def list_file(self, path: str, include_all: bool = False, include_hash: bool = False) -> ListingResult:
        """List the entries of an archive file on the server."""
        filename = os.path.basename(path)
        try:
            with open(path, "rb") as fp:
                data = fp.read()
        except OSError as e:
            logger.error("Failed to read archive %s: %s", path, e)
            result = ListingResult(filename=filename, status=ListingStatus.ERROR, error_message=str(e))
            with self._stats_lock:
                self._stats.record(result)
            return result

        return self.list_stream(data, filename, include_all=include_all, include_hash=include_hash)


def get_service() -> ListingService:
    """Get the shared listing service instance."""
    return ListingService()
