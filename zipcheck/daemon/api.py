# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon REST API Module

This module provides FastAPI-based REST API endpoints for:
- Archive listing (upload, base64 stream and server path)
- Version and status information
- Statistics
"""

import base64
import binascii
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field

from .auth import require_api_key
from .config import get_config
from .service import ListingResult, get_service

logger = logging.getLogger(__name__)


# Pydantic models for request/response
class PingResponse(BaseModel):
    """Response for ping endpoint."""

    status: str = "ok"
    message: str = "pong"


class VersionResponse(BaseModel):
    """Response for version endpoint."""

    version: str
    build_date: str


class EntryResponse(BaseModel):
    """One archive entry."""

    path: str
    is_file: bool
    is_encrypted: bool


class SummaryResponse(BaseModel):
    """Entry counts."""

    total: int
    files: int
    directories: int
    encrypted: int


class ListingResponse(BaseModel):
    """Response for a listing."""

    filename: str
    status: str
    entries: List[EntryResponse]
    summary: SummaryResponse
    list_time_ms: int
    error: Optional[str] = None
    sha256: Optional[str] = None


class ListStreamRequest(BaseModel):
    """Request for stream-based listing."""

    data: str = Field(..., description="Base64 encoded archive data")
    filename: str = Field("stream", description="Optional filename")
    include_all: bool = Field(False, description="Keep directory and __MACOSX entries")


class ListPathRequest(BaseModel):
    """Request for path-based listing."""

    path: str = Field(..., description="Archive path on the server")
    include_all: bool = Field(False, description="Keep directory and __MACOSX entries")
    include_hash: bool = Field(False, description="Include SHA256 hash in results")


class StatsResponse(BaseModel):
    """Response for statistics endpoint."""

    uptime_seconds: int
    requests_total: int
    archives_listed: int
    entries_listed: int
    errors: int
    avg_list_time_ms: float


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str


def _to_response(result: ListingResult) -> ListingResponse:
    return ListingResponse(**result.to_dict())


def create_api_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    from zipcheck import __last_update__, __version__

    config = get_config()
    service = get_service()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info("Starting ZipCheck REST API server...")
        service.start()
        logger.info("REST API server started on http://%s:%d", config.http_host, config.http_port)
        yield
        logger.info("Shutting down REST API server...")
        service.shutdown()

    app = FastAPI(
        title="ZipCheck Daemon API",
        description="REST API for listing ZIP archive entries",
        version=__version__,
        lifespan=lifespan,
    )

    def check_size(size: int) -> None:
        if size > config.max_upload_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Archive too large. Maximum size: {config.max_upload_size_mb:.1f}MB",
            )

    # Health check endpoints (no auth required)
    @app.get("/ping", response_model=PingResponse, tags=["Health"])
    async def ping():
        """Check if the daemon is running."""
        if not service.is_running():
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Listing service not running",
            )
        return PingResponse()

    @app.get("/version", response_model=VersionResponse, tags=["Info"])
    async def version():
        """Get version information."""
        return VersionResponse(version=__version__, build_date=__last_update__)

    @app.get("/stats", response_model=StatsResponse, tags=["Info"])
    async def stats():
        """Get daemon statistics."""
        return StatsResponse(**service.get_stats().to_dict())

    # Listing endpoints (auth required if configured)
    @app.post(
        "/list/file",
        response_model=ListingResponse,
        tags=["List"],
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorized"},
            413: {"model": ErrorResponse, "description": "File too large"},
        },
    )
    async def list_file(
        file: UploadFile = File(...),
        include_all: bool = Query(False, description="Keep directory and __MACOSX entries"),
        include_hash: bool = Query(False, description="Include SHA256 hash"),
        api_key: Optional[str] = Depends(require_api_key),
    ):
        """List an uploaded archive."""
        if file.size:
            check_size(file.size)

        content = await file.read()

        # Size may not be reported up front
        check_size(len(content))

        result = service.list_stream(
            content,
            file.filename or "uploaded_file",
            include_all=include_all,
            include_hash=include_hash,
        )
        return _to_response(result)

    @app.post(
        "/list/stream",
        response_model=ListingResponse,
        tags=["List"],
        responses={
            400: {"model": ErrorResponse, "description": "Invalid base64 data"},
            401: {"model": ErrorResponse, "description": "Unauthorized"},
            413: {"model": ErrorResponse, "description": "Data too large"},
        },
    )
    async def list_stream(
        request: ListStreamRequest,
        api_key: Optional[str] = Depends(require_api_key),
    ):
        """List base64 encoded archive data."""
        try:
            data = base64.b64decode(request.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid base64 data: {e}",
            )

        check_size(len(data))

        result = service.list_stream(data, request.filename, include_all=request.include_all)
        return _to_response(result)

    @app.post(
        "/list/path",
        response_model=ListingResponse,
        tags=["List"],
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorized"},
            404: {"model": ErrorResponse, "description": "Path not found"},
            413: {"model": ErrorResponse, "description": "File too large"},
        },
    )
    async def list_path(
        request: ListPathRequest,
        api_key: Optional[str] = Depends(require_api_key),
    ):
        """List an archive stored on the server."""
        if not os.path.isfile(request.path):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Path not found: {request.path}",
            )

        check_size(os.path.getsize(request.path))

        result = service.list_file(
            request.path,
            include_all=request.include_all,
            include_hash=request.include_hash,
        )
        return _to_response(result)

    return app


def run_api_server():
    """Run the REST API server."""
    import uvicorn

    config = get_config()
    app = create_api_app()

    uvicorn.run(
        app,
        host=config.http_host,
        port=config.http_port,
        log_level="info",
    )
