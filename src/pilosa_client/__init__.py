# Pilosa HTTP Client
# File: __init__.py
# Version: v2

"""Python client for the Pilosa bitmap index over HTTP."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .client import PilosaClient, classify_error_body
from .cluster import Cluster
from .config import PilosaConfig
from .errors import (
    AlreadyExistsError,
    DatabaseExistsError,
    DecodeError,
    EmptyClusterError,
    ErrorKind,
    FrameExistsError,
    PilosaError,
    ServerError,
    TransportError,
    ValidationError,
)
from .models import (
    BitmapResult,
    CountResultItem,
    Database,
    DatabaseInfo,
    DatabaseOptions,
    Frame,
    FrameInfo,
    FrameOptions,
    ProfileItem,
    QueryOptions,
    QueryResponse,
    QueryResult,
    Schema,
)
from .uri import URI

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "BitmapResult",
    "Cluster",
    "CountResultItem",
    "Database",
    "DatabaseExistsError",
    "DatabaseInfo",
    "DatabaseOptions",
    "DecodeError",
    "EmptyClusterError",
    "ErrorKind",
    "Frame",
    "FrameExistsError",
    "FrameInfo",
    "FrameOptions",
    "PilosaClient",
    "PilosaConfig",
    "PilosaError",
    "ProfileItem",
    "QueryOptions",
    "QueryResponse",
    "QueryResult",
    "Schema",
    "ServerError",
    "TransportError",
    "URI",
    "ValidationError",
    "classify_error_body",
]


def _resolve_version() -> str:
    """Resolve installed distribution version.

    Uses Python package metadata so __version__ stays aligned with pyproject.toml.
    Falls back to the source version when running without an installed
    distribution.
    """
    try:
        return version("pilosa-http-client")
    except PackageNotFoundError:
        return "0.3.0"


__version__ = _resolve_version()
