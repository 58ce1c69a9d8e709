# Pilosa HTTP Client
# File: client.py
# Version: v4
"""Pilosa HTTP client.

Implements:

- query() via ``POST /query`` (protobuf in, protobuf out)
- create_database() / delete_database() via ``/db`` (JSON)
- create_frame() / delete_frame() via ``/frame`` (JSON)
- ensure_database_exists() / ensure_frame_exists()
- schema() via ``GET /schema`` (JSON)

Each call picks one host from the cluster, performs exactly one HTTP
exchange and either returns the decoded result or raises a
:class:`~pilosa_client.errors.PilosaError`. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Type, Union

import httpx
from httpx import RequestError

from .cluster import Cluster
from .config import PilosaConfig
from .errors import (
    AlreadyExistsError,
    DatabaseExistsError,
    DecodeError,
    EmptyClusterError,
    FrameExistsError,
    PilosaError,
    ServerError,
    TransportError,
)
from .internal import messages
from .models import Database, Frame, QueryOptions, QueryResponse, Schema
from .uri import URI

logger = logging.getLogger(__name__)

PROTOBUF_CONTENT_TYPE = "application/x-protobuf"
JSON_CONTENT_TYPE = "application/json"

# The server reports duplicates with these exact bodies, trailing newline
# included, not with a status code of their own.
_KNOWN_ERROR_BODIES: Dict[str, Type[AlreadyExistsError]] = {
    "database already exists\n": DatabaseExistsError,
    "frame already exists\n": FrameExistsError,
}


def classify_error_body(status_code: int, reason: str, body: str) -> PilosaError:
    """Map a non-2xx response to the error it stands for."""
    error_cls = _KNOWN_ERROR_BODIES.get(body)
    if error_cls is not None:
        return error_cls(body, status_code=status_code)
    return ServerError(status_code, reason, body)


def make_request_data(database_name: str, query: str, options: QueryOptions) -> bytes:
    """Encode the protobuf ``QueryRequest`` body for ``/query``."""
    request = messages.QueryRequest(
        DB=database_name,
        Query=query,
        Profiles=options.fetch_profiles,
    )
    return request.SerializeToString()


@dataclass
class OperationRequest:
    """One HTTP call, built fresh for every operation."""

    method: str
    path: str
    body: Optional[bytes] = None
    content_type: str = JSON_CONTENT_TYPE
    needs_response: bool = False


TimeoutTypes = Union[float, httpx.Timeout, None]


@dataclass
class PilosaClient:
    """Sends queries and schema changes to a Pilosa cluster."""

    cluster: Cluster = field(default_factory=lambda: Cluster.with_host(URI()))
    config: PilosaConfig = field(default_factory=PilosaConfig)

    # Custom httpx transport, e.g. httpx.MockTransport in tests.
    transport: Optional[httpx.BaseTransport] = None

    @classmethod
    def from_address(
        cls,
        address: Union[str, URI],
        config: Optional[PilosaConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "PilosaClient":
        uri = URI.from_address(address) if isinstance(address, str) else address
        return cls(
            cluster=Cluster.with_host(uri),
            config=config or PilosaConfig(addresses=[str(uri)]),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: PilosaConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "PilosaClient":
        return cls(cluster=Cluster(config.uris()), config=config, transport=transport)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query(
        self,
        database: Database,
        query: str,
        options: Optional[QueryOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> QueryResponse:
        """Run a PQL query against ``database``.

        A server-side query error that still comes back with a 2xx status is
        reported in ``QueryResponse.error_message``.
        """
        data = make_request_data(database.name, query, options or QueryOptions())
        request = OperationRequest(
            method="POST",
            path="/query",
            body=data,
            content_type=PROTOBUF_CONTENT_TYPE,
            needs_response=True,
        )
        buf = self._http_request(request, timeout=timeout)
        return QueryResponse.from_bytes(buf)

    # ------------------------------------------------------------------
    # Databases & frames
    # ------------------------------------------------------------------

    def create_database(self, database: Database, timeout: TimeoutTypes = None) -> None:
        self._create_or_delete_database("POST", database, timeout)

    def delete_database(self, database: Database, timeout: TimeoutTypes = None) -> None:
        self._create_or_delete_database("DELETE", database, timeout)

    def ensure_database_exists(self, database: Database, timeout: TimeoutTypes = None) -> None:
        """Create ``database`` unless the server says it already exists."""
        try:
            self.create_database(database, timeout=timeout)
        except DatabaseExistsError:
            logger.debug("Database %s already exists", database.name)

    def create_frame(self, frame: Frame, timeout: TimeoutTypes = None) -> None:
        self._create_or_delete_frame("POST", frame, timeout)

    def delete_frame(self, frame: Frame, timeout: TimeoutTypes = None) -> None:
        self._create_or_delete_frame("DELETE", frame, timeout)

    def ensure_frame_exists(self, frame: Frame, timeout: TimeoutTypes = None) -> None:
        """Create ``frame`` unless the server says it already exists."""
        try:
            self.create_frame(frame, timeout=timeout)
        except FrameExistsError:
            logger.debug("Frame %s/%s already exists", frame.database.name, frame.name)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def schema(self, timeout: TimeoutTypes = None) -> Schema:
        """Fetch all databases and their frames."""
        request = OperationRequest(method="GET", path="/schema", needs_response=True)
        buf = self._http_request(request, timeout=timeout)
        try:
            payload = json.loads(buf)
        except ValueError as exc:
            raise DecodeError(f"Could not decode schema response: {exc}") from exc
        return Schema.from_dict(payload)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _create_or_delete_database(
        self, method: str, database: Database, timeout: TimeoutTypes
    ) -> None:
        payload = {
            "db": database.name,
            "options": {"columnLabel": database.options.column_label},
        }
        request = OperationRequest(
            method=method, path="/db", body=json.dumps(payload).encode("utf-8")
        )
        self._http_request(request, timeout=timeout)

    def _create_or_delete_frame(self, method: str, frame: Frame, timeout: TimeoutTypes) -> None:
        payload = {
            "db": frame.database.name,
            "frame": frame.name,
            "options": {"rowLabel": frame.options.row_label},
        }
        request = OperationRequest(
            method=method, path="/frame", body=json.dumps(payload).encode("utf-8")
        )
        self._http_request(request, timeout=timeout)

    def _http_request(
        self, request: OperationRequest, timeout: TimeoutTypes = None
    ) -> Optional[bytes]:
        host = self.cluster.get_host()
        if host is None:
            raise EmptyClusterError()

        url = host.normalized_address + request.path

        # Both headers are needed for the server to pick its codec.
        headers = {
            "Content-Type": request.content_type,
            "Accept": request.content_type,
        }

        effective_timeout = timeout if timeout is not None else float(self.config.timeout_seconds)

        with httpx.Client(
            timeout=effective_timeout,
            verify=self.config.verify_tls,
            transport=self.transport,
        ) as http_client:
            try:
                response = http_client.request(
                    request.method, url, content=request.body, headers=headers
                )
            except RequestError as exc:
                logger.warning("HTTP %s %s failed: %s", request.method, url, exc)
                raise TransportError(
                    f"Error calling Pilosa at '{url}': {exc}", url=url
                ) from exc

        logger.debug("HTTP %s %s -> %s", request.method, url, response.status_code)

        if response.status_code < 200 or response.status_code >= 300:
            raise classify_error_body(
                response.status_code, response.reason_phrase, response.text
            )

        if not request.needs_response:
            return None

        if not response.content:
            raise DecodeError(f"Empty response body from '{url}'")
        return response.content
