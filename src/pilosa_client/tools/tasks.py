# Pilosa HTTP Client
# File: tools/tasks.py
# Version: v3
#
# NOTE: This module is the single place where client operations are exposed
# as MCP tools.  The stdio transport simply calls `register_tools(server)`.

from __future__ import annotations

import asyncio
import time
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from ..client import PilosaClient
from ..config import PilosaConfig
from ..errors import PilosaError
from ..mock import MockPilosaServer
from ..models import (
    DEFAULT_COLUMN_LABEL,
    DEFAULT_ROW_LABEL,
    Database,
    QueryOptions,
)


# ---------------------------------------------------------------------------
# Internal helpers (error shape, shared client, mock server)
# ---------------------------------------------------------------------------


def _make_error(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Small, LLM-friendly error shape used by diagnostics."""
    err: Dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return err


def _error_from_exception(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, PilosaError):
        return exc.to_dict()
    return _make_error("CONFIG_ERROR", str(exc))


_MOCK_SERVER: MockPilosaServer | None = None

_CLIENT: PilosaClient | None = None
_CLIENT_SIGNATURE: tuple | None = None


def _get_mock_server() -> MockPilosaServer:
    global _MOCK_SERVER

    if _MOCK_SERVER is None:
        _MOCK_SERVER = MockPilosaServer()
    return _MOCK_SERVER


def _make_client(cfg: Optional[PilosaConfig] = None) -> PilosaClient:
    """Return the shared PilosaClient for the current environment.

    The client (and with it the cluster's rotation cursor) is reused while
    the configuration stays the same. If PILOSA_MOCK_MODE is truthy the
    client talks to an in-process MockPilosaServer.

    Note: Callers should prefer invoking this with *no arguments* to keep
    unit tests monkeypatch-friendly (tests often replace _make_client with
    a no-arg lambda).
    """
    global _CLIENT, _CLIENT_SIGNATURE

    cfg = cfg or PilosaConfig.from_env()
    signature = (
        tuple(cfg.addresses),
        int(cfg.timeout_seconds),
        bool(cfg.verify_tls),
        bool(cfg.mock_mode),
    )
    if _CLIENT is None or _CLIENT_SIGNATURE != signature:
        transport = _get_mock_server().transport() if cfg.mock_mode else None
        _CLIENT = PilosaClient.from_config(cfg, transport=transport)
        _CLIENT_SIGNATURE = signature
    return _CLIENT


def _schema_to_dict(schema) -> List[Dict[str, Any]]:
    return [
        {"name": db.name, "frames": [f.name for f in db.frames]}
        for db in schema.dbs
    ]


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
#
# The client is blocking; every network call runs in a worker thread so the
# MCP event loop stays responsive.
# ---------------------------------------------------------------------------


async def ping() -> Dict[str, Any]:
    client = _make_client()
    return {"ok": len(client.cluster) > 0}


async def cluster_info() -> Dict[str, Any]:
    cfg = PilosaConfig.from_env()
    client = _make_client()
    hosts = [h.normalized_address for h in client.cluster.get_hosts()]
    return {
        "hosts": hosts,
        "timeout_seconds": cfg.timeout_seconds,
        "verify_tls": cfg.verify_tls,
        "mock_mode": cfg.mock_mode,
    }


async def get_schema() -> Dict[str, Any]:
    client = _make_client()
    schema = await asyncio.to_thread(client.schema)
    dbs = _schema_to_dict(schema)
    return {
        "summary": f"Found {len(dbs)} Pilosa databases.",
        "data": dbs,
        "meta": {"count": len(dbs)},
    }


async def create_database(
    name: str, column_label: str = DEFAULT_COLUMN_LABEL
) -> Dict[str, Any]:
    client = _make_client()
    db = Database.with_column_label(name, column_label)
    await asyncio.to_thread(client.create_database, db)
    return {
        "summary": f"Created database '{name}'.",
        "data": {"database": name, "column_label": column_label},
        "meta": {},
    }


async def ensure_database(
    name: str, column_label: str = DEFAULT_COLUMN_LABEL
) -> Dict[str, Any]:
    client = _make_client()
    db = Database.with_column_label(name, column_label)
    await asyncio.to_thread(client.ensure_database_exists, db)
    return {
        "summary": f"Database '{name}' exists.",
        "data": {"database": name, "column_label": column_label},
        "meta": {},
    }


async def delete_database(name: str) -> Dict[str, Any]:
    client = _make_client()
    await asyncio.to_thread(client.delete_database, Database(name))
    return {
        "summary": f"Deleted database '{name}'.",
        "data": {"database": name},
        "meta": {},
    }


async def create_frame(
    database: str, name: str, row_label: str = DEFAULT_ROW_LABEL
) -> Dict[str, Any]:
    client = _make_client()
    frame = Database(database).frame(name, row_label=row_label)
    await asyncio.to_thread(client.create_frame, frame)
    return {
        "summary": f"Created frame '{name}' in database '{database}'.",
        "data": {"database": database, "frame": name, "row_label": row_label},
        "meta": {},
    }


async def ensure_frame(
    database: str, name: str, row_label: str = DEFAULT_ROW_LABEL
) -> Dict[str, Any]:
    client = _make_client()
    frame = Database(database).frame(name, row_label=row_label)
    await asyncio.to_thread(client.ensure_frame_exists, frame)
    return {
        "summary": f"Frame '{name}' exists in database '{database}'.",
        "data": {"database": database, "frame": name, "row_label": row_label},
        "meta": {},
    }


async def delete_frame(database: str, name: str) -> Dict[str, Any]:
    client = _make_client()
    frame = Database(database).frame(name)
    await asyncio.to_thread(client.delete_frame, frame)
    return {
        "summary": f"Deleted frame '{name}' from database '{database}'.",
        "data": {"database": database, "frame": name},
        "meta": {},
    }


async def run_query(
    database: str,
    query: str,
    fetch_profiles: bool = False,
) -> Dict[str, Any]:
    started = time.time()
    client = _make_client()
    options = QueryOptions(fetch_profiles=fetch_profiles)
    response = await asyncio.to_thread(client.query, Database(database), query, options)

    results = [asdict(r) for r in response.results]
    profiles = [asdict(p) for p in response.profiles]

    if response.success:
        summary = f"Query returned {len(results)} result(s)."
    else:
        summary = f"Query failed: {response.error_message}"

    return {
        "summary": summary,
        "ok": response.success,
        "data": {"results": results, "profiles": profiles},
        "error": _make_error("QUERY_ERROR", response.error_message)
        if not response.success
        else None,
        "meta": {
            "database": database,
            "fetch_profiles": fetch_profiles,
            "elapsed_ms": int((time.time() - started) * 1000),
        },
    }


async def diagnostics() -> Dict[str, Any]:
    started = time.time()
    cfg = PilosaConfig.from_env()

    checks: List[Dict[str, Any]] = []
    overall_ok = True

    # Client init
    t0 = time.time()
    try:
        client = _make_client()
        checks.append(
            {"name": "client_init", "ok": True, "error": None, "elapsed_ms": int((time.time() - t0) * 1000)}
        )
    except Exception as exc:
        checks.append(
            {
                "name": "client_init",
                "ok": False,
                "error": _error_from_exception(exc),
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )
        return {
            "ok": False,
            "mock_mode": cfg.mock_mode,
            "checks": checks,
            "meta": {"elapsed_ms": int((time.time() - started) * 1000)},
        }

    # Schema round trip against the next host in rotation
    t0 = time.time()
    try:
        schema = await asyncio.to_thread(client.schema)
        checks.append(
            {
                "name": "schema",
                "ok": True,
                "count": len(schema.dbs),
                "error": None,
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )
    except PilosaError as exc:
        overall_ok = False
        checks.append(
            {
                "name": "schema",
                "ok": False,
                "error": exc.to_dict(),
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )

    return {
        "ok": overall_ok,
        "mock_mode": cfg.mock_mode,
        "hosts": [h.normalized_address for h in client.cluster.get_hosts()],
        "checks": checks,
        "meta": {"elapsed_ms": int((time.time() - started) * 1000)},
    }


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any) -> None:
    """Register MCP tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(name="pilosa_ping", description="Check that at least one Pilosa host is configured.")
    async def mcp_ping() -> Dict[str, Any]:
        return await ping()

    @server.tool(name="pilosa_cluster_info", description="Show the configured Pilosa hosts and client settings.")
    async def mcp_cluster_info() -> Dict[str, Any]:
        return await cluster_info()

    @server.tool(name="pilosa_get_schema", description="List Pilosa databases and their frames.")
    async def mcp_get_schema() -> Dict[str, Any]:
        return await get_schema()

    @server.tool(name="pilosa_create_database", description="Create a Pilosa database.")
    async def mcp_create_database(name: str, column_label: str = DEFAULT_COLUMN_LABEL) -> Dict[str, Any]:
        return await create_database(name=name, column_label=column_label)

    @server.tool(name="pilosa_ensure_database", description="Create a Pilosa database unless it already exists.")
    async def mcp_ensure_database(name: str, column_label: str = DEFAULT_COLUMN_LABEL) -> Dict[str, Any]:
        return await ensure_database(name=name, column_label=column_label)

    @server.tool(name="pilosa_delete_database", description="Delete a Pilosa database.")
    async def mcp_delete_database(name: str) -> Dict[str, Any]:
        return await delete_database(name=name)

    @server.tool(name="pilosa_create_frame", description="Create a frame in a Pilosa database.")
    async def mcp_create_frame(database: str, name: str, row_label: str = DEFAULT_ROW_LABEL) -> Dict[str, Any]:
        return await create_frame(database=database, name=name, row_label=row_label)

    @server.tool(name="pilosa_ensure_frame", description="Create a frame unless it already exists.")
    async def mcp_ensure_frame(database: str, name: str, row_label: str = DEFAULT_ROW_LABEL) -> Dict[str, Any]:
        return await ensure_frame(database=database, name=name, row_label=row_label)

    @server.tool(name="pilosa_delete_frame", description="Delete a frame from a Pilosa database.")
    async def mcp_delete_frame(database: str, name: str) -> Dict[str, Any]:
        return await delete_frame(database=database, name=name)

    @server.tool(name="pilosa_query", description="Run a PQL query against a Pilosa database.")
    async def mcp_query(database: str, query: str, fetch_profiles: bool = False) -> Dict[str, Any]:
        return await run_query(database=database, query=query, fetch_profiles=fetch_profiles)

    @server.tool(name="pilosa_diagnostics", description="Run a schema round trip and report client health.")
    async def mcp_diagnostics() -> Dict[str, Any]:
        return await diagnostics()
