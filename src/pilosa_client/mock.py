# Pilosa HTTP Client
# File: mock.py
# Version: v2

"""Small in-memory stand-in for a Pilosa server.

Plugs into ``httpx.MockTransport`` so the real client code (headers, bodies,
status classification, decoding) runs end to end without a network. Used
when PILOSA_MOCK_MODE is truthy and throughout the tests.

Queries are not evaluated: every query against a known database answers
with a single zero-count result.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Dict, List, Optional

import httpx
from google.protobuf.message import DecodeError as ProtobufDecodeError

from .client import PROTOBUF_CONTENT_TYPE
from .internal import messages


class MockPilosaServer:
    """Keeps databases and frames in memory and records every request."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # database name -> {"column_label": str, "frames": {frame name: row label}}
        self._dbs: Dict[str, Dict[str, Any]] = {}
        self.calls: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def database_names(self) -> List[str]:
        with self._lock:
            return sorted(self._dbs)

    def handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.calls.append(request)

            path = request.url.path
            if path == "/schema" and request.method == "GET":
                return httpx.Response(200, json=self._schema_payload())
            if path == "/db" and request.method in ("POST", "DELETE"):
                return self._handle_db(request)
            if path == "/frame" and request.method in ("POST", "DELETE"):
                return self._handle_frame(request)
            if path == "/query" and request.method == "POST":
                return self._handle_query(request)

        return httpx.Response(404, text="not found\n")

    # ------------------------------------------------------------------
    # Handlers (called with the lock held)
    # ------------------------------------------------------------------

    def _schema_payload(self) -> Dict[str, Any]:
        return {
            "dbs": [
                {"name": name, "frames": [{"name": f} for f in sorted(db["frames"])]}
                for name, db in sorted(self._dbs.items())
            ]
        }

    @staticmethod
    def _json_body(request: httpx.Request) -> Optional[Dict[str, Any]]:
        try:
            payload = json.loads(request.content or b"")
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None

    def _handle_db(self, request: httpx.Request) -> httpx.Response:
        payload = self._json_body(request)
        if payload is None or not payload.get("db"):
            return httpx.Response(400, text="invalid request body\n")

        name = payload["db"]
        if request.method == "DELETE":
            if self._dbs.pop(name, None) is None:
                return httpx.Response(404, text="database not found\n")
            return httpx.Response(200)

        if name in self._dbs:
            return httpx.Response(409, text="database already exists\n")
        options = payload.get("options") or {}
        self._dbs[name] = {
            "column_label": options.get("columnLabel", ""),
            "frames": {},
        }
        return httpx.Response(200)

    def _handle_frame(self, request: httpx.Request) -> httpx.Response:
        payload = self._json_body(request)
        if payload is None or not payload.get("db") or not payload.get("frame"):
            return httpx.Response(400, text="invalid request body\n")

        db = self._dbs.get(payload["db"])
        if db is None:
            return httpx.Response(404, text="database not found\n")

        name = payload["frame"]
        if request.method == "DELETE":
            if db["frames"].pop(name, None) is None:
                return httpx.Response(404, text="frame not found\n")
            return httpx.Response(200)

        if name in db["frames"]:
            return httpx.Response(409, text="frame already exists\n")
        options = payload.get("options") or {}
        db["frames"][name] = options.get("rowLabel", "")
        return httpx.Response(200)

    def _handle_query(self, request: httpx.Request) -> httpx.Response:
        query = messages.QueryRequest()
        try:
            query.ParseFromString(request.content)
        except ProtobufDecodeError:
            return httpx.Response(400, text="invalid query request\n")

        response = messages.QueryResponse()
        if query.DB not in self._dbs:
            response.Err = "database not found"
        else:
            response.Results.add(N=0)

        return httpx.Response(
            200,
            content=response.SerializeToString(),
            headers={"Content-Type": PROTOBUF_CONTENT_TYPE},
        )
