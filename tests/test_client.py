# Pilosa HTTP Client
# File: tests/test_client.py
# Version: v2

"""Request building and response classification in PilosaClient.

Every test runs the real client against an httpx.MockTransport, so request
headers and bodies are checked exactly as they would go on the wire.
"""

from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from pilosa_client.client import (
    PROTOBUF_CONTENT_TYPE,
    PilosaClient,
    classify_error_body,
    make_request_data,
)
from pilosa_client.cluster import Cluster
from pilosa_client.errors import (
    AlreadyExistsError,
    DatabaseExistsError,
    DecodeError,
    EmptyClusterError,
    ErrorKind,
    FrameExistsError,
    ServerError,
    TransportError,
)
from pilosa_client.internal import messages
from pilosa_client.mock import MockPilosaServer
from pilosa_client.models import Database, QueryOptions
from pilosa_client.uri import URI


class _Recorder:
    """Transport handler that records requests and answers with a fixed reply."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]) -> None:
        self.reply = reply
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)


def _client(handler, hosts=None) -> PilosaClient:
    cluster = Cluster(hosts if hosts is not None else [URI(host="db1")])
    return PilosaClient(cluster=cluster, transport=httpx.MockTransport(handler))


def _ok_query_body() -> bytes:
    response = messages.QueryResponse()
    response.Results.add(N=3)
    return response.SerializeToString()


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


def test_create_database_request() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200))
    client = _client(recorder)

    client.create_database(Database("repo"))

    (request,) = recorder.requests
    assert request.method == "POST"
    assert str(request.url) == "http://db1:10101/db"
    assert request.content == b'{"db": "repo", "options": {"columnLabel": "profileID"}}'
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Accept"] == "application/json"


def test_delete_frame_request() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200))
    client = _client(recorder)

    client.delete_frame(Database("repo").frame("stargazer", row_label="star_id"))

    (request,) = recorder.requests
    assert request.method == "DELETE"
    assert request.url.path == "/frame"
    assert request.content == (
        b'{"db": "repo", "frame": "stargazer", "options": {"rowLabel": "star_id"}}'
    )


def test_query_request_is_protobuf() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200, content=_ok_query_body()))
    client = _client(recorder)

    response = client.query(Database("repo"), "Count(Bitmap(id=1))", QueryOptions(fetch_profiles=True))

    (request,) = recorder.requests
    assert request.method == "POST"
    assert request.url.path == "/query"
    assert request.headers["Content-Type"] == "application/x-protobuf"
    assert request.headers["Accept"] == "application/x-protobuf"

    sent = messages.QueryRequest()
    sent.ParseFromString(request.content)
    assert sent.DB == "repo"
    assert sent.Query == "Count(Bitmap(id=1))"
    assert sent.Profiles is True

    assert response.result.count == 3


def test_query_request_round_trip() -> None:
    data = make_request_data("x", "Bitmap(id=1)", QueryOptions(fetch_profiles=False))

    decoded = messages.QueryRequest()
    decoded.ParseFromString(data)

    assert (decoded.DB, decoded.Query, decoded.Profiles) == ("x", "Bitmap(id=1)", False)


def test_schema_request_and_decode() -> None:
    payload = {"dbs": [{"name": "repo", "frames": [{"name": "stargazer"}]}]}
    recorder = _Recorder(lambda r: httpx.Response(200, json=payload))
    client = _client(recorder)

    schema = client.schema()

    (request,) = recorder.requests
    assert request.method == "GET"
    assert request.url.path == "/schema"
    assert request.content == b""
    assert request.headers["Accept"] == "application/json"
    assert schema.database_names() == ["repo"]
    assert schema.dbs[0].frames[0].name == "stargazer"


def test_requests_rotate_across_hosts() -> None:
    payload = {"dbs": []}
    recorder = _Recorder(lambda r: httpx.Response(200, json=payload))
    client = _client(recorder, hosts=[URI(host="db1"), URI(host="db2"), URI(host="db3", port=9000)])

    for _ in range(4):
        client.schema()

    assert [f"{r.url.host}:{r.url.port}" for r in recorder.requests] == [
        "db1:10101",
        "db2:10101",
        "db3:9000",
        "db1:10101",
    ]


def test_https_and_codec_scheme_are_normalized() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200, json={"dbs": []}))
    client = _client(recorder, hosts=[URI.from_address("https+protobuf://db1:10111")])

    client.schema()

    assert str(recorder.requests[0].url) == "https://db1:10111/schema"


def test_timeout_defaults_to_config_and_can_be_overridden() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200, json={"dbs": []}))
    client = _client(recorder)

    client.schema()
    client.schema(timeout=2.5)

    assert recorder.requests[0].extensions["timeout"]["read"] == 30.0
    assert recorder.requests[1].extensions["timeout"]["read"] == 2.5


# ---------------------------------------------------------------------------
# Outcome classification
# ---------------------------------------------------------------------------


def test_empty_cluster_fails_without_io() -> None:
    recorder = _Recorder(lambda r: httpx.Response(200, content=_ok_query_body()))
    client = _client(recorder, hosts=[])

    with pytest.raises(EmptyClusterError) as excinfo:
        client.query(Database("repo"), "Bitmap(id=1)")

    assert excinfo.value.kind is ErrorKind.EMPTY_CLUSTER
    assert recorder.requests == []


def test_database_already_exists_is_classified() -> None:
    client = _client(lambda r: httpx.Response(409, text="database already exists\n"))

    with pytest.raises(DatabaseExistsError) as excinfo:
        client.create_database(Database("repo"))

    assert excinfo.value.kind is ErrorKind.ALREADY_EXISTS
    assert excinfo.value.status_code == 409


def test_frame_already_exists_is_classified_for_frames() -> None:
    client = _client(lambda r: httpx.Response(409, text="frame already exists\n"))

    with pytest.raises(FrameExistsError) as excinfo:
        client.create_frame(Database("repo").frame("stargazer"))

    assert not isinstance(excinfo.value, DatabaseExistsError)
    assert excinfo.value.resource == "frame"


def test_already_exists_match_is_exact() -> None:
    client = _client(lambda r: httpx.Response(409, text="database already exists"))

    with pytest.raises(ServerError) as excinfo:
        client.create_database(Database("repo"))

    assert excinfo.value.kind is ErrorKind.SERVER_ERROR


def test_server_error_carries_status_reason_and_body() -> None:
    client = _client(lambda r: httpx.Response(500, text="boom\n"))

    with pytest.raises(ServerError) as excinfo:
        client.delete_database(Database("repo"))

    err = excinfo.value
    assert err.status_code == 500
    assert err.reason == "Internal Server Error"
    assert err.body == "boom\n"
    assert err.to_dict()["details"] == {
        "status_code": 500,
        "reason": "Internal Server Error",
        "body": "boom\n",
    }


def test_classify_error_body_helper() -> None:
    assert isinstance(classify_error_body(409, "Conflict", "frame already exists\n"), FrameExistsError)
    assert isinstance(classify_error_body(409, "Conflict", "database already exists\n"), DatabaseExistsError)
    assert isinstance(classify_error_body(400, "Bad Request", "nope"), ServerError)


def test_connection_failure_is_transport_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(refuse)

    with pytest.raises(TransportError) as excinfo:
        client.schema()

    assert excinfo.value.kind is ErrorKind.TRANSPORT_ERROR
    assert excinfo.value.url == "http://db1:10101/schema"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_timeout_is_transport_error() -> None:
    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(stall)

    with pytest.raises(TransportError):
        client.query(Database("repo"), "Bitmap(id=1)", timeout=0.01)


def test_failed_call_is_not_retried_on_another_host() -> None:
    recorder = _Recorder(lambda r: httpx.Response(503, text="unavailable\n"))
    client = _client(recorder, hosts=[URI(host="db1"), URI(host="db2")])

    with pytest.raises(ServerError):
        client.schema()

    assert len(recorder.requests) == 1


def test_truncated_query_body_is_decode_error() -> None:
    client = _client(lambda r: httpx.Response(200, content=b"\x12\x05\x10"))

    with pytest.raises(DecodeError) as excinfo:
        client.query(Database("repo"), "Bitmap(id=1)")

    assert excinfo.value.kind is ErrorKind.DECODE_ERROR


def test_empty_query_body_is_decode_error() -> None:
    client = _client(lambda r: httpx.Response(200))

    with pytest.raises(DecodeError):
        client.query(Database("repo"), "Bitmap(id=1)")


def test_malformed_schema_is_decode_error() -> None:
    client = _client(lambda r: httpx.Response(200, text="{not json"))

    with pytest.raises(DecodeError):
        client.schema()


@pytest.mark.parametrize(
    "payload",
    [{"dbs": 5}, {"dbs": True}, {"dbs": [{"name": "repo", "frames": 7}]}],
)
def test_wrongly_shaped_schema_is_decode_error(payload) -> None:
    client = _client(lambda r: httpx.Response(200, json=payload))

    with pytest.raises(DecodeError) as excinfo:
        client.schema()

    assert excinfo.value.kind is ErrorKind.DECODE_ERROR


def test_admin_calls_ignore_response_body() -> None:
    client = _client(lambda r: httpx.Response(200))
    assert client.create_database(Database("repo")) is None


# ---------------------------------------------------------------------------
# ensure_* helpers
# ---------------------------------------------------------------------------


def test_ensure_database_exists_swallows_duplicate() -> None:
    client = _client(lambda r: httpx.Response(409, text="database already exists\n"))
    client.ensure_database_exists(Database("repo"))


def test_ensure_frame_exists_swallows_duplicate() -> None:
    client = _client(lambda r: httpx.Response(409, text="frame already exists\n"))
    client.ensure_frame_exists(Database("repo").frame("stargazer"))


def test_ensure_frame_exists_does_not_swallow_database_duplicate() -> None:
    client = _client(lambda r: httpx.Response(409, text="database already exists\n"))

    with pytest.raises(AlreadyExistsError):
        client.ensure_frame_exists(Database("repo").frame("stargazer"))


def test_ensure_database_exists_propagates_other_errors() -> None:
    client = _client(lambda r: httpx.Response(500, text="disk full\n"))

    with pytest.raises(ServerError):
        client.ensure_database_exists(Database("repo"))


# ---------------------------------------------------------------------------
# End to end against the in-memory server
# ---------------------------------------------------------------------------


def test_lifecycle_against_mock_server() -> None:
    server = MockPilosaServer()
    client = PilosaClient(cluster=Cluster([URI(host="db1")]), transport=server.transport())

    db = Database("repo")
    frame = db.frame("stargazer")

    client.create_database(db)
    client.create_frame(frame)
    with pytest.raises(FrameExistsError):
        client.create_frame(frame)

    schema = client.schema()
    assert schema.database_names() == ["repo"]
    assert [f.name for f in schema.dbs[0].frames] == ["stargazer"]

    response = client.query(db, "Count(Bitmap(id=1, frame='stargazer'))")
    assert response.success is True
    assert response.result.count == 0

    client.delete_frame(frame)
    client.delete_database(db)
    assert client.schema().dbs == []

    missing = client.query(db, "Bitmap(id=1)")
    assert missing.success is False
    assert missing.error_message == "database not found"

    assert len(server.calls) == 9


def test_mock_server_answers_queries_with_client_content_type() -> None:
    server = MockPilosaServer()
    client = PilosaClient(cluster=Cluster([URI(host="db1")]), transport=server.transport())
    client.create_database(Database("repo"))

    request = httpx.Request(
        "POST",
        "http://db1:10101/query",
        content=make_request_data("repo", "Bitmap(id=1)", QueryOptions()),
        headers={"Content-Type": PROTOBUF_CONTENT_TYPE},
    )
    response = server.handle(request)

    assert response.status_code == 200
    assert response.headers["Content-Type"] == PROTOBUF_CONTENT_TYPE == "application/x-protobuf"
