# Pilosa HTTP Client
# File: models.py
# Version: v3

"""Domain models used by the Pilosa client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from google.protobuf.message import DecodeError as ProtobufDecodeError

from .errors import DecodeError
from .internal import messages
from .validator import validate_database_name, validate_frame_name, validate_label

DEFAULT_COLUMN_LABEL = "profileID"
DEFAULT_ROW_LABEL = "id"


# ---------------------------------------------------------------------------
# Databases & frames
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseOptions:
    column_label: str = DEFAULT_COLUMN_LABEL

    def __post_init__(self) -> None:
        validate_label(self.column_label)


@dataclass(frozen=True)
class FrameOptions:
    row_label: str = DEFAULT_ROW_LABEL

    def __post_init__(self) -> None:
        validate_label(self.row_label)


@dataclass(frozen=True)
class Database:
    """A Pilosa database (a named group of frames)."""

    name: str
    options: DatabaseOptions = field(default_factory=DatabaseOptions)

    def __post_init__(self) -> None:
        validate_database_name(self.name)

    @classmethod
    def with_column_label(cls, name: str, column_label: str) -> "Database":
        return cls(name=name, options=DatabaseOptions(column_label=column_label))

    def frame(self, name: str, row_label: str = DEFAULT_ROW_LABEL) -> "Frame":
        return Frame(name=name, database=self, options=FrameOptions(row_label=row_label))


@dataclass(frozen=True)
class Frame:
    """A frame inside a database."""

    name: str
    database: Database
    options: FrameOptions = field(default_factory=FrameOptions)

    def __post_init__(self) -> None:
        validate_frame_name(self.name)


@dataclass
class QueryOptions:
    """Options sent along with a query."""

    # Ask the server to return profile (column) attributes.
    fetch_profiles: bool = False


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


@dataclass
class FrameInfo:
    name: str


@dataclass
class DatabaseInfo:
    name: str
    frames: List[FrameInfo] = field(default_factory=list)


@dataclass
class Schema:
    """Databases and frames as reported by ``GET /schema``."""

    dbs: List[DatabaseInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "Schema":
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected JSON object for schema, got {type(payload).__name__}."
            )

        raw_dbs = payload.get("dbs") or []
        if not isinstance(raw_dbs, list):
            raise DecodeError(f"Expected list for schema 'dbs', got {raw_dbs!r}")

        dbs: List[DatabaseInfo] = []
        for item in raw_dbs:
            if not isinstance(item, dict) or "name" not in item:
                raise DecodeError(f"Malformed database entry in schema: {item!r}")

            raw_frames = item.get("frames") or []
            if not isinstance(raw_frames, list):
                raise DecodeError(
                    f"Expected list for frames of database {item['name']!r}, got {raw_frames!r}"
                )

            frames: List[FrameInfo] = []
            for frame in raw_frames:
                if not isinstance(frame, dict) or "name" not in frame:
                    raise DecodeError(f"Malformed frame entry in schema: {frame!r}")
                frames.append(FrameInfo(name=str(frame["name"])))

            dbs.append(DatabaseInfo(name=str(item["name"]), frames=frames))

        return cls(dbs=dbs)

    def database_names(self) -> List[str]:
        return [db.name for db in self.dbs]


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


def _attrs_to_dict(attrs) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for attr in attrs:
        if attr.Type == messages.ATTR_TYPE_STRING:
            out[attr.Key] = attr.StringValue
        elif attr.Type == messages.ATTR_TYPE_INT:
            out[attr.Key] = attr.IntValue
        elif attr.Type == messages.ATTR_TYPE_BOOL:
            out[attr.Key] = attr.BoolValue
        elif attr.Type == messages.ATTR_TYPE_FLOAT:
            out[attr.Key] = attr.FloatValue
        else:
            raise DecodeError(f"Unknown attribute type {attr.Type} for key {attr.Key!r}")
    return out


@dataclass
class BitmapResult:
    bits: List[int] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CountResultItem:
    id: int
    count: int


@dataclass
class ProfileItem:
    id: int
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryResult:
    """Result of a single PQL call within a query."""

    bitmap: BitmapResult = field(default_factory=BitmapResult)
    count: int = 0
    count_items: List[CountResultItem] = field(default_factory=list)
    changed: bool = False

    @classmethod
    def from_internal(cls, result) -> "QueryResult":
        bitmap = BitmapResult()
        if result.HasField("Bitmap"):
            bitmap = BitmapResult(
                bits=list(result.Bitmap.Bits),
                attributes=_attrs_to_dict(result.Bitmap.Attrs),
            )
        return cls(
            bitmap=bitmap,
            count=result.N,
            count_items=[CountResultItem(id=p.Key, count=p.Count) for p in result.Pairs],
            changed=result.Changed,
        )


@dataclass
class QueryResponse:
    """Decoded ``/query`` response."""

    results: List[QueryResult] = field(default_factory=list)
    profiles: List[ProfileItem] = field(default_factory=list)

    # Error reported by the server inside a 2xx response.
    error_message: str = ""

    @property
    def success(self) -> bool:
        return not self.error_message

    @property
    def result(self) -> Optional[QueryResult]:
        return self.results[0] if self.results else None

    @property
    def profile(self) -> Optional[ProfileItem]:
        return self.profiles[0] if self.profiles else None

    @classmethod
    def from_internal(cls, response) -> "QueryResponse":
        return cls(
            results=[QueryResult.from_internal(r) for r in response.Results],
            profiles=[
                ProfileItem(id=p.ID, attributes=_attrs_to_dict(p.Attrs))
                for p in response.Profiles
            ],
            error_message=response.Err,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "QueryResponse":
        """Decode a protobuf ``QueryResponse`` body."""
        message = messages.QueryResponse()
        try:
            message.ParseFromString(data)
        except ProtobufDecodeError as exc:
            raise DecodeError(f"Could not decode query response: {exc}") from exc
        return cls.from_internal(message)
