# Pilosa HTTP Client
# File: internal/messages.py
# Version: v1

"""Protobuf messages spoken on the ``/query`` endpoint.

The schema is declared here as a ``FileDescriptorProto`` and turned into
message classes by the protobuf runtime, so no generated ``*_pb2`` module
needs to be kept in sync with a ``.proto`` file.

Equivalent ``.proto`` (package ``internal``, proto3)::

    message Attr {
        string Key = 1; uint64 Type = 2; string StringValue = 3;
        int64 IntValue = 4; bool BoolValue = 5; double FloatValue = 6;
    }
    message Bitmap   { repeated uint64 Bits = 1; repeated Attr Attrs = 2; }
    message Profile  { uint64 ID = 1; repeated Attr Attrs = 2; }
    message Pair     { uint64 Key = 1; uint64 Count = 2; }
    message QueryRequest {
        string DB = 1; string Query = 2; repeated uint64 Slices = 3;
        bool Profiles = 4; string Quantum = 5; bool Remote = 6;
    }
    message QueryResult {
        Bitmap Bitmap = 1; uint64 N = 2; repeated Pair Pairs = 3; bool Changed = 4;
    }
    message QueryResponse {
        string Err = 1; repeated QueryResult Results = 2; repeated Profile Profiles = 3;
    }
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_PACKAGE = "internal"

_F = descriptor_pb2.FieldDescriptorProto

# Attr.Type values
ATTR_TYPE_STRING = 1
ATTR_TYPE_INT = 2
ATTR_TYPE_BOOL = 3
ATTR_TYPE_FLOAT = 4

# (message name, [(field name, number, type, repeated, message type name)])
_SCHEMA = [
    (
        "Attr",
        [
            ("Key", 1, _F.TYPE_STRING, False, None),
            ("Type", 2, _F.TYPE_UINT64, False, None),
            ("StringValue", 3, _F.TYPE_STRING, False, None),
            ("IntValue", 4, _F.TYPE_INT64, False, None),
            ("BoolValue", 5, _F.TYPE_BOOL, False, None),
            ("FloatValue", 6, _F.TYPE_DOUBLE, False, None),
        ],
    ),
    (
        "Bitmap",
        [
            ("Bits", 1, _F.TYPE_UINT64, True, None),
            ("Attrs", 2, _F.TYPE_MESSAGE, True, "Attr"),
        ],
    ),
    (
        "Profile",
        [
            ("ID", 1, _F.TYPE_UINT64, False, None),
            ("Attrs", 2, _F.TYPE_MESSAGE, True, "Attr"),
        ],
    ),
    (
        "Pair",
        [
            ("Key", 1, _F.TYPE_UINT64, False, None),
            ("Count", 2, _F.TYPE_UINT64, False, None),
        ],
    ),
    (
        "QueryRequest",
        [
            ("DB", 1, _F.TYPE_STRING, False, None),
            ("Query", 2, _F.TYPE_STRING, False, None),
            ("Slices", 3, _F.TYPE_UINT64, True, None),
            ("Profiles", 4, _F.TYPE_BOOL, False, None),
            ("Quantum", 5, _F.TYPE_STRING, False, None),
            ("Remote", 6, _F.TYPE_BOOL, False, None),
        ],
    ),
    (
        "QueryResult",
        [
            ("Bitmap", 1, _F.TYPE_MESSAGE, False, "Bitmap"),
            ("N", 2, _F.TYPE_UINT64, False, None),
            ("Pairs", 3, _F.TYPE_MESSAGE, True, "Pair"),
            ("Changed", 4, _F.TYPE_BOOL, False, None),
        ],
    ),
    (
        "QueryResponse",
        [
            ("Err", 1, _F.TYPE_STRING, False, None),
            ("Results", 2, _F.TYPE_MESSAGE, True, "QueryResult"),
            ("Profiles", 3, _F.TYPE_MESSAGE, True, "Profile"),
        ],
    ),
]


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="pilosa_client/internal/public.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _SCHEMA:
        message = file_proto.message_type.add(name=message_name)
        for name, number, field_type, repeated, type_name in fields:
            field = message.field.add(
                name=name,
                number=number,
                type=field_type,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name:
                field.type_name = f".{_PACKAGE}.{type_name}"
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(
        _POOL.FindMessageTypeByName(f"{_PACKAGE}.{name}")
    )


Attr = _message_class("Attr")
Bitmap = _message_class("Bitmap")
Profile = _message_class("Profile")
Pair = _message_class("Pair")
QueryRequest = _message_class("QueryRequest")
QueryResult = _message_class("QueryResult")
QueryResponse = _message_class("QueryResponse")
