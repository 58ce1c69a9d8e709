# Pilosa HTTP Client
# File: validator.py
# Version: v1

"""Naming rules for databases, frames and labels.

Checked locally so a bad name never costs a round trip.
"""

from __future__ import annotations

import re

from .errors import ValidationError

MAX_DATABASE_NAME = 64
MAX_FRAME_NAME = 64
MAX_LABEL = 64

_DATABASE_NAME_RE = re.compile(r"^[a-z0-9_-]+$")
_FRAME_NAME_RE = re.compile(r"^[a-z0-9][.a-z0-9_-]*$")
_LABEL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


def valid_database_name(name: str) -> bool:
    return len(name) <= MAX_DATABASE_NAME and bool(_DATABASE_NAME_RE.match(name))


def valid_frame_name(name: str) -> bool:
    return len(name) <= MAX_FRAME_NAME and bool(_FRAME_NAME_RE.match(name))


def valid_label(label: str) -> bool:
    return len(label) <= MAX_LABEL and bool(_LABEL_RE.match(label))


def validate_database_name(name: str) -> None:
    if not valid_database_name(name):
        raise ValidationError(f"Invalid database name: {name!r}")


def validate_frame_name(name: str) -> None:
    if not valid_frame_name(name):
        raise ValidationError(f"Invalid frame name: {name!r}")


def validate_label(label: str) -> None:
    if not valid_label(label):
        raise ValidationError(f"Invalid label: {label!r}")
