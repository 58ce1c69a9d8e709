# Pilosa HTTP Client
# File: errors.py
# Version: v2

"""Typed errors raised by the Pilosa client.

Every error carries an :class:`ErrorKind` tag so callers can branch on the
category (and decide on retry policy) without comparing exception identity.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    EMPTY_CLUSTER = "EMPTY_CLUSTER"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    DECODE_ERROR = "DECODE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class PilosaError(Exception):
    """Base class for all client errors."""

    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Small, LLM-friendly error shape used by the tool layer."""
        err: Dict[str, Any] = {"code": self.kind.value, "message": self.message}
        details = self.details()
        if details:
            err["details"] = details
        return err


class EmptyClusterError(PilosaError):
    kind = ErrorKind.EMPTY_CLUSTER

    def __init__(self, message: str = "There are no addresses in the cluster") -> None:
        super().__init__(message)


class TransportError(PilosaError):
    """The HTTP exchange failed below the application layer.

    Connection refused, reset, DNS failure and timeouts all land here.
    """

    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url

    def details(self) -> Dict[str, Any]:
        return {"url": self.url} if self.url else {}


class ServerError(PilosaError):
    """Non-2xx response whose body is not a recognised server message."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        super().__init__(f"Server error ({status_code}) {reason}: {body}")
        self.status_code = status_code
        self.reason = reason
        self.body = body

    def details(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "reason": self.reason,
            "body": self.body,
        }


class AlreadyExistsError(PilosaError):
    kind = ErrorKind.ALREADY_EXISTS
    resource = "resource"

    def __init__(self, body: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{self.resource} already exists")
        self.body = body
        self.status_code = status_code

    def details(self) -> Dict[str, Any]:
        return {"resource": self.resource, "status_code": self.status_code}


class DatabaseExistsError(AlreadyExistsError):
    resource = "database"


class FrameExistsError(AlreadyExistsError):
    resource = "frame"


class DecodeError(PilosaError):
    kind = ErrorKind.DECODE_ERROR


class ValidationError(PilosaError):
    kind = ErrorKind.VALIDATION_ERROR
