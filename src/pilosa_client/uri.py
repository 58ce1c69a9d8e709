# Pilosa HTTP Client
# File: uri.py
# Version: v2

"""Server address value used by the cluster and the client."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ValidationError

DEFAULT_SCHEME = "http"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 10101

_ADDRESS_RE = re.compile(r"^(([+a-z]+)://)?([0-9a-z.-]+)?(:([0-9]+))?$")


@dataclass(frozen=True)
class URI:
    """A Pilosa server address: scheme, host and port.

    The scheme may carry a codec suffix (``http+protobuf``); only the part
    before ``+`` is used on the wire.
    """

    scheme: str = DEFAULT_SCHEME
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_address(cls, address: str) -> "URI":
        """Parse ``scheme://host:port``; every part is optional.

        Examples: ``db1``, ``:15000``, ``https://db1:10111``.
        """
        match = _ADDRESS_RE.match(address.strip())
        if match is None:
            raise ValidationError(f"Invalid address: {address!r}")

        scheme = match.group(2) or DEFAULT_SCHEME
        host = match.group(3) or DEFAULT_HOST
        port = int(match.group(5)) if match.group(5) else DEFAULT_PORT
        if not 1 <= port <= 65535:
            raise ValidationError(f"Invalid port in address {address!r}: {port}")
        return cls(scheme=scheme, host=host, port=port)

    @property
    def normalized_address(self) -> str:
        scheme = self.scheme.split("+", 1)[0]
        return f"{scheme}://{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.normalized_address
