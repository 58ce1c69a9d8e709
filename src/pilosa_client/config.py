# Pilosa HTTP Client
# File: config.py
# Version: v2

"""Configuration loading for the Pilosa client."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List

from .uri import URI

DEFAULT_ADDRESS = "http://localhost:10101"


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def _parse_list_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        raw = default
    items = [p.strip() for p in raw.split(",")]
    return [p for p in items if p]


@dataclass
class PilosaConfig:
    """Settings used to build a client.

    TLS settings are whatever httpx does with ``verify_tls``; nothing else
    about the transport is configured here.
    """

    addresses: List[str] = field(default_factory=lambda: [DEFAULT_ADDRESS])
    timeout_seconds: int = 30
    verify_tls: bool = True

    # Tool layer only: talk to an in-process fake server.
    mock_mode: bool = False

    @classmethod
    def from_env(cls) -> "PilosaConfig":
        """Create configuration from environment variables."""
        addresses = _parse_list_env("PILOSA_ADDRESSES", DEFAULT_ADDRESS)
        timeout_seconds = _parse_int_env(
            "PILOSA_TIMEOUT_SECONDS", default=30, min_value=1, max_value=3600
        )
        verify_tls = _parse_bool_env("PILOSA_VERIFY_TLS", default=True)
        mock_mode = _parse_bool_env("PILOSA_MOCK_MODE", default=False)

        return cls(
            addresses=addresses,
            timeout_seconds=timeout_seconds,
            verify_tls=verify_tls,
            mock_mode=mock_mode,
        )

    def uris(self) -> List[URI]:
        return [URI.from_address(a) for a in self.addresses]
