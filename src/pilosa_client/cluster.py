# Pilosa HTTP Client
# File: cluster.py
# Version: v2

"""Round-robin registry of Pilosa server addresses.

Selection is blind: no health, latency or load is considered. A supervising
layer that wants to drop an unhealthy node calls :meth:`Cluster.remove_host`.

All methods take the same lock, so one ``Cluster`` may be shared by a client
that is called from several threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from .uri import URI

logger = logging.getLogger(__name__)


class Cluster:
    """Ordered list of hosts plus a rotation cursor."""

    def __init__(self, hosts: Optional[Iterable[URI]] = None) -> None:
        self._lock = threading.Lock()
        self._hosts: List[URI] = list(hosts or [])
        # Index of the host returned by the next get_host() call.
        self._next_index = 0

    @classmethod
    def with_host(cls, host: URI) -> "Cluster":
        return cls([host])

    def add_host(self, host: URI) -> None:
        with self._lock:
            self._hosts.append(host)
        logger.debug("Added host %s", host)

    def get_host(self) -> Optional[URI]:
        """Return the next host in rotation, or None if the cluster is empty."""
        with self._lock:
            if not self._hosts:
                return None
            host = self._hosts[self._next_index]
            self._next_index = (self._next_index + 1) % len(self._hosts)
            return host

    def remove_host(self, host: URI) -> None:
        """Remove the first host equal to ``host``.

        The cursor keeps pointing at the same upcoming host, so the rotation
        of the remaining hosts neither skips nor repeats anyone.
        """
        with self._lock:
            try:
                index = self._hosts.index(host)
            except ValueError:
                logger.debug("Host %s not in cluster; nothing to remove", host)
                return

            del self._hosts[index]
            if index < self._next_index:
                self._next_index -= 1
            if self._next_index >= len(self._hosts):
                self._next_index = 0
        logger.debug("Removed host %s", host)

    def get_hosts(self) -> List[URI]:
        """Return a copy of the hosts in rotation order."""
        with self._lock:
            return list(self._hosts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hosts)
