# Pilosa HTTP Client
# File: tests/test_cluster.py
# Version: v1

"""Round-robin behaviour of the host registry."""

from __future__ import annotations

import threading
from collections import Counter

import pytest

from pilosa_client.cluster import Cluster
from pilosa_client.uri import URI


def _hosts(n: int):
    return [URI(host=f"db{i}") for i in range(n)]


@pytest.mark.parametrize("n", [1, 2, 3, 5])
def test_two_rounds_return_each_host_twice_in_order(n: int) -> None:
    hosts = _hosts(n)
    cluster = Cluster(hosts)

    picked = [cluster.get_host() for _ in range(2 * n)]

    assert picked == hosts + hosts


def test_empty_cluster_returns_none() -> None:
    cluster = Cluster()
    assert cluster.get_host() is None
    assert cluster.get_host() is None
    assert len(cluster) == 0


def test_add_host_joins_rotation() -> None:
    a, b = _hosts(2)
    cluster = Cluster.with_host(a)
    assert cluster.get_host() == a

    cluster.add_host(b)
    assert cluster.get_host() == b
    assert cluster.get_host() == a


@pytest.mark.parametrize("advance", [0, 1, 2, 3])
def test_removing_next_host_continues_with_its_successor(advance: int) -> None:
    hosts = _hosts(4)
    cluster = Cluster(hosts)
    for _ in range(advance):
        cluster.get_host()

    next_up = hosts[advance % 4]
    successor = hosts[(advance + 1) % 4]

    cluster.remove_host(next_up)

    assert cluster.get_host() == successor


@pytest.mark.parametrize("advance", [0, 1, 2, 3])
@pytest.mark.parametrize("removed", [0, 1, 2, 3])
def test_remove_preserves_rotation_of_remaining_hosts(advance: int, removed: int) -> None:
    hosts = _hosts(4)
    cluster = Cluster(hosts)
    for _ in range(advance):
        cluster.get_host()

    # Order the remaining hosts would have been served in before removal.
    upcoming = [hosts[(advance + i) % 4] for i in range(4)]
    expected = [h for h in upcoming if h != hosts[removed]]

    cluster.remove_host(hosts[removed])

    assert [cluster.get_host() for _ in range(3)] == expected


def test_remove_last_host_empties_cluster() -> None:
    (a,) = _hosts(1)
    cluster = Cluster.with_host(a)
    cluster.remove_host(a)
    assert cluster.get_host() is None


def test_remove_unknown_host_is_noop() -> None:
    hosts = _hosts(2)
    cluster = Cluster(hosts)
    cluster.remove_host(URI(host="elsewhere"))
    assert cluster.get_hosts() == hosts


def test_remove_only_first_equal_host() -> None:
    a, b = _hosts(2)
    cluster = Cluster([a, b, a])
    cluster.remove_host(a)
    assert cluster.get_hosts() == [b, a]


def test_get_hosts_returns_copy() -> None:
    hosts = _hosts(2)
    cluster = Cluster(hosts)

    copy = cluster.get_hosts()
    copy.append(URI(host="intruder"))
    copy.clear()

    assert cluster.get_hosts() == hosts


def test_concurrent_get_host_is_balanced() -> None:
    hosts = _hosts(3)
    cluster = Cluster(hosts)
    picked: list = []
    lock = threading.Lock()

    def worker() -> None:
        local = [cluster.get_host() for _ in range(300)]
        with lock:
            picked.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    counts = Counter(picked)
    assert counts == {h: 400 for h in hosts}
