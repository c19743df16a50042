"""Shared fixtures: an in-process Redis and worker contexts bound to it."""

import fakeredis
import pytest

from core.entities import ReaperPolicy, WorkerContext
from tests.helpers import NOW


@pytest.fixture(name="server")
def fixture_server():
    return fakeredis.FakeServer()


@pytest.fixture(name="client")
def fixture_client(server):
    client = fakeredis.FakeRedis(server=server)
    yield client
    client.close()


@pytest.fixture(name="make_client")
def fixture_make_client(server):
    """Extra connections to the same server, like peer worker processes."""
    made = []

    def _make():
        c = fakeredis.FakeRedis(server=server)
        made.append(c)
        return c

    yield _make
    for c in made:
        c.close()


@pytest.fixture(name="make_ctx")
def fixture_make_ctx(client):
    def _make(rank=0, now=NOW, **policy):
        policy.setdefault("index_key", "mtime")
        return WorkerContext(
            client=client,
            policy=ReaperPolicy(**policy),
            rank=rank,
            clock=lambda: now,
        )

    return _make
