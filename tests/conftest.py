import textwrap

import pytest

from jgex.config import Settings
from jgex.graph.app import GraphApp
from tests.fakes import FakeGraph, FakeGremlinClient

INMEMORY_CONFIG = """
gremlin:
  host: localhost
  port: 8182
  graph: graph
storage:
  backend: inmemory
"""

SEARCH_CONFIG = """
gremlin:
  host: janusgraph
  port: 8182
  graph: graph
storage:
  backend: cql
  hostname: 127.0.0.1
index:
  search:
    backend: elasticsearch
    hostname: 127.0.0.1
"""


@pytest.fixture
def write_config(tmp_path):
    def _write(content: str, name: str = "graph.yaml"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def config_file(write_config):
    return write_config(INMEMORY_CONFIG, "jgex-inmemory.yaml")


@pytest.fixture
def search_config_file(write_config):
    return write_config(SEARCH_CONFIG, "jgex-cql-es.yaml")


@pytest.fixture
def settings():
    return Settings(
        update_delay_min=0.0,
        update_delay_max=0.0,
        mixed_index_refresh_wait=0.0,
    )


@pytest.fixture
def graph():
    return FakeGraph()


@pytest.fixture
def client_factory(graph):
    clients = []

    def _factory(config):
        client = FakeGremlinClient(config, graph)
        clients.append(client)
        return client

    _factory.clients = clients
    return _factory


@pytest.fixture
def make_app(config_file, settings, client_factory):
    def _make(app_class=GraphApp, config=None, open_graph=True):
        app = app_class(config or config_file, settings=settings, client_factory=client_factory)
        if open_graph:
            app.open_graph()
        return app
    return _make
