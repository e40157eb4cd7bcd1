"""Core modules: Gremlin Server client, graph configuration, JanusGraph types."""

from .geoshape import Geoshape
from .graph_config import GraphConfig, load_graph_config
from .gremlin_client import GremlinClient

__all__ = ["Geoshape", "GraphConfig", "load_graph_config", "GremlinClient"]
