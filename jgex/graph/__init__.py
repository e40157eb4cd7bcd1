"""Graph applications: lifecycle, sample dataset, canned traversals."""

from .app import GraphApp, ReadResult
from .janusgraph_app import JanusGraphApp

__all__ = ["GraphApp", "JanusGraphApp", "ReadResult"]
