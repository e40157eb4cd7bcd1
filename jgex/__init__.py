"""JanusGraph example application: the Gods of Olympus graph over Gremlin."""

__version__ = "0.1.0"
