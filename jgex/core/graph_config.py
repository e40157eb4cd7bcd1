"""
Graph configuration models and loader.

A graph configuration file names the Gremlin Server to connect to, the
storage backend behind the graph and, optionally, the index backends that
mixed indexes can be built in. It mirrors the ``storage.*`` and
``index.<name>.*`` keys of a JanusGraph properties file, written as YAML.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from jgex.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Variable names bound on the Gremlin Server are interpolated into scripts.
IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class StorageBackend(str, Enum):
    """Storage backends supported by JanusGraph."""
    BERKELEYJE = "berkeleyje"
    CASSANDRA = "cassandra"
    CQL = "cql"
    HBASE = "hbase"
    INMEMORY = "inmemory"


class IndexBackend(str, Enum):
    """Index backends that can host mixed indexes."""
    LUCENE = "lucene"
    ELASTICSEARCH = "elasticsearch"
    SOLR = "solr"


class GremlinServerConfig(BaseModel):
    """Where the Gremlin Server hosting the graph listens."""

    host: str = "localhost"
    port: int = Field(default=8182, ge=1, le=65535)
    path: str = "/gremlin"
    scheme: str = Field(default="ws", pattern=r"^wss?$")
    traversal_source: str = Field(default="g", pattern=IDENTIFIER_PATTERN)
    graph: str = Field(
        default="graph",
        pattern=IDENTIFIER_PATTERN,
        description="Name the graph instance is bound to on the server",
    )
    username: str = ""
    password: str = ""
    pool_size: Optional[int] = Field(default=None, ge=1)

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"


class StorageConfig(BaseModel):
    """Storage backend of the graph."""

    backend: StorageBackend
    hostname: Optional[str] = None
    directory: Optional[str] = None


class IndexConfig(BaseModel):
    """An index backend, keyed by its configuration name."""

    backend: IndexBackend
    hostname: Optional[str] = None
    directory: Optional[str] = None


class GraphConfig(BaseModel):
    """Complete graph configuration loaded from YAML."""

    gremlin: GremlinServerConfig = Field(default_factory=GremlinServerConfig)
    storage: StorageConfig
    index: dict[str, IndexConfig] = Field(default_factory=dict)

    def has_index_backend(self, name: str) -> bool:
        """Whether ``index.<name>.backend`` is configured."""
        return name in self.index


def load_graph_config(path: Union[str, Path, None]) -> GraphConfig:
    """
    Load a graph configuration file.

    Args:
        path: Location of the YAML configuration file

    Returns:
        Validated GraphConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        raise ConfigurationError("No graph configuration file given")

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Graph configuration not found: {config_path}")

    logger.debug(f"Loading graph configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse graph configuration {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Graph configuration {config_path} must be a mapping")

    try:
        config = GraphConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid graph configuration {config_path}: {e}") from e

    logger.info(
        f"Graph configuration loaded: storage={config.storage.backend.value}, "
        f"index backends={sorted(config.index)}"
    )
    return config
