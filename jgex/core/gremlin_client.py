"""
Gremlin Server client with a traversal connection and a script connection.

Traversals are sent as bytecode through a ``DriverRemoteConnection``; schema
management and graph drop need the server side JanusGraph API and are sent as
Groovy scripts through a ``Client``.
"""

import logging
from typing import Any, Optional

from gremlin_python.driver.client import Client
from gremlin_python.driver.driver_remote_connection import DriverRemoteConnection
from gremlin_python.process.anonymous_traversal import traversal
from gremlin_python.process.graph_traversal import GraphTraversalSource

from jgex.core.geoshape import janusgraph_message_serializer
from jgex.core.graph_config import GraphConfig
from jgex.exceptions import GraphConnectionError
from jgex.schema.management import RemoteManagement

logger = logging.getLogger(__name__)


class GremlinClient:
    """
    Gremlin Server client wrapper with connection management.

    Usage:
        client = GremlinClient(config)
        client.connect()

        g = client.traversal()
        names = g.V().values("name").to_list()

        client.close()
    """

    def __init__(self, config: GraphConfig):
        self.config = config
        self._connection: Optional[DriverRemoteConnection] = None
        self._client: Optional[Client] = None

    @property
    def url(self) -> str:
        return self.config.gremlin.url

    @property
    def graph_name(self) -> str:
        return self.config.gremlin.graph

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def _connection_options(self) -> dict[str, Any]:
        server = self.config.gremlin
        options: dict[str, Any] = {
            "message_serializer": janusgraph_message_serializer(),
            "username": server.username,
            "password": server.password,
        }
        if server.pool_size is not None:
            options["pool_size"] = server.pool_size
        return options

    def connect(self) -> None:
        """Establish both connections and verify the server answers traversals."""
        if self._connection is not None:
            return

        traversal_source = self.config.gremlin.traversal_source
        try:
            self._connection = DriverRemoteConnection(
                self.url, traversal_source, **self._connection_options()
            )
            self._client = Client(self.url, traversal_source, **self._connection_options())
            # Verify connectivity
            self.traversal().inject(1).next()
            logger.info(f"Connected to Gremlin Server at {self.url}")
        except Exception as e:
            logger.error(f"Gremlin Server unavailable at {self.url}: {e}")
            self.close()
            raise GraphConnectionError(f"Cannot connect to Gremlin Server at {self.url}: {e}") from e

    def traversal(self) -> GraphTraversalSource:
        """Traversal source bound to the remote connection."""
        if self._connection is None:
            raise GraphConnectionError("Not connected to a Gremlin Server")
        return traversal().with_remote(self._connection)

    def submit(self, script: str, bindings: Optional[dict[str, Any]] = None) -> list[Any]:
        """
        Submit a Groovy script and wait for its results.

        Args:
            script: Script evaluated on the server
            bindings: Parameters made available to the script as variables

        Returns:
            List of results
        """
        if self._client is None:
            raise GraphConnectionError("Not connected to a Gremlin Server")
        logger.debug(f"Submitting script to {self.url}: {script}")
        return self._client.submit(script, bindings or {}).all().result()

    def open_management(self) -> RemoteManagement:
        """Open a schema management transaction on the server's graph."""
        return RemoteManagement(self, self.graph_name)

    def drop_graph(self) -> None:
        """
        Drop the graph instance with all of its data and configuration.
        USE WITH CAUTION - this cannot be undone!
        """
        logger.warning(f"Dropping graph '{self.graph_name}' at {self.url}")
        self.submit(f"JanusGraphFactory.drop({self.graph_name})")

    def close(self) -> None:
        """Close the traversal connection, then the script connection."""
        try:
            if self._connection is not None:
                self._connection.close()
        except Exception as e:
            logger.error(f"Failed to close traversal connection: {e}")
        finally:
            self._connection = None

        try:
            if self._client is not None:
                self._client.close()
        except Exception as e:
            logger.error(f"Failed to close script connection: {e}")
        finally:
            self._client = None

        logger.info("Gremlin Server connections closed")
