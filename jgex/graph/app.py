"""
Graph application base.

Opens a graph through a Gremlin Server, loads the Gods of Olympus dataset and
runs a handful of read, update and delete traversals against it.
"""

import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from gremlin_python.process.graph_traversal import GraphTraversalSource
from gremlin_python.process.traversal import P, WithOptions

from jgex.config import Settings, get_settings
from jgex.core.geoshape import Geoshape
from jgex.core.graph_config import GraphConfig, load_graph_config
from jgex.core.gremlin_client import GremlinClient
from jgex.exceptions import GraphConnectionError, MutationError, QueryError
from jgex.graph.dataset import (
    AGE,
    BATTLED,
    BROTHER,
    EDGES,
    NAME,
    PLACE,
    SENTINEL_NAME,
    TIMESTAMP,
    VERTICES,
    EdgeSpec,
)

logger = logging.getLogger(__name__)


@dataclass
class ReadResult:
    """What one pass of ``GraphApp.read_elements`` found."""

    jupiter: Optional[dict] = None
    battle: Optional[dict] = None
    ages: list[Any] = field(default_factory=list)
    pluto_exists: bool = False
    brothers: list[Any] = field(default_factory=list)


class GraphApp:
    """
    Graph application over a Gremlin traversal source.

    The base application does not define a schema, has no transactions and
    stores battle places as ``[lat, lon]`` lists. Subclasses switch these on
    for stores that support them.

    Usage:
        app = GraphApp("conf/jgex-inmemory.yaml")
        app.run_app()
    """

    supports_transactions: bool = False
    supports_schema: bool = False
    supports_geoshape: bool = False

    def __init__(
        self,
        config_file: Union[str, Path, None],
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[[GraphConfig], GremlinClient]] = None,
    ):
        self.config_file = config_file
        self.settings = settings or get_settings()
        self.client_factory = client_factory or GremlinClient
        self.config: Optional[GraphConfig] = None
        self.client: Optional[GremlinClient] = None
        self.g: Optional[GraphTraversalSource] = None
        self._tx = None
        self._gtx: Optional[GraphTraversalSource] = None
        self._last_ts = 0

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    def configure(self) -> GraphConfig:
        """Load the graph configuration file."""
        self.config = load_graph_config(self.config_file)
        return self.config

    def open_graph(self) -> GraphTraversalSource:
        """
        Open the graph instance.

        Raises:
            ConfigurationError: If the configuration file cannot be loaded
            GraphConnectionError: If the Gremlin Server cannot be reached
        """
        logger.info("Opening graph")
        config = self.configure()
        client = self.client_factory(config)
        client.connect()
        self.client = client
        self.g = client.traversal()
        return self.g

    def close_graph(self) -> None:
        """Close the graph instance. Failures are logged, references are always released."""
        logger.info("Closing graph")
        try:
            self._rollback()
        finally:
            self.g = None

        try:
            if self.client is not None:
                self.client.close()
        except Exception as e:
            logger.error(f"Failed to close graph client: {e}")
        finally:
            self.client = None

    def drop_graph(self) -> None:
        """Drop the graph instance. The default implementation does nothing."""

    def create_schema(self) -> bool:
        """Create the graph schema. The default implementation does nothing."""
        return False

    # =========================================================================
    # Transactions
    # =========================================================================

    def _source(self) -> GraphTraversalSource:
        """
        Traversal source for the current unit of work.

        With transactions the first call opens one, which stays open until
        ``_commit`` or ``_rollback``. At most one transaction is open at a time.
        """
        if self.g is None:
            raise GraphConnectionError("Graph is not open")
        if not self.supports_transactions:
            return self.g
        if self._tx is None:
            tx = self.g.tx()
            gtx = tx.begin()
            self._tx, self._gtx = tx, gtx
        return self._gtx

    def _commit(self) -> None:
        """
        Commit the open transaction, if any.

        Raises:
            MutationError: If the commit fails. The transaction is rolled
                back before the error is raised.
        """
        if self._tx is None:
            return
        tx, self._tx, self._gtx = self._tx, None, None
        try:
            tx.commit()
        except Exception as e:
            self._rollback_transaction(tx)
            raise MutationError(f"Failed to commit transaction: {e}") from e

    def _rollback(self) -> None:
        if self._tx is None:
            return
        tx, self._tx, self._gtx = self._tx, None, None
        self._rollback_transaction(tx)

    @staticmethod
    def _rollback_transaction(tx) -> None:
        try:
            tx.rollback()
        except Exception as e:
            logger.error(f"Failed to roll back transaction: {e}")

    @contextmanager
    def _reading(self, action: str) -> Iterator[GraphTraversalSource]:
        try:
            yield self._source()
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"Failed to {action}: {e}") from e
        finally:
            # the server opens a transaction for any graph interaction, so
            # finish it even for read-only traversals
            self._rollback()

    @contextmanager
    def _mutating(self, action: str) -> Iterator[None]:
        """Failures inside the block are rolled back and logged, not raised."""
        try:
            yield
        except Exception as e:
            self._rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)

    # =========================================================================
    # Create
    # =========================================================================

    def create_elements(self) -> bool:
        """
        Add the Gods of Olympus vertices, edges and properties to the graph.

        Returns:
            True if the dataset was created, False if it already existed or
            the creation failed and was rolled back
        """
        if self.g is None:
            return False

        with self._mutating("create elements"):
            g = self._source()
            # naive check if the graph was previously created
            if g.V().has(NAME, SENTINEL_NAME).has_next():
                self._rollback()
                return False

            logger.info("Creating elements")
            vertices = {}
            for spec in VERTICES:
                t = g.add_v(spec.label)
                for key, value in spec.properties().items():
                    t = t.property(key, value)
                vertices[spec.name] = t.next()

            for spec in EDGES:
                t = (
                    g.V(vertices[spec.out_name]).as_("a")
                    .V(vertices[spec.in_name]).add_e(spec.label).from_("a")
                )
                for key, value in self._edge_properties(spec).items():
                    t = t.property(key, value)
                t.next()

            self._commit()
            logger.info(f"Created {len(VERTICES)} vertices and {len(EDGES)} edges")
            return True
        return False

    def _edge_properties(self, spec: EdgeSpec) -> dict[str, Any]:
        properties = dict(spec.properties)
        if spec.place is not None:
            properties[PLACE] = self._place_value(*spec.place)
        return properties

    def _place_value(self, latitude: float, longitude: float) -> Any:
        """A geographic point, or ``[lat, lon]`` when the store has no geoshape type."""
        if self.supports_geoshape:
            return Geoshape.point(latitude, longitude)
        return [latitude, longitude]

    # =========================================================================
    # Read
    # =========================================================================

    def find_vertex(self, name: str) -> Optional[dict]:
        """All properties, with id and label, of the vertex named ``name``."""
        with self._reading(f"look up {name}") as g:
            found = g.V().has(NAME, name).limit(1).value_map().with_(WithOptions.tokens).to_list()
        if not found:
            logger.warning(f"{name} not found")
            return None
        return found[0]

    def find_edge(self, out_name: str, label: str, in_name: str) -> Optional[dict]:
        """Properties, with id and label, of the ``label`` edge from ``out_name`` to ``in_name``."""
        with self._reading(f"look up {out_name} {label} {in_name}") as g:
            found = (
                g.V().has(NAME, out_name).out_e(label).as_("e")
                .in_v().has(NAME, in_name)
                .select("e").limit(1).value_map().with_(WithOptions.tokens)
                .to_list()
            )
        if not found:
            logger.warning(f"{out_name} {label} {in_name} not found")
            return None
        return found[0]

    def find_ages(self, min_age: int) -> list[Any]:
        """Ages of all vertices at least ``min_age`` old."""
        with self._reading(f"find ages >= {min_age}") as g:
            return g.V().has(AGE, P.gte(min_age)).values(AGE).to_list()

    def vertex_exists(self, name: str) -> bool:
        with self._reading(f"check {name}") as g:
            exists = g.V().has(NAME, name).has_next()
        if not exists:
            logger.warning(f"{name} not found")
        return exists

    def find_neighbors(self, name: str, label: str) -> list[Any]:
        """Distinct names of the vertices joined to ``name`` by ``label`` edges in either direction."""
        with self._reading(f"find {label} of {name}") as g:
            return g.V().has(NAME, name).both(label).values(NAME).dedup().to_list()

    def read_elements(self) -> Optional[ReadResult]:
        """
        Run the canned traversal queries.

        Raises:
            QueryError: If a traversal fails
        """
        if self.g is None:
            return None

        logger.info("Reading elements")
        result = ReadResult()

        # look up vertex by name can use a composite index in JanusGraph
        result.jupiter = self.find_vertex("jupiter")
        if result.jupiter is not None:
            logger.info(str(result.jupiter))

        # look up an incident edge
        result.battle = self.find_edge("hercules", BATTLED, "hydra")
        if result.battle is not None:
            logger.info(str(result.battle))

        # numerical range query can use a mixed index in JanusGraph
        result.ages = self.find_ages(5000)
        logger.info(str(result.ages))

        # pluto might be deleted
        result.pluto_exists = self.vertex_exists("pluto")
        if result.pluto_exists:
            logger.info("pluto exists")

        result.brothers = self.find_neighbors("jupiter", BROTHER)
        logger.info(f"jupiter's brothers: {result.brothers}")
        return result

    # =========================================================================
    # Update & delete
    # =========================================================================

    def _next_timestamp(self) -> int:
        ts = max(int(time.time() * 1000), self._last_ts + 1)
        self._last_ts = ts
        return ts

    def update_elements(self, name: str = "jupiter") -> Optional[int]:
        """
        Set a fresh ``ts`` timestamp on the vertices named ``name``.
        Does not create any new vertices or edges.

        Returns:
            The timestamp written, or None if nothing was updated
        """
        if self.g is None:
            return None

        with self._mutating("update elements"):
            logger.info("Updating elements")
            g = self._source()
            found = g.V().has(NAME, name).limit(1).value_map().with_(WithOptions.tokens).to_list()
            if not found:
                logger.warning(f"{name} not found, nothing to update")
                self._rollback()
                return None
            logger.debug(f"{name} before update: {found[0]}")

            ts = self._next_timestamp()
            g.V().has(NAME, name).property(TIMESTAMP, ts).iterate()
            self._commit()
            return ts
        return None

    def delete_elements(self, name: str = "pluto") -> bool:
        """
        Delete the vertices named ``name``. The store removes their incident
        edges. Deleting a vertex that does not exist is not an error.
        """
        if self.g is None:
            return False

        with self._mutating("delete elements"):
            self._commit()
            logger.info("Deleting elements")
            # note that this will succeed whether or not the vertex exists
            self._source().V().has(NAME, name).drop().iterate()
            self._commit()
            return True
        return False

    # =========================================================================
    # Run sequence
    # =========================================================================

    def _pause(self) -> None:
        time.sleep(random.uniform(self.settings.update_delay_min, self.settings.update_delay_max))

    def run_app(self) -> bool:
        """
        Run the entire application:
        1. Open and initialize the graph
        2. Define the schema
        3. Build the graph
        4. Run traversal queries to get data from the graph
        5. Make updates to the graph
        6. Close the graph

        Returns:
            True if every stage ran, False if the run ended on an error
        """
        try:
            # open and initialize the graph
            self.open_graph()

            # define the schema before loading data
            if self.supports_schema:
                self.create_schema()

            # build the graph structure
            self.create_elements()
            # read to see they were made
            self.read_elements()

            for _ in range(self.settings.update_iterations):
                self._pause()
                # update some graph elements with changes
                self.update_elements()
                # read to see the changes were made
                self.read_elements()

            # delete some graph elements
            self.delete_elements()
            # read to see the changes were made
            self.read_elements()
            return True
        except Exception as e:
            logger.error(f"Graph application failed: {e}", exc_info=True)
            return False
        finally:
            self.close_graph()
