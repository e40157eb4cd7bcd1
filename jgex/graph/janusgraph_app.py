"""
JanusGraph application: the base graph application plus schema definition,
mixed indexes, geoshape places and graph drop.
"""

import logging
import time

from jgex.core.graph_config import GraphConfig
from jgex.graph.app import GraphApp
from jgex.graph.dataset import (
    AGE,
    BATTLED,
    BROTHER,
    DEMIGOD,
    FATHER,
    GOD,
    HUMAN,
    LIVES,
    LOCATION,
    MONSTER,
    MOTHER,
    NAME,
    PET,
    PLACE,
    REASON,
    TIME,
    TITAN,
)
from jgex.schema.management import (
    DataType,
    ElementType,
    Multiplicity,
    SchemaManagement,
)

logger = logging.getLogger(__name__)


class JanusGraphApp(GraphApp):
    """
    Graph application for a JanusGraph instance served by Gremlin Server.

    Mixed indexes are built only when the graph configuration names an index
    backend under the mixed index name (``index.search.backend`` by default).
    """

    supports_transactions = True
    supports_schema = True
    supports_geoshape = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_mixed_index = True
        self.mixed_index_config_name = self.settings.mixed_index_name

    def configure(self) -> GraphConfig:
        config = super().configure()
        self.use_mixed_index = self.use_mixed_index and config.has_index_backend(
            self.mixed_index_config_name
        )
        if not self.use_mixed_index:
            logger.info(
                f"No index backend '{self.mixed_index_config_name}' configured, "
                "mixed indexes are disabled"
            )
        return config

    def drop_graph(self) -> None:
        """Drop the graph instance with all of its data and configuration."""
        if self.client is not None:
            self.client.drop_graph()

    def create_elements(self) -> bool:
        created = super().create_elements()
        if created and self.use_mixed_index:
            # mixed indexes typically have a delayed refresh interval
            time.sleep(self.settings.mixed_index_refresh_wait)
        return created

    # =========================================================================
    # Schema
    # =========================================================================

    def create_schema(self) -> bool:
        """
        Create the graph schema in one management transaction.

        Returns:
            True if the schema was created, False if one already existed or
            the transaction failed and was rolled back
        """
        if self.client is None:
            logger.warning("Graph is not open, schema not created")
            return False

        management = self.client.open_management()
        try:
            self._define_schema(management)
            # naive check if the schema was previously created, made inside
            # the same management transaction on commit
            created = management.commit()
        except Exception as e:
            management.rollback()
            logger.error(f"Failed to create schema: {e}", exc_info=True)
            return False

        if created:
            logger.info("Schema created")
        else:
            logger.info("Schema already exists, nothing created")
        return created

    def _define_schema(self, management: SchemaManagement) -> None:
        self.create_properties(management)
        self.create_vertex_labels(management)
        self.create_edge_labels(management)
        self.create_composite_indexes(management)
        self.create_mixed_indexes(management)

    def create_properties(self, management: SchemaManagement) -> None:
        """Create the properties for vertices, edges, and meta-properties."""
        management.make_property_key(NAME, DataType.STRING)
        management.make_property_key(AGE, DataType.INTEGER)
        management.make_property_key(TIME, DataType.INTEGER)
        management.make_property_key(REASON, DataType.STRING)
        management.make_property_key(PLACE, DataType.GEOSHAPE)

    def create_vertex_labels(self, management: SchemaManagement) -> None:
        for label in (TITAN, LOCATION, GOD, DEMIGOD, HUMAN, MONSTER):
            management.make_vertex_label(label)

    def create_edge_labels(self, management: SchemaManagement) -> None:
        management.make_edge_label(FATHER, multiplicity=Multiplicity.MANY2ONE)
        management.make_edge_label(MOTHER, multiplicity=Multiplicity.MANY2ONE)
        management.make_edge_label(LIVES, signature=(REASON,))
        management.make_edge_label(PET)
        management.make_edge_label(BROTHER)
        management.make_edge_label(BATTLED)

    def create_composite_indexes(self, management: SchemaManagement) -> None:
        """A composite index is best used for exact match lookups."""
        management.build_composite_index("nameIndex", ElementType.VERTEX, NAME)

    def create_mixed_indexes(self, management: SchemaManagement) -> None:
        """
        A mixed index requires that an external indexing backend is configured
        on the graph instance. A mixed index is best for full text search,
        numerical range, and geospatial queries.
        """
        if not self.use_mixed_index:
            return
        management.build_mixed_index(
            "vAge", ElementType.VERTEX, AGE, backend=self.mixed_index_config_name
        )
        management.build_mixed_index(
            "eReasonPlace", ElementType.EDGE, REASON, PLACE, backend=self.mixed_index_config_name
        )

    def create_schema_request(self) -> str:
        """
        Groovy script that creates the schema on the graph instance running
        in a Gremlin Server, unless a schema already exists there.

        Loads the graph configuration first if the graph was not opened, so
        mixed indexes appear only when an index backend is configured.
        """
        if self.config is None:
            self.configure()
        management = SchemaManagement(self.config.gremlin.graph)
        self._define_schema(management)
        return management.render_transaction()
