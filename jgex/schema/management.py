"""
JanusGraph schema management over a Gremlin Server.

The JanusGraph management API is only reachable in the server's JVM, so a
management transaction is recorded on the client as a list of schema
declarations and rendered into a single Groovy script. The script runs the
declarations inside one ``openManagement()`` transaction on the server and
either commits all of them or rolls back and rethrows.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from jgex.exceptions import SchemaError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DataType(str, Enum):
    """Property key data types, named as the server side Java classes."""
    STRING = "String"
    INTEGER = "Integer"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    GEOSHAPE = "Geoshape"


class Multiplicity(str, Enum):
    """Edge label multiplicity constraints."""
    MULTI = "MULTI"
    SIMPLE = "SIMPLE"
    MANY2ONE = "MANY2ONE"
    ONE2MANY = "ONE2MANY"
    ONE2ONE = "ONE2ONE"


class ElementType(str, Enum):
    """Graph element an index is built over."""
    VERTEX = "Vertex"
    EDGE = "Edge"


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _check_name(kind: str, name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise SchemaError(f"Invalid {kind} name: {name!r}")
    return name


# =============================================================================
# SCHEMA DECLARATIONS
# =============================================================================


@dataclass(frozen=True)
class PropertyKeyDefinition:
    name: str
    data_type: DataType

    def render(self, mgmt: str) -> str:
        return f"{mgmt}.makePropertyKey({_quote(self.name)}).dataType({self.data_type.value}.class).make()"


@dataclass(frozen=True)
class VertexLabelDefinition:
    name: str

    def render(self, mgmt: str) -> str:
        return f"{mgmt}.makeVertexLabel({_quote(self.name)}).make()"


@dataclass(frozen=True)
class EdgeLabelDefinition:
    name: str
    multiplicity: Optional[Multiplicity] = None
    signature: tuple[str, ...] = ()

    def render(self, mgmt: str) -> str:
        parts = [f"{mgmt}.makeEdgeLabel({_quote(self.name)})"]
        if self.multiplicity is not None:
            parts.append(f"multiplicity(Multiplicity.{self.multiplicity.value})")
        if self.signature:
            keys = ", ".join(f"{mgmt}.getPropertyKey({_quote(key)})" for key in self.signature)
            parts.append(f"signature({keys})")
        parts.append("make()")
        return ".".join(parts)


@dataclass(frozen=True)
class IndexDefinition:
    """A composite index, or a mixed index when ``backend`` is set."""

    name: str
    element: ElementType
    keys: tuple[str, ...]
    backend: Optional[str] = None

    @property
    def mixed(self) -> bool:
        return self.backend is not None

    def render(self, mgmt: str) -> str:
        parts = [f"{mgmt}.buildIndex({_quote(self.name)}, {self.element.value}.class)"]
        parts.extend(f"addKey({mgmt}.getPropertyKey({_quote(key)}))" for key in self.keys)
        if self.mixed:
            parts.append(f"buildMixedIndex({_quote(self.backend)})")
        else:
            parts.append("buildCompositeIndex()")
        return ".".join(parts)


# =============================================================================
# MANAGEMENT TRANSACTIONS
# =============================================================================


class ScriptSubmitter(Protocol):
    def submit(self, script: str, bindings: Optional[dict[str, Any]] = None) -> list[Any]:
        ...


class SchemaManagement:
    """
    A management transaction recorded as schema declarations.

    Declarations are validated as they are made and kept in declaration
    order. ``render_transaction()`` produces the Groovy script; subclasses
    provide ``commit()``, which applies it.

    Usage:
        management = SchemaManagement()
        management.make_property_key("name", DataType.STRING)
        management.build_composite_index("nameIndex", ElementType.VERTEX, "name")
        script = management.render_transaction()
    """

    MGMT = "mgmt"

    def __init__(self, graph_name: str = "graph"):
        self.graph_name = _check_name("graph", graph_name)
        self.definitions: list[Any] = []
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def _ensure_open(self) -> None:
        if not self._open:
            raise SchemaError("Management transaction is closed")

    def _declared(self, definition_type: type) -> dict[str, Any]:
        return {d.name: d for d in self.definitions if isinstance(d, definition_type)}

    def _declare(self, kind: str, definition: Any) -> Any:
        self._ensure_open()
        if definition.name in self._declared(type(definition)):
            raise SchemaError(f"{kind} already declared: {definition.name}")
        self.definitions.append(definition)
        return definition

    def _check_property_keys(self, names: tuple[str, ...]) -> None:
        declared = self._declared(PropertyKeyDefinition)
        for name in names:
            if name not in declared:
                raise SchemaError(f"Unknown property key: {name}")

    def make_property_key(self, name: str, data_type: DataType) -> PropertyKeyDefinition:
        definition = PropertyKeyDefinition(_check_name("property key", name), DataType(data_type))
        return self._declare("Property key", definition)

    def make_vertex_label(self, name: str) -> VertexLabelDefinition:
        return self._declare("Vertex label", VertexLabelDefinition(_check_name("vertex label", name)))

    def make_edge_label(
        self,
        name: str,
        multiplicity: Optional[Multiplicity] = None,
        signature: tuple[str, ...] = (),
    ) -> EdgeLabelDefinition:
        signature = tuple(signature)
        self._check_property_keys(signature)
        definition = EdgeLabelDefinition(
            _check_name("edge label", name),
            Multiplicity(multiplicity) if multiplicity is not None else None,
            signature,
        )
        return self._declare("Edge label", definition)

    def build_composite_index(self, name: str, element: ElementType, *keys: str) -> IndexDefinition:
        return self._build_index(name, element, keys, None)

    def build_mixed_index(
        self, name: str, element: ElementType, *keys: str, backend: str
    ) -> IndexDefinition:
        return self._build_index(name, element, keys, _check_name("index backend", backend))

    def _build_index(
        self, name: str, element: ElementType, keys: tuple[str, ...], backend: Optional[str]
    ) -> IndexDefinition:
        if not keys:
            raise SchemaError(f"Index {name} needs at least one key")
        self._check_property_keys(keys)
        definition = IndexDefinition(_check_name("index", name), ElementType(element), keys, backend)
        return self._declare("Index", definition)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> list[str]:
        """Groovy statements for the recorded declarations."""
        return [definition.render(self.MGMT) for definition in self.definitions]

    def render_transaction(self) -> str:
        """
        Script applying all declarations in one server side management
        transaction, unless the graph already has a relation type.

        The existence check and the declarations share the transaction: when
        a relation type exists it is rolled back untouched, and any failure
        rolls it back and rethrows. The script evaluates to ``true`` when the
        schema was created.
        """
        body = "\n".join(f"        {line}" for line in self.render())
        return (
            f"{self.MGMT} = {self.graph_name}.openManagement()\n"
            "created = false\n"
            "try {\n"
            f"    if ({self.MGMT}.getRelationTypes(RelationType.class).iterator().hasNext()) {{\n"
            f"        {self.MGMT}.rollback()\n"
            "    } else {\n"
            f"{body}\n"
            f"        {self.MGMT}.commit()\n"
            "        created = true\n"
            "    }\n"
            "} catch (Exception e) {\n"
            f"    {self.MGMT}.rollback()\n"
            "    throw e\n"
            "}\n"
            "created"
        )

    # -------------------------------------------------------------------------
    # Transaction control
    # -------------------------------------------------------------------------

    def _close(self) -> None:
        self._ensure_open()
        self._open = False

    def rollback(self) -> None:
        """Discard the recorded declarations. Safe to call on a closed transaction."""
        self.definitions.clear()
        self._open = False


class RemoteManagement(SchemaManagement):
    """
    Management transaction submitted to a Gremlin Server on commit.

    Nothing reaches the server before ``commit()``, which sends the whole
    transaction as one script.
    """

    def __init__(self, client: ScriptSubmitter, graph_name: str = "graph"):
        super().__init__(graph_name)
        self.client = client

    def commit(self) -> bool:
        """
        Apply the declarations unless the graph already has a schema.

        Returns:
            True if the declarations were committed, False if a relation
            type already existed and the transaction was rolled back

        Raises:
            SchemaError: If the transaction is closed or failed on the server
        """
        self._close()
        if not self.definitions:
            return False
        logger.debug(f"Submitting {len(self.definitions)} schema declarations")
        try:
            result = self.client.submit(self.render_transaction())
        except Exception as e:
            raise SchemaError(f"Schema transaction failed: {e}") from e
        return bool(result and result[0])
