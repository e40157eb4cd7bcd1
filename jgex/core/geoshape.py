"""
JanusGraph geographic point values and their GraphSON 3.0 representation.

gremlinpython has no geoshape type, so points are carried as ``Geoshape``
values and written as ``janusgraph:Geoshape`` GeoJSON points, which the
JanusGraph IO registry on the server understands.
"""

from dataclasses import dataclass
from typing import Any

from gremlin_python.driver.serializer import GraphSONMessageSerializer
from gremlin_python.structure.io import graphsonV3d0
from gremlin_python.structure.io.graphsonV3d0 import GraphSONUtil

JANUSGRAPH_PREFIX = "janusgraph"
GRAPHSON_V3_MIME = b"application/vnd.gremlin-v3.0+json"


@dataclass(frozen=True)
class Geoshape:
    """A geographic point."""

    latitude: float
    longitude: float

    @classmethod
    def point(cls, latitude: float, longitude: float) -> "Geoshape":
        if not -90.0 <= latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {latitude}")
        if not -180.0 <= longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {longitude}")
        return cls(float(latitude), float(longitude))

    def coordinates(self) -> list[float]:
        """Coordinates as a ``[lat, lon]`` pair."""
        return [self.latitude, self.longitude]


class GeoshapeIO:
    """GraphSON (de)serializer for ``janusgraph:Geoshape`` points."""

    graphson_type = f"{JANUSGRAPH_PREFIX}:Geoshape"

    @classmethod
    def dictify(cls, geoshape: Geoshape, writer: Any) -> dict:
        # GeoJSON order is longitude first
        return {
            GraphSONUtil.TYPE_KEY: cls.graphson_type,
            GraphSONUtil.VALUE_KEY: {
                "type": "Point",
                "coordinates": [geoshape.longitude, geoshape.latitude],
            },
        }

    @classmethod
    def objectify(cls, value: dict, reader: Any) -> Geoshape:
        shape_type = value.get("type", "Point")
        if shape_type.lower() != "point":
            raise ValueError(f"Unsupported geoshape type: {shape_type}")
        longitude, latitude = value["coordinates"][:2]
        return Geoshape(float(latitude), float(longitude))


class RelationIdentifierIO:
    """Reads ``janusgraph:RelationIdentifier`` edge ids as their string form."""

    graphson_type = f"{JANUSGRAPH_PREFIX}:RelationIdentifier"

    @classmethod
    def objectify(cls, value: dict, reader: Any) -> str:
        return value["relationId"]


def janusgraph_message_serializer() -> GraphSONMessageSerializer:
    """GraphSON 3.0 message serializer aware of the JanusGraph types above."""
    reader = graphsonV3d0.GraphSONReader({
        GeoshapeIO.graphson_type: GeoshapeIO,
        RelationIdentifierIO.graphson_type: RelationIdentifierIO,
    })
    writer = graphsonV3d0.GraphSONWriter({Geoshape: GeoshapeIO})
    return GraphSONMessageSerializer(reader=reader, writer=writer, version=GRAPHSON_V3_MIME)
