import pytest
from gremlin_python.driver.serializer import GraphSONMessageSerializer

from jgex.core.geoshape import (
    Geoshape,
    GeoshapeIO,
    RelationIdentifierIO,
    janusgraph_message_serializer,
)


def test_point_normalizes_to_floats():
    point = Geoshape.point(38, 23)

    assert point == Geoshape(38.0, 23.0)
    assert point.coordinates() == [38.0, 23.0]


@pytest.mark.parametrize("latitude, longitude", [(91, 0), (-90.5, 0), (0, 180.1), (0, -181)])
def test_point_out_of_range(latitude, longitude):
    with pytest.raises(ValueError):
        Geoshape.point(latitude, longitude)


def test_geoshape_written_as_geojson_point():
    value = GeoshapeIO.dictify(Geoshape.point(38.1, 23.7), None)

    assert value == {
        "@type": "janusgraph:Geoshape",
        "@value": {"type": "Point", "coordinates": [23.7, 38.1]},
    }


def test_geoshape_read_from_geojson_point():
    point = GeoshapeIO.objectify({"type": "Point", "coordinates": [23.9, 37.7]}, None)

    assert point == Geoshape(37.7, 23.9)


def test_non_point_geoshape_rejected():
    with pytest.raises(ValueError, match="Unsupported geoshape type"):
        GeoshapeIO.objectify({"type": "Polygon", "coordinates": [[0, 0], [1, 1]]}, None)


def test_relation_identifier_read_as_string():
    assert RelationIdentifierIO.objectify({"relationId": "4r6-39s-6c5-3bc"}, None) == "4r6-39s-6c5-3bc"


def test_message_serializer():
    assert isinstance(janusgraph_message_serializer(), GraphSONMessageSerializer)
