import pytest

from jgex.exceptions import SchemaError
from jgex.schema.management import (
    DataType,
    ElementType,
    Multiplicity,
    RemoteManagement,
    SchemaManagement,
)
from tests.fakes import RecordingSubmitter


def _declare_some(management):
    management.make_property_key("name", DataType.STRING)
    management.make_property_key("reason", DataType.STRING)
    management.make_vertex_label("god")
    management.make_edge_label("lives", signature=("reason",))
    management.build_composite_index("nameIndex", ElementType.VERTEX, "name")


def test_render_keeps_declaration_order():
    management = SchemaManagement()
    _declare_some(management)

    assert management.render() == [
        'mgmt.makePropertyKey("name").dataType(String.class).make()',
        'mgmt.makePropertyKey("reason").dataType(String.class).make()',
        'mgmt.makeVertexLabel("god").make()',
        'mgmt.makeEdgeLabel("lives").signature(mgmt.getPropertyKey("reason")).make()',
        'mgmt.buildIndex("nameIndex", Vertex.class).addKey(mgmt.getPropertyKey("name")).buildCompositeIndex()',
    ]


def test_render_transaction_checks_and_declares_in_one_transaction():
    management = SchemaManagement("jgex")
    management.make_property_key("age", DataType.INTEGER)
    management.build_mixed_index("vAge", ElementType.VERTEX, "age", backend="search")

    script = management.render_transaction()

    assert script.startswith("mgmt = jgex.openManagement()\ncreated = false\ntry {")
    assert script.count("openManagement()") == 1
    check = script.index("getRelationTypes(RelationType.class).iterator().hasNext()")
    index = script.index(
        'mgmt.buildIndex("vAge", Vertex.class).addKey(mgmt.getPropertyKey("age")).buildMixedIndex("search")'
    )
    assert check < index < script.index("mgmt.commit()")
    assert "} catch (Exception e) {\n    mgmt.rollback()\n    throw e\n}" in script
    assert script.endswith("created")


def test_multiplicity_rendering():
    management = SchemaManagement()
    management.make_edge_label("father", multiplicity=Multiplicity.MANY2ONE)

    assert management.render() == ['mgmt.makeEdgeLabel("father").multiplicity(Multiplicity.MANY2ONE).make()']


@pytest.mark.parametrize("name", ["", "has space", 'quote"', "drop();", "1st"])
def test_invalid_names_rejected(name):
    management = SchemaManagement()

    with pytest.raises(SchemaError):
        management.make_vertex_label(name)


def test_invalid_graph_name_rejected():
    with pytest.raises(SchemaError):
        SchemaManagement("graph.close()")


def test_signature_needs_declared_property_key():
    management = SchemaManagement()

    with pytest.raises(SchemaError, match="Unknown property key: reason"):
        management.make_edge_label("lives", signature=("reason",))


def test_index_needs_keys():
    management = SchemaManagement()

    with pytest.raises(SchemaError):
        management.build_composite_index("nameIndex", ElementType.VERTEX)
    with pytest.raises(SchemaError):
        management.build_composite_index("nameIndex", ElementType.VERTEX, "name")


def test_duplicate_declaration_rejected():
    management = SchemaManagement()
    management.make_vertex_label("god")

    with pytest.raises(SchemaError, match="already declared"):
        management.make_vertex_label("god")


def test_closed_transaction_rejects_declarations():
    management = SchemaManagement()
    management.rollback()

    assert management.is_open is False
    with pytest.raises(SchemaError):
        management.make_vertex_label("god")


def test_remote_commit_submits_one_script():
    submitter = RecordingSubmitter([True])
    management = RemoteManagement(submitter, "graph")
    _declare_some(management)

    assert management.commit() is True

    assert submitter.scripts == [management.render_transaction()]
    assert management.is_open is False
    with pytest.raises(SchemaError):
        management.commit()


def test_remote_commit_reports_existing_schema():
    submitter = RecordingSubmitter([False])
    management = RemoteManagement(submitter)
    _declare_some(management)

    assert management.commit() is False
    assert len(submitter.scripts) == 1


def test_remote_commit_failure_raises_schema_error():
    submitter = RecordingSubmitter(error=RuntimeError("Property key with given name already exists"))
    management = RemoteManagement(submitter)
    _declare_some(management)

    with pytest.raises(SchemaError, match="already exists"):
        management.commit()
    assert management.is_open is False


def test_remote_commit_without_declarations_submits_nothing():
    submitter = RecordingSubmitter()
    management = RemoteManagement(submitter)

    assert management.commit() is False
    assert submitter.scripts == []


def test_remote_rollback_submits_nothing():
    submitter = RecordingSubmitter()
    management = RemoteManagement(submitter)
    _declare_some(management)

    management.rollback()

    assert submitter.scripts == []
    assert management.definitions == []
