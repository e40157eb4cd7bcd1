import logging

import pytest

from jgex import cli
from jgex.graph.janusgraph_app import JanusGraphApp


@pytest.fixture
def run_cli(monkeypatch, settings, client_factory):
    monkeypatch.setattr(cli, "setup_logging", lambda debug: None)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(
        cli,
        "JanusGraphApp",
        lambda config_file, settings: JanusGraphApp(
            config_file, settings=settings, client_factory=client_factory
        ),
    )
    return cli.main


def test_run_demo(run_cli, config_file, graph, client_factory):
    assert run_cli([str(config_file)]) == 0

    assert len(graph.vertices) == 11
    assert client_factory.clients[-1].closed is True


def test_unknown_action_runs_demo(run_cli, config_file, graph):
    assert run_cli([str(config_file), "load"]) == 0
    assert graph.dropped is False


def test_drop_is_case_insensitive(run_cli, config_file, graph, client_factory):
    assert run_cli([str(config_file), "DROP"]) == 0

    assert graph.dropped is True
    assert client_factory.clients[-1].closed is True


def test_drop_unreachable_server(run_cli, config_file, graph, caplog):
    graph.unreachable = True

    with caplog.at_level(logging.ERROR):
        assert run_cli([str(config_file), "drop"]) == 1
    assert "Failed to drop graph" in caplog.text


def test_missing_config_fails(run_cli, tmp_path):
    assert run_cli([str(tmp_path / "missing.yaml")]) == 1


def test_print_schema_request(run_cli, search_config_file, client_factory, capsys):
    assert run_cli([str(search_config_file), "--print-schema-request"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("mgmt = graph.openManagement()")
    assert "buildMixedIndex" in out
    assert client_factory.clients == []


def test_print_schema_request_missing_config(run_cli, tmp_path):
    assert run_cli([str(tmp_path / "missing.yaml"), "--print-schema-request"]) == 1


def test_config_file_is_required(run_cli):
    with pytest.raises(SystemExit):
        run_cli([])


def _record(message, level=logging.INFO):
    return logging.LogRecord("gremlinpython", level, __file__, 1, message, None, None)


def test_noise_filter():
    noise_filter = cli.ThirdPartyNoiseFilter()

    assert noise_filter.filter(_record("Creating Client with url 'ws://localhost:8182/gremlin'")) is False
    assert noise_filter.filter(_record("Creating Client with url 'ws://x'", logging.WARNING)) is True
    assert noise_filter.filter(_record("Connection closed by server")) is True
