"""End-to-end export tests against the fake directory."""

import json

import pytest

from orgad.config import ExportConfig, ConfigurationError
from orgad.model.schemas import ExportStatus
from orgad.pipeline import export_runner
from orgad.pipeline.export_runner import run_export
from orgad.reporting.report_builder import generate_text_report

from conftest import FakeDirectory, user_sid


def _config(tmp_path, **output):
    output.setdefault("output_dir", str(tmp_path))
    output.setdefault("file_name", "managers.json")
    return ExportConfig.from_dict({
        "directory": {"domain": "corp.local"},
        "output": output,
        "verbose": False,
    })


def test_export_writes_document(tmp_path, scenario_directory):
    result = run_export(_config(tmp_path), directory=scenario_directory)

    assert result.status == ExportStatus.WRITTEN
    assert result.output_path == str(tmp_path / "managers.json")
    assert result.document is None

    data = json.loads((tmp_path / "managers.json").read_text(encoding="utf-8"))
    assert [e["end"]["value"] for e in data["graph"]["edges"]] == [user_sid(1101), user_sid(1102)]
    assert result.stats.edges_written == 2
    assert result.metadata["search_base"] == "DC=corp,DC=local"


def test_pass_thru_returns_document(tmp_path, scenario_directory):
    result = run_export(_config(tmp_path, pass_thru=True), directory=scenario_directory)
    assert result.document is not None
    assert result.document.edge_count == 2


def test_empty_result_writes_nothing(tmp_path):
    result = run_export(_config(tmp_path), directory=FakeDirectory([]))

    assert result.status == ExportStatus.EMPTY
    assert result.output_path is None
    assert list(tmp_path.iterdir()) == []


def test_write_empty_produces_empty_document(tmp_path):
    result = run_export(_config(tmp_path, write_empty=True), directory=FakeDirectory([]))

    assert result.status == ExportStatus.WRITTEN
    data = json.loads((tmp_path / "managers.json").read_text(encoding="utf-8"))
    assert data == {"metadata": {"source_kind": "ManagerOf"}, "graph": {"nodes": [], "edges": []}}


def test_invalid_config_fails_before_directory_is_used(tmp_path, monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("directory must not be opened")

    monkeypatch.setattr(export_runner, "LDAPDirectory", forbidden)
    config = _config(tmp_path, file_name="managers.csv")

    with pytest.raises(ConfigurationError):
        run_export(config)


def test_runner_opens_and_releases_ldap_directory(tmp_path, monkeypatch, scenario_directory):
    events = []

    class ContextDirectory:
        def __init__(self, **kwargs):
            events.append(("init", kwargs["domain"]))
            self.base_dn = "DC=corp,DC=local"

        def __enter__(self):
            events.append("enter")
            return self

        def __exit__(self, *exc):
            events.append("exit")

        def iter_records(self):
            return scenario_directory.iter_records()

        def lookup_sid(self, dn):
            return scenario_directory.lookup_sid(dn)

    monkeypatch.setattr(export_runner, "LDAPDirectory", ContextDirectory)

    result = run_export(_config(tmp_path))

    assert events == [("init", "corp.local"), "enter", "exit"]
    assert result.stats.edges_written == 2


def test_runner_releases_directory_on_failure(tmp_path, monkeypatch):
    events = []

    class FailingDirectory:
        def __init__(self, **kwargs):
            self.base_dn = ""

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            events.append("exit")

        def iter_records(self):
            raise OSError("server went away")

        def lookup_sid(self, dn):
            return None

    monkeypatch.setattr(export_runner, "LDAPDirectory", FailingDirectory)

    with pytest.raises(OSError):
        run_export(_config(tmp_path))
    assert events == ["exit"]


def test_two_runs_produce_identical_edges(tmp_path, scenario_directory):
    run_export(_config(tmp_path, file_name="a.json"), directory=scenario_directory)
    run_export(_config(tmp_path, file_name="b.json"), directory=scenario_directory)
    assert (tmp_path / "a.json").read_bytes() == (tmp_path / "b.json").read_bytes()


def test_text_report_mentions_counts_and_path(tmp_path, scenario_directory):
    result = run_export(_config(tmp_path, pass_thru=True), directory=scenario_directory)
    report = generate_text_report(result)

    assert "Edges written:          2" in report
    assert "Distinct managers:      1" in report
    assert str(tmp_path / "managers.json") in report


def test_text_report_for_empty_run(tmp_path):
    result = run_export(_config(tmp_path), directory=FakeDirectory([]))
    assert "no file written" in generate_text_report(result)


def test_empty_result_is_reported_once(tmp_path):
    messages = []
    run_export(_config(tmp_path), directory=FakeDirectory([]), progress_callback=messages.append)

    warnings = [m for m in messages if m.startswith("[!]")]
    assert warnings == ["[!] No users with a manager were found; no output written"]
