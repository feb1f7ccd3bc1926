"""Graph builder tests: edge emission, skipping and lookup counts."""

from orgad.model.graph_builder import ManagerGraphBuilder
from orgad.model.schemas import DirectoryRecord, EdgeType, OpenGraphEdge
from orgad.resolution.identity_resolver import IdentityResolver

from conftest import FakeDirectory, make_record, user_sid, MANAGER_M, MANAGER_N


def _build(directory):
    builder = ManagerGraphBuilder(IdentityResolver(directory.lookup_sid), verbose=False)
    document = builder.build(directory.iter_records())
    return document, builder


def test_scenario_two_edges_two_lookups(scenario_directory):
    document, builder = _build(scenario_directory)

    assert [(e.start_id, e.end_id) for e in document.edges] == [
        (user_sid(1000), user_sid(1101)),
        (user_sid(1000), user_sid(1102)),
    ]
    assert all(e.kind == EdgeType.MANAGER_OF for e in document.edges)
    assert sum(scenario_directory.lookup_calls.values()) == 2
    assert scenario_directory.lookup_calls[MANAGER_M] == 1
    assert scenario_directory.lookup_calls[MANAGER_N] == 1
    assert builder.stats.records_seen == 3
    assert builder.stats.edges_written == 2
    assert builder.stats.unresolvable_manager == 1
    assert builder.stats.manager_lookups == 2


def test_later_records_with_broken_manager_skip_without_lookup():
    records = [make_record(rid, MANAGER_N) for rid in (1101, 1102, 1103, 1104)]
    directory = FakeDirectory(records)

    document, builder = _build(directory)

    assert document.edges == []
    assert directory.lookup_calls[MANAGER_N] == 1
    assert builder.stats.unresolvable_manager == 4


def test_missing_identifier_skips_record_and_continues():
    records = [
        make_record(None, MANAGER_M, "NoSid"),
        make_record(1102, MANAGER_M),
    ]
    directory = FakeDirectory(records, {MANAGER_M: user_sid(1000)})

    document, builder = _build(directory)

    assert document.edges == [OpenGraphEdge(user_sid(1000), user_sid(1102))]
    assert builder.stats.missing_identifier == 1


def test_missing_identifier_does_not_trigger_manager_lookup():
    directory = FakeDirectory([make_record(None, MANAGER_M)], {MANAGER_M: user_sid(1000)})
    _build(directory)
    assert sum(directory.lookup_calls.values()) == 0


def test_unexpected_error_is_contained_per_record():
    class Exploding:
        distinguished_name = "CN=Broken,DC=corp,DC=local"

        @property
        def object_sid(self):
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "bad byte")

        manager = MANAGER_M

    records = [Exploding(), make_record(1102, MANAGER_M)]
    directory = FakeDirectory(records, {MANAGER_M: user_sid(1000)})

    document, builder = _build(directory)

    assert len(document.edges) == 1
    assert builder.stats.record_errors == 1
    assert builder.stats.records_seen == 2


def test_edge_count_matches_resolvable_records():
    lookups = {
        "CN=M1,DC=corp,DC=local": user_sid(1000),
        "CN=M2,DC=corp,DC=local": user_sid(1001),
        "CN=Gone,DC=corp,DC=local": None,
    }
    records = [
        make_record(2001, "CN=M1,DC=corp,DC=local"),
        make_record(2002, "CN=M2,DC=corp,DC=local"),
        make_record(2003, "CN=Gone,DC=corp,DC=local"),
        make_record(None, "CN=M1,DC=corp,DC=local"),
        DirectoryRecord(object_sid=b"\x00", manager="CN=M2,DC=corp,DC=local"),
        make_record(2004, "CN=M1,DC=corp,DC=local"),
        make_record(2005, None),
    ]
    directory = FakeDirectory(records, lookups)

    document, builder = _build(directory)

    assert document.edge_count == 3
    assert builder.stats.skipped == 4
    assert builder.stats.records_seen == builder.stats.edges_written + builder.stats.skipped


def test_empty_stream_signals_empty_result():
    document, builder = _build(FakeDirectory([]))
    assert builder.stats.is_empty
    assert document.edges == []
    assert document.nodes == []


def test_build_is_idempotent(scenario_directory):
    first, _ = _build(scenario_directory)
    second, _ = _build(scenario_directory)
    assert first.to_dict() == second.to_dict()


def test_progress_callback_receives_skip_messages(scenario_directory):
    messages = []
    builder = ManagerGraphBuilder(
        IdentityResolver(scenario_directory.lookup_sid),
        verbose=False,
        progress_callback=messages.append
    )
    builder.build(scenario_directory.iter_records())

    assert any(MANAGER_N in m for m in messages)
    assert messages[-1].startswith("[+] Processed 3 records")
