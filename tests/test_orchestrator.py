import json
import logging

import pytest

from paramgen.codegen import (
    GenerationOrchestrator,
    GeneratorConfig,
    PendingInstantiationStore,
    PendingRequest,
    ResumeStatus,
    create_orchestrator,
    load_spec,
)
from paramgen.codegen.build import (
    GeneratedType,
    NullBuildBackend,
    SourceTypeRegistry,
    SubprocessBuildBackend,
)
from paramgen.codegen.core.config import ConfigError
from paramgen.codegen.core.errors import InvalidSpecError
from paramgen.codegen.languages.csharp import CSharpGenerator


STATS_TYPE = GeneratedType(
    "Stats", fields={"speed": ("float", "3.5f"), "lives": ("int", "3")}
)


def _orchestrator(generator, store, build, registry, config=None):
    return GenerationOrchestrator(
        generator, store, build=build, registry=registry, config=config
    )


def test_apply_writes_source_without_asset(
    generator, store, make_build, make_registry, write_doc, stats_doc
):
    build = make_build()
    orchestrator = _orchestrator(generator, store, build, make_registry())

    result = orchestrator.apply(write_doc(stats_doc))

    assert result.success
    assert result.pending is None
    assert result.source_path.read_text(encoding="utf-8") == result.code
    assert "    public float speed = 3.5f;\n" in result.code
    assert build.requests == 0
    assert not store.is_pending()


def test_apply_with_asset_records_pending_and_requests_build(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    build = make_build()
    orchestrator = _orchestrator(generator, store, build, make_registry())
    asset = tmp_path / "Assets" / "Stats.asset"

    result = orchestrator.apply(write_doc(stats_doc), asset_output_path=asset)

    assert result.pending == PendingRequest("Stats", "", str(asset))
    assert store.load() == result.pending
    assert build.requests == 1
    assert not asset.exists()


def test_resume_waits_then_creates_asset(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path, caplog
):
    build = make_build(busy_polls=1)
    registry = make_registry(STATS_TYPE)
    orchestrator = _orchestrator(generator, store, build, registry)
    asset = tmp_path / "Assets" / "Stats.asset"
    orchestrator.apply(write_doc(stats_doc), asset_output_path=asset)

    assert orchestrator.resume() is ResumeStatus.WAITING
    assert store.is_pending()
    assert registry.lookups == []

    with caplog.at_level(logging.INFO, logger="paramgen"):
        assert orchestrator.resume() is ResumeStatus.CREATED

    assert json.loads(asset.read_text(encoding="utf-8")) == {
        "type": "Stats",
        "fields": {"speed": 3.5, "lives": 3},
    }
    assert not store.is_pending()
    assert "Generated type: Stats" in caplog.text
    assert f"Asset path: {asset}" in caplog.text
    assert orchestrator.resume() is ResumeStatus.IDLE


def test_resume_not_found_clears_request_and_writes_nothing(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path, caplog
):
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())
    asset = tmp_path / "Stats.asset"
    orchestrator.apply(write_doc(stats_doc), asset_output_path=asset)

    with caplog.at_level(logging.ERROR, logger="paramgen"):
        assert orchestrator.resume() is ResumeStatus.NOT_FOUND

    assert "Generated type not found: Stats" in caplog.text
    assert not asset.exists()
    assert not store.is_pending()


def test_failed_build_counts_as_not_found(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    registry = make_registry(STATS_TYPE)
    orchestrator = _orchestrator(generator, store, make_build(failed=True), registry)
    orchestrator.apply(write_doc(stats_doc), asset_output_path=tmp_path / "Stats.asset")

    assert orchestrator.resume() is ResumeStatus.NOT_FOUND
    assert registry.lookups == []
    assert not store.is_pending()


def test_namespaced_lookup_uses_qualified_name(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    stats_doc["nameSpace"] = "Game"
    registry = make_registry()
    orchestrator = _orchestrator(generator, store, make_build(), registry)
    orchestrator.apply(write_doc(stats_doc), asset_output_path=tmp_path / "Stats.asset")

    orchestrator.resume()

    assert registry.lookups == ["Game.Stats"]


def test_resume_survives_process_restart(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    asset = tmp_path / "Stats.asset"
    first = _orchestrator(generator, store, make_build(), make_registry())
    first.apply(write_doc(stats_doc), asset_output_path=asset)

    second = _orchestrator(
        CSharpGenerator(),
        PendingInstantiationStore(store.path),
        make_build(),
        make_registry(STATS_TYPE),
    )

    assert second.resume() is ResumeStatus.CREATED
    assert asset.exists()


def test_second_apply_overwrites_pending_request(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path, caplog
):
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())
    path = write_doc(stats_doc)
    orchestrator.apply(path, asset_output_path=tmp_path / "first.asset")

    with caplog.at_level(logging.WARNING, logger="paramgen"):
        orchestrator.apply(path, asset_output_path=tmp_path / "second.asset")

    assert "Replacing pending instantiation of Stats" in caplog.text
    assert store.load().destination_path == str(tmp_path / "second.asset")


def test_reject_policy_refuses_new_apply_while_pending(
    store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    config = GeneratorConfig(pending_policy="reject")
    orchestrator = _orchestrator(
        CSharpGenerator(config), store, make_build(), make_registry(), config
    )
    path = write_doc(stats_doc)
    orchestrator.apply(path, asset_output_path=tmp_path / "first.asset")

    result = orchestrator.apply(path)

    assert not result.success
    assert "still pending" in result.error
    assert store.load().destination_path == str(tmp_path / "first.asset")


def test_failure_leaves_previous_output_untouched(
    generator, store, make_build, make_registry, write_doc, stats_doc, caplog
):
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())
    source = orchestrator.apply(write_doc(stats_doc)).source_path
    before = source.read_text(encoding="utf-8")

    stats_doc["className"] = ""
    stats_doc["parameters"].append({"key": "mana", "type": "int", "value": "5"})
    with caplog.at_level(logging.ERROR, logger="paramgen"):
        result = orchestrator.apply(write_doc(stats_doc))

    assert not result.success
    assert "Not found class name" in result.error
    assert "Not found class name" in caplog.text
    assert source.read_text(encoding="utf-8") == before


def test_missing_source_path_fails(
    generator, store, make_build, make_registry, write_doc, stats_doc
):
    stats_doc["csharpPath"] = ""
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())

    result = orchestrator.apply(write_doc(stats_doc))

    assert not result.success
    assert result.error == "No source output path given"


def test_missing_document_fails(generator, store, make_build, make_registry, tmp_path):
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())

    result = orchestrator.apply(tmp_path / "nope.json")

    assert not result.success
    assert "File not found" in result.error


def test_source_override_and_edited_spec_are_saved(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    path = write_doc(stats_doc)
    spec = load_spec(path)
    spec.parameters[0].value = "9.0"
    override = tmp_path / "Override" / "Stats.cs"
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())

    result = orchestrator.apply(path, source_output_path=override, spec=spec)

    assert result.source_path == override
    assert "speed = 9.0f;" in override.read_text(encoding="utf-8")
    assert load_spec(path).parameters[0].value == "9.0"


def test_static_class_skips_instantiation(
    store, make_build, make_registry, write_doc, stats_doc, tmp_path, caplog
):
    config = GeneratorConfig(class_kind="static_readonly")
    build = make_build()
    orchestrator = _orchestrator(
        CSharpGenerator(config), store, build, make_registry(), config
    )

    with caplog.at_level(logging.WARNING, logger="paramgen"):
        result = orchestrator.apply(
            write_doc(stats_doc), asset_output_path=tmp_path / "Stats.asset"
        )

    assert result.success
    assert result.pending is None
    assert build.requests == 0
    assert "cannot be instantiated" in caplog.text


def test_wait_for_completion_polls_until_done(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    orchestrator = _orchestrator(
        generator, store, make_build(busy_polls=3), make_registry(STATS_TYPE)
    )
    orchestrator.apply(write_doc(stats_doc), asset_output_path=tmp_path / "Stats.asset")
    sleeps = []

    status = orchestrator.wait_for_completion(
        poll_interval=0.25, timeout=10, sleep=sleeps.append, clock=lambda: 0.0
    )

    assert status is ResumeStatus.CREATED
    assert sleeps == [0.25, 0.25, 0.25]


def test_wait_for_completion_times_out_keeping_request(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    orchestrator = _orchestrator(
        generator, store, make_build(busy_polls=100), make_registry(STATS_TYPE)
    )
    orchestrator.apply(write_doc(stats_doc), asset_output_path=tmp_path / "Stats.asset")
    ticks = iter(range(100))

    status = orchestrator.wait_for_completion(
        poll_interval=1, timeout=3, sleep=lambda _: None, clock=lambda: next(ticks)
    )

    assert status is ResumeStatus.WAITING
    assert store.is_pending()


def test_end_to_end_with_source_registry(tmp_path, write_doc, stats_doc):
    stats_doc["parameters"].append(
        {"key": "spawn", "type": "Vector3", "value": "(1.0, 2.0, 0.0)"}
    )
    stats_doc["assetPath"] = str(tmp_path / "Assets" / "Stats.asset")
    config = GeneratorConfig(
        state_file=str(tmp_path / ".paramgen" / "pending.json"),
        type_roots=[str(tmp_path / "Assets")],
    )
    orchestrator = create_orchestrator(CSharpGenerator(config))

    assert isinstance(orchestrator.build, NullBuildBackend)
    assert isinstance(orchestrator.registry, SourceTypeRegistry)

    result = orchestrator.apply(write_doc(stats_doc))
    assert result.pending is not None
    assert orchestrator.resume() is ResumeStatus.CREATED

    asset = json.loads((tmp_path / "Assets" / "Stats.asset").read_text(encoding="utf-8"))
    assert asset == {
        "type": "Stats",
        "fields": {
            "speed": 3.5,
            "lives": 3,
            "spawn": {"x": 1.0, "y": 2.0, "z": 0.0},
        },
    }


def test_load_spec_wraps_bad_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(InvalidSpecError, match="Invalid JSON"):
        load_spec(path)


def test_apply_reports_document_that_is_not_utf8(
    generator, store, make_build, make_registry, tmp_path
):
    path = tmp_path / "Stats.json"
    path.write_bytes(b'{"className": "St\xff\xfe", "parameters": []}')
    orchestrator = _orchestrator(generator, store, make_build(), make_registry())

    result = orchestrator.apply(path, tmp_path / "out.cs")

    assert not result.success
    assert "not valid UTF-8" in result.error
    assert not (tmp_path / "out.cs").exists()


def test_build_that_cannot_start_leaves_nothing_pending(
    generator, store, make_registry, write_doc, stats_doc, tmp_path, caplog
):
    build = SubprocessBuildBackend(str(tmp_path / "no-such-build-tool"))
    orchestrator = _orchestrator(generator, store, build, make_registry(STATS_TYPE))
    asset = tmp_path / "Stats.asset"

    with caplog.at_level(logging.ERROR, logger="paramgen"):
        result = orchestrator.apply(write_doc(stats_doc), asset_output_path=asset)

    assert result.success
    assert result.pending is None
    assert not store.is_pending()
    assert "Could not start the build for Stats" in caplog.text
    assert orchestrator.resume() is ResumeStatus.IDLE
    assert not asset.exists()


def test_unbalanced_build_command_is_rejected_before_apply(generator, tmp_path):
    config = GeneratorConfig(
        build_command='dotnet "build', state_file=str(tmp_path / "pending.json")
    )

    with pytest.raises(ConfigError, match="Invalid build command"):
        create_orchestrator(generator, config)

    assert not (tmp_path / "pending.json").exists()


def test_resume_refuses_to_instantiate_static_type(
    generator, store, make_build, make_registry, write_doc, stats_doc, tmp_path
):
    static_stats = GeneratedType("Stats", is_static=True, fields={"lives": ("int", "3")})
    orchestrator = _orchestrator(
        generator, store, make_build(), make_registry(static_stats)
    )
    asset = tmp_path / "Stats.asset"
    orchestrator.apply(write_doc(stats_doc), asset_output_path=asset)

    assert orchestrator.resume() is ResumeStatus.FAILED
    assert not asset.exists()
    assert not store.is_pending()
