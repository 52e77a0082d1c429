import json

import pytest

from paramgen.codegen import GenerationOrchestrator
from paramgen.codegen.core.schema import GenerationSpec, ParameterEntry
from paramgen.commands import (
    AddParameter,
    Apply,
    CommandError,
    EditSession,
    RemoveParameter,
    SetField,
    SetParameter,
    apply_command,
    parse_command,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("add speed", AddParameter("speed")),
        ("add speed int", AddParameter("speed", "int")),
        ("add spawn Vector3 '(1, 2, 3)'", AddParameter("spawn", "Vector3", "(1, 2, 3)")),
        ("remove speed", RemoveParameter("speed")),
        ("set speed float 4.5", SetParameter("speed", type="float", value="4.5")),
        ("rename speed moveSpeed", SetParameter("speed", new_key="moveSpeed")),
        ("field className Player", SetField("className", "Player")),
        ("APPLY", Apply()),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) == expected


def test_parse_command_accepts_word_lists():
    assert parse_command(["set", "hp", "int", "-1"]) == SetParameter(
        "hp", type="int", value="-1"
    )


@pytest.mark.parametrize("text", ["", "add", "remove", "set a b", "launch", "apply now"])
def test_parse_command_rejects_bad_input(text):
    with pytest.raises(CommandError):
        parse_command(text)


def test_apply_commands_edit_the_spec():
    spec = GenerationSpec(class_name="Stats")

    apply_command(spec, AddParameter("speed", "float", "1.0"))
    apply_command(spec, AddParameter())
    apply_command(spec, SetParameter("speed", value="2.0", new_key="moveSpeed"))
    apply_command(spec, RemoveParameter(""))

    assert spec.parameters == [ParameterEntry("moveSpeed", "float", "2.0")]


def test_set_field_by_wire_or_python_name():
    spec = GenerationSpec()

    apply_command(spec, SetField("nameSpace", "Game"))
    apply_command(spec, SetField("asset_output_path", "Assets/Stats.asset"))

    assert spec.namespace == "Game"
    assert spec.asset_output_path == "Assets/Stats.asset"


def test_source_path_can_rename_class():
    spec = GenerationSpec(class_name="Old")

    apply_command(spec, SetField("csharpPath", "Assets/Enemy.cs", sync_class_name=True))
    assert spec.class_name == "Enemy"

    apply_command(spec, SetField("csharpPath", "Assets/Other.cs"))
    assert spec.class_name == "Enemy"


@pytest.mark.parametrize(
    "command",
    [RemoveParameter("nope"), SetParameter("nope", value="1"), SetField("colour", "red")],
)
def test_commands_on_missing_targets_raise(command):
    with pytest.raises(CommandError):
        apply_command(GenerationSpec(), command)


def test_edit_session_save_and_revert(write_doc, stats_doc):
    path = write_doc(stats_doc)
    session = EditSession(path)

    session.execute(AddParameter("mana", "int", "10"))
    assert session.dirty
    session.revert()
    assert [p.key for p in session.spec.parameters] == ["speed", "lives"]

    session.execute(RemoveParameter("lives"))
    session.save()

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert [p["key"] for p in saved["parameters"]] == ["speed"]
    assert not session.dirty


def test_edit_session_apply_requires_orchestrator(write_doc, stats_doc):
    session = EditSession(write_doc(stats_doc))
    with pytest.raises(CommandError):
        session.execute(Apply())


def test_edit_session_apply_saves_and_generates(
    write_doc, stats_doc, generator, store, make_build, make_registry
):
    path = write_doc(stats_doc)
    orchestrator = GenerationOrchestrator(
        generator, store, build=make_build(), registry=make_registry()
    )
    session = EditSession(path, orchestrator)

    session.execute(SetParameter("speed", value="7.25"))
    result = session.execute(Apply())

    assert result.success
    assert "public float speed = 7.25f;" in result.source_path.read_text(encoding="utf-8")
    assert json.loads(path.read_text(encoding="utf-8"))["parameters"][0]["value"] == "7.25"
    assert not session.dirty
