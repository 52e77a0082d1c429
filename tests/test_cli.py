import json

import pytest

from paramgen.main import create_parser, main


@pytest.fixture()
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_no_command_prints_help(project, capsys):
    assert main([]) == 1
    assert "usage: paramgen" in capsys.readouterr().out


def test_new_creates_template_named_after_file(project):
    assert main(["new", "PlayerStats.json"]) == 0

    assert _read(project / "PlayerStats.json") == {
        "parameters": [],
        "csharpPath": "",
        "className": "PlayerStats",
        "nameSpace": "",
        "assetPath": "",
    }


def test_new_refuses_to_overwrite(project, capsys):
    main(["new", "Stats.json"])

    assert main(["new", "Stats.json"]) == 1
    assert "already exists" in capsys.readouterr().out
    assert main(["new", "Stats.json", "--force", "--class-name", "Tuning"]) == 0
    assert _read(project / "Stats.json")["className"] == "Tuning"


def test_edit_then_generate(project):
    main(["new", "Stats.json"])
    assert main(["edit", "Stats.json", "add", "speed", "float", "3.5"]) == 0
    assert main(["edit", "Stats.json", "field", "nameSpace", "Game"]) == 0

    assert main(["generate", "Stats.json", "-o", "Assets/Stats.cs"]) == 0

    assert (project / "Assets" / "Stats.cs").read_text(encoding="utf-8") == (
        "using UnityEngine;\n"
        "namespace Game\n"
        "{\n"
        "    public class Stats : ScriptableObject\n"
        "    {\n"
        "        public float speed = 3.5f;\n"
        "\n"
        "    }\n"
        "}\n"
    )


def test_edit_reports_bad_commands(project, capsys):
    main(["new", "Stats.json"])

    assert main(["edit", "Stats.json", "remove", "speed"]) == 1
    assert "No parameter named 'speed'" in capsys.readouterr().out


def test_edit_apply_generates(project):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "field", "csharpPath", "Out/Stats.cs"])
    main(["edit", "Stats.json", "add", "lives", "int", "3"])

    assert main(["edit", "Stats.json", "apply"]) == 0
    assert "public int lives = 3;" in (project / "Out" / "Stats.cs").read_text(
        encoding="utf-8"
    )


def test_generate_stdout_writes_nothing(project, capsys):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "add", "speed", "float", "3.5"])
    capsys.readouterr()

    assert main(["generate", "Stats.json", "--stdout", "--class-kind", "plain"]) == 0

    out = capsys.readouterr().out
    assert "public class Stats" in out
    assert "public float speed = 3.5f;" in out
    assert list(project.iterdir()) == [project / "Stats.json"]


def test_generate_with_asset_and_wait(project, capsys):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "add", "speed", "float", "3.5"])

    code = main(
        [
            "generate",
            "Stats.json",
            "-o",
            "Assets/Stats.cs",
            "--asset",
            "Assets/Stats.asset",
            "--type-root",
            "Assets",
            "--wait",
        ]
    )

    assert code == 0
    assert _read(project / "Assets" / "Stats.asset") == {
        "type": "Stats",
        "fields": {"speed": 3.5},
    }
    assert not (project / ".paramgen" / "pending.json").exists()
    assert "Asset created" in capsys.readouterr().out


def test_generate_then_resume(project, capsys):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "add", "lives", "int", "3"])
    main(["generate", "Stats.json", "-o", "Assets/Stats.cs", "--asset", "Stats.asset"])
    assert (project / ".paramgen" / "pending.json").exists()

    assert main(["resume", "--type-root", "Assets"]) == 0
    assert _read(project / "Stats.asset")["fields"] == {"lives": 3}

    capsys.readouterr()
    assert main(["resume"]) == 0
    assert "No pending instantiation" in capsys.readouterr().out


def test_resume_not_found_fails(project):
    main(["new", "Stats.json"])
    main(["generate", "Stats.json", "-o", "Assets/Stats.cs", "--asset", "Stats.asset"])

    assert main(["resume", "--type-root", "Elsewhere"]) == 1
    assert not (project / "Stats.asset").exists()


def test_generate_missing_class_name_fails(project, capsys):
    (project / "Stats.json").write_text(json.dumps({"parameters": []}), encoding="utf-8")

    assert main(["generate", "Stats.json", "-o", "Stats.cs"]) == 1
    assert "Not found class name" in capsys.readouterr().out
    assert not (project / "Stats.cs").exists()


def test_unsupported_language(project, capsys):
    main(["new", "Stats.json"])
    assert main(["generate", "Stats.json", "--language", "cobol"]) == 1
    assert "Unsupported language" in capsys.readouterr().out


def test_show(project, capsys):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "add", "speed", "float", "3.5"])
    capsys.readouterr()

    assert main(["show", "Stats.json"]) == 0
    out = capsys.readouterr().out
    assert "speed" in out
    assert "3.5" in out


def test_list_languages(project, capsys):
    assert main(["--list-languages"]) == 0
    assert "csharp" in capsys.readouterr().out


def test_language_info(project, capsys):
    assert main(["--language-info", "unity"]) == 0
    assert "CSharpGenerator" in capsys.readouterr().out
    assert main(["--language-info", "cobol"]) == 1


def test_log_file_receives_debug_records(project):
    main(["--log-file", "logs/paramgen.log", "new", "Stats.json"])

    log = (project / "logs" / "paramgen.log").read_text(encoding="utf-8")
    assert "Created template document Stats.json" in log


def test_parser_normalises_log_level():
    args = create_parser().parse_args(["--log-level", "debug", "resume"])
    assert args.log_level == "DEBUG"


def test_generate_with_unbalanced_build_command_fails_cleanly(project, capsys):
    main(["new", "Stats.json"])
    main(["edit", "Stats.json", "add", "lives", "int", "3"])

    code = main(
        [
            "generate",
            "Stats.json",
            "-o",
            "Assets/Stats.cs",
            "--asset",
            "Stats.asset",
            "--build-command",
            'dotnet "build',
        ]
    )

    assert code == 1
    assert "Invalid build command" in capsys.readouterr().out
    assert not (project / ".paramgen" / "pending.json").exists()
