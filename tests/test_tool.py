import builtins
import json

import pytest

from conftest import read_json, write_json

from locale_guard import tool
from locale_guard.tool import BOX_TOOL


@pytest.fixture
def project(chdir_tmp, source_map):
    write_json(chdir_tmp / "en.json", source_map)
    (chdir_tmp / "locale_guard.yaml").write_text("languages: [de, fr]\n", encoding="utf-8")
    return chdir_tmp


def _patch_inputs(monkeypatch, inputs):
    it = iter(inputs)
    monkeypatch.setattr(builtins, "input", lambda _prompt="": next(it))


def test_sync_then_validate_reports_untranslated_but_valid(project):
    assert tool.main(["sync"]) == 0

    assert read_json(project / "de.json")["nav.home"] == "Home"
    report = read_json(project / "report.json")
    assert report["languages"]["de"]["completion"] == 0.0

    # 占位文本与源一致：结构合法
    assert tool.main(["validate", "de.json", "fr.json"]) == 0


def test_validate_fails_on_errors(project, capsys):
    write_json(project / "de.json", {"greeting": "Hallo", "nav.home": "Start", "nav.settings": "<script>"})

    rc = tool.main(["validate", "de.json"])
    out = capsys.readouterr().out

    assert rc == 1
    assert "{{name}}" in out
    assert "script tag" in out


def test_warnings_do_not_fail(project, capsys):
    write_json(project / "de.json", {"greeting": "Hallo {{name}}", "nav.home": "", "nav.settings": "Einstellungen"})

    rc = tool.main(["validate", "de.json"])

    assert rc == 0
    assert "Value is empty" in capsys.readouterr().out


def test_missing_file_counts_as_error(project, capsys):
    rc = tool.main(["validate", "it.json"])

    assert rc == 1
    assert "it.json" in capsys.readouterr().out


def test_reserved_files_fail(project):
    assert tool.main(["validate", "en.json"]) == 1

    write_json(project / "report.json", {"generated": "x"})
    assert tool.main(["validate", "report.json"]) == 1


def test_validate_without_files_is_usage_error(project):
    assert tool.main(["validate"]) == 1


def test_validate_all(project):
    write_json(project / "de.json", {"greeting": "Hallo {{name}}", "nav.home": "Start", "nav.settings": "Einstellungen"})
    write_json(project / "fr.json", {"greeting": "Salut"})

    assert tool.main(["validate", "--all"]) == 1

    write_json(project / "fr.json", {"greeting": "Salut {{name}}", "nav.home": "Accueil", "nav.settings": "Réglages"})
    assert tool.main(["validate", "--all"]) == 0


def test_source_missing_is_fatal(chdir_tmp, capsys):
    assert tool.main(["sync"]) == 1
    assert tool.main(["validate", "de.json"]) == 1
    assert not (chdir_tmp / "report.json").exists()


def test_bad_config_exit_code(chdir_tmp):
    (chdir_tmp / "locale_guard.yaml").write_text("languages: de\n", encoding="utf-8")

    assert tool.main(["sync"]) == 2
    assert tool.main(["doctor"]) == 1


def test_i18n_dir_override(chdir_tmp, source_map):
    loc = chdir_tmp / "locales"
    loc.mkdir()
    write_json(loc / "en.json", source_map)

    assert tool.main(["sync", "--i18n-dir", "locales", "--dry-run"]) == 0
    assert not (loc / "de.json").exists()

    assert tool.main(["sync", "--i18n-dir", "locales"]) == 0
    assert (loc / "de.json").exists()
    assert json.loads((loc / "report.json").read_text(encoding="utf-8"))["totalKeys"] == 3


def test_init_and_doctor(chdir_tmp, source_map):
    assert tool.main(["init"]) == 0
    assert tool.main(["init"]) == 2

    # 源语言文件缺失
    assert tool.main(["doctor"]) == 1

    write_json(chdir_tmp / "en.json", source_map)
    assert tool.main(["doctor"]) == 0


def test_interactive_exit(monkeypatch, chdir_tmp):
    _patch_inputs(monkeypatch, ["q"])
    assert tool.main([]) == 0


def test_interactive_sync(monkeypatch, project):
    _patch_inputs(monkeypatch, ["x", "1"])

    assert tool.main([]) == 0
    assert (project / "de.json").exists()
    assert (project / "fr.json").exists()


def test_interactive_validate_all(monkeypatch, project):
    write_json(project / "de.json", {"greeting": "Hallo"})
    _patch_inputs(monkeypatch, ["2"])

    assert tool.main([]) == 1


def test_validate_non_utf8_counts_one_error(project, capsys):
    (project / "de.json").write_bytes(b'{"a": "\xff"}')

    rc = tool.main(["validate", "de.json"])
    out = capsys.readouterr().out

    assert rc == 1
    assert "UTF-8" in out
    assert "1 个文件，1 个错误" in out


@pytest.mark.parametrize(
    "text",
    [
        '{"greeting": NaN, "nav.home": "Start", "nav.settings": "Einstellungen"}',
        '{"greeting": ' + "1" * 5000 + ', "nav.home": "Start", "nav.settings": "Einstellungen"}',
        "[" * 100000 + "]" * 100000,
    ],
)
def test_validate_unparsable_values_fail_cleanly(project, capsys, text):
    (project / "de.json").write_text(text, encoding="utf-8")

    rc = tool.main(["validate", "de.json"])

    assert rc == 1
    assert "1 个文件，1 个错误" in capsys.readouterr().out


def test_validate_all_does_not_repeat_explicit_file(project, capsys):
    write_json(project / "de.json", {"greeting": "Hallo {{name}}", "nav.home": "Start"})

    rc = tool.main(["validate", "de.json", "--all"])
    out = capsys.readouterr().out

    assert rc == 1
    assert "1 个文件，1 个错误" in out


def test_box_tool_metadata_matches_parser():
    assert BOX_TOOL["name"] == "locale_guard"
    assert BOX_TOOL["id"].endswith(BOX_TOOL["name"])
    assert all(u.startswith(BOX_TOOL["name"]) for u in BOX_TOOL["usage"])

    help_text = tool.build_parser().format_help()
    for opt in BOX_TOOL["options"]:
        assert opt["flag"] in help_text
