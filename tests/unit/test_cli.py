"""Unit tests for the command line entry point (no network)."""

from __future__ import annotations

import json

import pytest

from codesage import cli, config
from codesage.review.normalizer import build_fallback_analysis
from codesage.review.reviewer import CodeReviewer


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    monkeypatch.setattr(config, "_ENV_LOADED", True)
    monkeypatch.delenv(config.API_KEY_ENV_VAR, raising=False)


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "sample.py"
    path.write_text("def greet(name):\n    print('hi ' + name)\n", encoding="utf-8")
    return path


def test_set_key_writes_settings(settings_file):
    assert cli.main(["--settings-file", str(settings_file), "set-key", "AIza-cli"]) == 0
    assert json.loads(settings_file.read_text())["gemini_api_key"] == "AIza-cli"


def test_set_key_rejects_placeholder(settings_file, capsys):
    assert cli.main(["--settings-file", str(settings_file), "set-key", config.API_KEY_PLACEHOLDER]) == 2
    assert "valid API key" in capsys.readouterr().err
    assert not settings_file.exists()


def test_review_without_key_exits_with_configuration_error(settings_file, source_file, capsys):
    assert cli.main(["--settings-file", str(settings_file), "review", str(source_file)]) == 2
    assert "Please set your Gemini API key first" in capsys.readouterr().err


def test_missing_source_file(settings_file, tmp_path):
    assert cli.main(["--settings-file", str(settings_file), "review", str(tmp_path / "nope.py")]) == 1


def test_review_prints_wire_json(monkeypatch, settings_file, source_file, capsys):
    async def fake_analyze(self, code):
        return build_fallback_analysis(code)

    monkeypatch.setenv(config.API_KEY_ENV_VAR, "AIza-env")
    monkeypatch.setattr(CodeReviewer, "analyze", fake_analyze)

    assert cli.main(["--settings-file", str(settings_file), "review", str(source_file)]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["overallScore"] == 7
    assert output["codeQuality"] == "Fair"


def test_resolve_credentials_prefers_environment(monkeypatch, settings_file):
    monkeypatch.setenv(config.API_KEY_ENV_VAR, "AIza-env")
    assert cli.resolve_credentials(settings_file).get() == "AIza-env"


def test_resolve_credentials_uses_settings_file(settings_file):
    settings_file.write_text(json.dumps({"gemini_api_key": "AIza-file"}))
    assert cli.resolve_credentials(settings_file).get() == "AIza-file"


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == f"CodeSage {config.APP_VERSION}"
