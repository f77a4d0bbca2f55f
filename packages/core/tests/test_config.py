"""Tests for configuration loading."""

import pytest

from prmemory_core.config import load_config, load_summary_prompt

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_CLIENT_ID",
    "NOTION_API_KEY",
    "NOTION_PAGE_ID",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "PR_LIMIT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic"
    assert config["cache_path"] == "notion-sync-cache.json"
    assert config["page_cache_path"] == "notion-page-cache.json"
    assert config["payload_dir"] == "llm-payloads"
    assert config["page_size"] == 30
    assert config["summary_prompt"] is None
    assert config["pr_limit"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prmemory.yml"
    cfg.write_text("model: gemini\ncache_path: state/cache.json\nmax_workers: 8\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "gemini"
    assert config["cache_path"] == "state/cache.json"
    assert config["max_workers"] == 8


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".prmemory.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["model"] == "anthropic"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prmemory.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prmemory.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai"


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("NOTION_API_KEY", "secret_abc")
    monkeypatch.setenv("NOTION_PAGE_ID", "page-123")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["notion_api_key"] == "secret_abc"
    assert config["notion_page_id"] == "page-123"
    assert config["anthropic_api_key"] == "ant-key"
    assert config["gemini_api_key"] == "gem-key"


def test_google_api_key_fallback(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
    assert load_config(config_path="nonexistent.yml")["gemini_api_key"] == "google-key"


@pytest.mark.parametrize(
    "raw, expected",
    [("5", 5), ("0", None), ("-3", None), ("all", None), ("", None)],
)
def test_pr_limit_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("PR_LIMIT", raw)
    assert load_config(config_path="nonexistent.yml")["pr_limit"] == expected


def test_custom_summary_prompt(tmp_path):
    prompt = tmp_path / "prompt.md"
    prompt.write_text("Summarize in three bullets.")
    assert load_summary_prompt({"summary_prompt": str(prompt)}) == "Summarize in three bullets."


def test_builtin_summary_prompt_loaded_as_fallback():
    content = load_summary_prompt({"summary_prompt": None})
    assert "hunkRef" in content
    assert "diffHunks" in content


def test_missing_custom_summary_prompt_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_summary_prompt({"summary_prompt": str(tmp_path / "nope.md")})


def test_custom_prompt_without_hunk_refs_warns(tmp_path, caplog):
    prompt = tmp_path / "prompt.md"
    prompt.write_text("Summarize in three bullets.")
    with caplog.at_level("WARNING", logger="prmemory_core.config"):
        load_summary_prompt({"summary_prompt": str(prompt)})
    assert "hunkRef" in caplog.text


def test_custom_prompt_with_hunk_refs_is_quiet(tmp_path, caplog):
    prompt = tmp_path / "prompt.md"
    prompt.write_text("Comments carry a hunkRef; look it up in diffHunks.")
    with caplog.at_level("WARNING", logger="prmemory_core.config"):
        load_summary_prompt({"summary_prompt": str(prompt)})
    assert caplog.text == ""
