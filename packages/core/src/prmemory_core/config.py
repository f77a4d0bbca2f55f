import logging
import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",  # "anthropic" | "openai" | "gemini"
    "summary_model": None,  # None = provider default
    "cache_path": "notion-sync-cache.json",
    "page_cache_path": "notion-page-cache.json",  # standalone-page mode keeps its own stem -> page id map
    "token_path": ".github-token",
    "payload_dir": "llm-payloads",
    "summary_dir": None,  # None = don't keep local copies of summaries
    "summary_prompt": None,  # None = use built-in prompt; set to a path string to override
    "page_size": 30,
    "max_workers": 4,
    "http_timeout": 30,
    "notion_parent_type": "page",  # "page" | "database"
    "notion_title_property": "Name",
}

BUILTIN_PROMPTS_DIR = Path(__file__).parent / "prompts"
_BUILTIN_PROMPT = BUILTIN_PROMPTS_DIR / "summary.md"

logger = logging.getLogger(__name__)


def _parse_limit(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        limit = int(value)
    except ValueError:
        return None
    return limit if limit > 0 else None


def load_config(config_path: str = ".prmemory.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prmemory.yml in the current directory
      3. CLI argument overrides

    Credentials are read from the environment here and nowhere else; every
    other component receives them through this dict.
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["github_client_id"] = os.environ.get("GITHUB_CLIENT_ID")
    config["notion_api_key"] = os.environ.get("NOTION_API_KEY")
    config["notion_page_id"] = os.environ.get("NOTION_PAGE_ID")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["gemini_api_key"] = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    config["pr_limit"] = _parse_limit(os.environ.get("PR_LIMIT"))

    return config


def load_summary_prompt(config: dict) -> str:
    """Return the instructions placed in front of each PR's JSON payload.

    The built-in prompt (``prompts/summary.md``) tells the model that review
    comments point at shared diff context through ``hunkRef`` ids resolved in
    ``diffHunks``. A custom ``summary_prompt`` file replaces it wholesale; one
    that never mentions ``hunkRef`` still works, but the model then has to
    guess what the ids mean, so a warning is logged.
    """
    custom_path = config.get("summary_prompt")
    if not custom_path:
        return _BUILTIN_PROMPT.read_text(encoding="utf-8")

    path = Path(custom_path)
    if not path.is_file():
        raise FileNotFoundError(f"Summary prompt file not found: {custom_path}")
    instructions = path.read_text(encoding="utf-8")
    if "hunkRef" not in instructions:
        logger.warning("Summary prompt %s does not explain hunkRef/diffHunks to the model.", custom_path)
    return instructions
