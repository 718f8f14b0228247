"""
Configuration loader for vc_report_helper.

Report generation needs credentials and a few preferences for the chat
completion API. They are read from a JSON file named
``.report_config.json`` in the ``~/.daily_report/`` directory (or from an
explicit path). This loader validates the structure of the file and
returns a dictionary with defaults applied for the optional keys.

The file is only read here; writing it is left to whatever tool the user
prefers. If it is missing, malformed, or has fields of the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings or logging errors in
# environments where the root logger may be closed. Propagation is enabled
# again when the CLI configures logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".report_config.json"

DEFAULT_API_BASE_URL = "https://api.deepseek.com"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_PROMPT = (
    "Based on my Git commit history, summarize today's work in detail: the "
    "tasks completed, the problems solved and the progress made. Use a clear "
    "structure with bullet points and include the key technical details."
)

AVAILABLE_MODELS = {
    "deepseek-chat": "General-purpose chat model",
    "deepseek-reasoner": "Model with enhanced reasoning",
    "deepseek-coder": "Model specialised in code generation and analysis",
}


class ConfigError(Exception):
    """Raised when the report configuration file is missing or invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the user-specific configuration directory ``~/.daily_report/``."""
    return Path.home() / ".daily_report"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and validate the report configuration.

    Args:
        config_path: Explicit path of the JSON file. Defaults to
                     ``~/.daily_report/.report_config.json``.

    Returns:
        A dictionary with the keys:
        - apiKey (str): Bearer token for the chat API
        - apiBaseUrl (str): Base URL of the API, default ``https://api.deepseek.com``
        - model (str): Model name, default ``deepseek-chat``
        - defaultPrompt (str): Instruction sent with every report request
        - requestTimeout (int|float, optional): Request timeout in seconds
        - maxTokens (int, optional): Maximum tokens for generation
        - temperature (int|float, optional): Sampling temperature

    Raises:
        ConfigError: If the file is missing, malformed, or invalid.
    """
    if config_path is None:
        config_path = _get_config_directory() / CONFIG_FILE_NAME

    if not config_path.exists():
        logger.error("Configuration file '%s' does not exist", config_path)
        raise ConfigError(
            f"Missing report configuration file: {config_path}. "
            f"Create it with at least an \"apiKey\" entry."
        )

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    api_key = data.get("apiKey")
    if api_key is None:
        logger.error("Configuration file missing required key: apiKey")
        raise ConfigError("Missing required configuration key: apiKey")
    if not isinstance(api_key, str):
        raise ConfigError("'apiKey' must be a string")
    if not api_key.strip():
        raise ConfigError("'apiKey' must not be empty")

    for key in ("apiBaseUrl", "model", "defaultPrompt"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "requestTimeout" in data and not isinstance(data["requestTimeout"], (int, float)):
        raise ConfigError("'requestTimeout' must be a number")
    if "maxTokens" in data and not isinstance(data["maxTokens"], int):
        raise ConfigError("'maxTokens' must be an integer")
    if "temperature" in data and not isinstance(data["temperature"], (int, float)):
        raise ConfigError("'temperature' must be a number")

    config: Dict[str, Any] = dict(data)
    config["apiKey"] = api_key.strip()
    # Empty strings fall back to the defaults as well
    config["apiBaseUrl"] = (data.get("apiBaseUrl") or DEFAULT_API_BASE_URL).rstrip("/")
    config["model"] = data.get("model") or DEFAULT_MODEL
    config["defaultPrompt"] = data.get("defaultPrompt") or DEFAULT_PROMPT

    if config["model"] not in AVAILABLE_MODELS:
        logger.warning("Model '%s' is not one of the known models", config["model"])

    logger.debug("Loaded report configuration from: %s", config_path)
    return config
