"""Runtime option parsing: CLI flags, environment and config file."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values


BOOL_TRUE = {"1", "true", "yes", "y", "on"}
BOOL_FALSE = {"0", "false", "no", "n", "off"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}

DEFAULT_CONFIG_FILE = "config.env"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 1024


@dataclass
class RuntimeOptions:
    """Runtime settings merged from CLI, environment and the config file."""

    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    show_llm_response: bool = False
    log_level: str = "INFO"
    system_prompt_file: Optional[Path] = None
    config_file: Path = Path(DEFAULT_CONFIG_FILE)
    config_values: Dict[str, str] = field(default_factory = dict, repr = False)

    def as_dict(self) -> dict:
        """Return loggable dict form. Config file values are left out."""
        return {
            "model": self.model,
            "base_url": self.base_url,
            "max_tokens": self.max_tokens,
            "show_llm_response": self.show_llm_response,
            "log_level": self.log_level,
            "system_prompt_file": str(self.system_prompt_file) if self.system_prompt_file else None,
            "config_file": str(self.config_file),
        }


def add_runtime_args(parser: Any) -> None:
    """Attach runtime flags to an argparse parser."""
    import argparse

    parser.add_argument(
        "--model",
        dest = "model",
        default = None,
        help = f"Model name (default: LLM_MODEL or {DEFAULT_MODEL}).",
    )
    parser.add_argument(
        "--base-url",
        dest = "base_url",
        default = None,
        help = "OpenAI-compatible endpoint URL (default: LLM_BASE_URL or the SDK default).",
    )
    parser.add_argument(
        "--max-tokens",
        dest = "max_tokens",
        type = int,
        default = None,
        help = f"Max tokens per model reply (default: {DEFAULT_MAX_TOKENS}).",
    )
    parser.add_argument(
        "--show-llm-response",
        dest = "show_llm_response",
        action = argparse.BooleanOptionalAction,
        default = None,
        help = "Log per-turn assistant replies, tool calls and tool results.",
    )
    parser.add_argument(
        "--log-level",
        dest = "log_level",
        type = str.upper,
        choices = sorted(LOG_LEVELS),
        default = None,
        help = "Logging level for stderr diagnostics.",
    )
    parser.add_argument(
        "--system-prompt-file",
        dest = "system_prompt_file",
        default = None,
        help = "Optional file whose content is sent as the system prompt.",
    )
    parser.add_argument(
        "--config-file",
        dest = "config_file",
        default = None,
        help = f"KEY=value config file (default: {DEFAULT_CONFIG_FILE}).",
    )


def runtime_options_from_args(args: Any) -> RuntimeOptions:
    """Build runtime options with CLI > ENV > config file > default precedence."""
    config_file = Path(
        _resolve_str(
            cli_value = getattr(args, "config_file", None),
            env_name = "AGENT_CONFIG_FILE",
            default = DEFAULT_CONFIG_FILE,
        )
    )
    config_values = load_config_values(config_file)

    model = _resolve_str(
        cli_value = getattr(args, "model", None),
        env_name = "LLM_MODEL",
        default = DEFAULT_MODEL,
        file_values = config_values,
    )
    base_url = _resolve_str(
        cli_value = getattr(args, "base_url", None),
        env_name = "LLM_BASE_URL",
        default = "",
        file_values = config_values,
    )
    max_tokens = _resolve_int(
        cli_value = getattr(args, "max_tokens", None),
        env_name = "AGENT_MAX_TOKENS",
        default = DEFAULT_MAX_TOKENS,
        file_values = config_values,
    )
    show_llm_response = _resolve_bool(
        cli_value = getattr(args, "show_llm_response", None),
        env_name = "AGENT_SHOW_LLM_RESPONSE",
        default = False,
        file_values = config_values,
    )
    log_level = _resolve_enum(
        cli_value = getattr(args, "log_level", None),
        env_name = "AGENT_LOG_LEVEL",
        default = "INFO",
        allowed = LOG_LEVELS,
        file_values = config_values,
    )
    system_prompt_file = _resolve_str(
        cli_value = getattr(args, "system_prompt_file", None),
        env_name = "AGENT_SYSTEM_PROMPT_FILE",
        default = "",
        file_values = config_values,
    )

    return RuntimeOptions(
        model = model,
        base_url = base_url or None,
        max_tokens = max_tokens if max_tokens > 0 else DEFAULT_MAX_TOKENS,
        show_llm_response = show_llm_response,
        log_level = log_level,
        system_prompt_file = Path(system_prompt_file) if system_prompt_file else None,
        config_file = config_file,
        config_values = config_values,
    )


def load_config_values(config_file: Path) -> Dict[str, str]:
    """Read KEY=value pairs from the config file without touching os.environ."""
    if not config_file.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(config_file).items()
        if value is not None
    }


def _raw_setting(env_name: str, file_values: Optional[Dict[str, str]]) -> Optional[str]:
    """Environment value first, then the config file value."""
    raw_env = os.getenv(env_name)
    if raw_env is not None:
        return raw_env
    if file_values:
        return file_values.get(env_name)
    return None


def _resolve_bool(
    cli_value: Any,
    env_name: str,
    default: bool,
    file_values: Optional[Dict[str, str]] = None,
) -> bool:
    """Resolve bool with CLI > ENV > file > default precedence."""
    if cli_value is not None:
        return bool(cli_value)

    raw = _raw_setting(env_name, file_values)
    if raw is None:
        return default

    normalized = raw.strip().lower()
    if normalized in BOOL_TRUE:
        return True
    if normalized in BOOL_FALSE:
        return False
    return default


def _resolve_enum(
    cli_value: Any,
    env_name: str,
    default: str,
    allowed: set,
    file_values: Optional[Dict[str, str]] = None,
) -> str:
    """Resolve enum option with validation. Levels compare upper-case."""
    if cli_value is not None and str(cli_value).upper() in allowed:
        return str(cli_value).upper()

    raw = _raw_setting(env_name, file_values)
    if raw is not None:
        normalized = raw.strip().upper()
        if normalized in allowed:
            return normalized

    return default


def _resolve_int(
    cli_value: Any,
    env_name: str,
    default: int,
    file_values: Optional[Dict[str, str]] = None,
) -> int:
    """Resolve int option with fallback to default on parse failure."""
    if cli_value is not None:
        return int(cli_value)

    raw = _raw_setting(env_name, file_values)
    if raw is None:
        return default

    try:
        return int(raw.strip())
    except ValueError:
        return default


def _resolve_str(
    cli_value: Any,
    env_name: str,
    default: str,
    file_values: Optional[Dict[str, str]] = None,
) -> str:
    """Resolve string option with CLI > ENV > file > default precedence."""
    if cli_value is not None and str(cli_value).strip():
        return str(cli_value)

    raw = _raw_setting(env_name, file_values)
    if raw is not None and raw.strip():
        return raw.strip()

    return default
