"""API key lookup: environment variable first, then the KEY=value config file."""

import os
from pathlib import Path
from typing import Dict, Optional


API_KEY_ENV = "LLM_API_KEY"


class MissingCredentialError(RuntimeError):
    """No usable API key was found at startup."""


def remediation_message(env_name: str = API_KEY_ENV, config_file: Path = Path("config.env")) -> str:
    """Fixed help text printed when no key is available."""
    return (
        f"{env_name} is required\n"
        "Please either:\n"
        f"1. Set environment variable: export {env_name}=your_api_key_here\n"
        f"2. Add {env_name}=your_api_key_here to {config_file}"
    )


def load_api_key(
    config_values: Optional[Dict[str, str]] = None,
    env_name: str = API_KEY_ENV,
    config_file: Path = Path("config.env"),
) -> str:
    """
    Return the API key without exporting it to the process environment.

    Parameters:
        config_values: KEY=value pairs already read from the config file.
        env_name: Variable name looked up in both places.
        config_file: Only used to word the error message.
    """
    api_key = (os.getenv(env_name) or "").strip()
    if api_key:
        return api_key

    api_key = ((config_values or {}).get(env_name) or "").strip()
    if api_key:
        return api_key

    raise MissingCredentialError(remediation_message(env_name, config_file))


def mask_key(api_key: str, visible: int = 6) -> str:
    """Show only a short prefix of a key for logs."""
    return f"{api_key[:visible]}..." if api_key else "(empty)"
