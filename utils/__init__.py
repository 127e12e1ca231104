"""Shared runtime utilities for the code agent."""

from .runtime_config import RuntimeOptions, add_runtime_args, runtime_options_from_args
from .credentials import MissingCredentialError, load_api_key
from .llm_call import LLMCallResult, call_chat_completion
from .trace_logger import TraceLogger

__all__ = [
    "RuntimeOptions",
    "add_runtime_args",
    "runtime_options_from_args",
    "MissingCredentialError",
    "load_api_key",
    "LLMCallResult",
    "call_chat_completion",
    "TraceLogger",
]
