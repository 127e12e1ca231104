"""Per-turn LLM response trace logger."""

import json
import logging
from typing import Any, Optional


class TraceLogger:
    """Conditional trace logging for assistant replies, tool calls and tool results."""

    def __init__(self, enabled: bool, logger: Optional[logging.Logger] = None):
        self.enabled = bool(enabled)
        self.logger = logger or logging.getLogger("TraceLogger")

    def log_turn(self, actor: str, turn: Any) -> None:
        """Log assistant text and tool-call summaries of one reply turn."""
        if not self.enabled:
            return

        content_preview = _shorten(turn.text or "", 400)
        self.logger.info(f"[LLM:{actor}] assistant: {content_preview or '(empty)'}")

        invocations = turn.invocations
        if invocations:
            summary = "; ".join(
                _summarize_tool_call(invocation.name, invocation.arguments)
                for invocation in invocations
            )
            self.logger.info(f"[LLM:{actor}] tool_calls: {summary}")

    def log_result(self, actor: str, tool_name: str, result: Any) -> None:
        """Log one tool result preview."""
        if not self.enabled:
            return

        status = "error" if result.is_error else "ok"
        preview = _shorten(result.content or "", 200)
        self.logger.info(f"[LLM:{actor}] tool_result {tool_name} ({status}): {preview or '(empty)'}")


def _summarize_tool_call(tool_name: str, arguments: str) -> str:
    """Build compact 'name(args)' summary from a tool call payload."""
    tool_name = tool_name or "unknown"
    arguments = arguments or "{}"

    try:
        parsed = json.loads(arguments)
        args_preview = json.dumps(parsed, ensure_ascii = False)
    except (TypeError, json.JSONDecodeError):
        args_preview = str(arguments)

    return f"{tool_name}({_shorten(args_preview, 160)})"


def _shorten(text: str, max_chars: int) -> str:
    """Trim long text for concise logs."""
    normalized = text.replace("\n", "\\n").strip()
    if len(normalized) <= max_chars:
        return normalized
    return normalized[:max_chars] + "..."
