"""Chat completion wrapper normalizing replies to plain text plus tool calls."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class LLMCallResult:
    """Normalized result returned by the shared LLM call wrapper."""

    assistant_content: str
    tool_calls: List[Dict[str, Any]]
    raw_metadata: Dict[str, Any]


class EmptyResponseError(ValueError):
    """The service answered without any choices to read a reply from."""


def call_chat_completion(
    client: Any,
    model: str,
    messages: List[Dict[str, Any]],
    tools: Optional[List[Dict[str, Any]]] = None,
    max_tokens: int = 1024,
) -> LLMCallResult:
    """Call chat completion once and normalize the first choice."""
    request = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
    }

    if tools:
        request["tools"] = tools

    response = client.chat.completions.create(**request)
    choices = getattr(response, "choices", None) or []
    if not choices:
        raise EmptyResponseError("chat completion returned no choices")

    message = getattr(choices[0], "message", None)
    if message is None:
        raise EmptyResponseError("chat completion choice has no message")

    return LLMCallResult(
        assistant_content = _coerce_text(getattr(message, "content", "")),
        tool_calls = _normalize_tool_calls(getattr(message, "tool_calls", None)),
        raw_metadata = {
            "response_id": getattr(response, "id", None),
            "model": getattr(response, "model", None),
            "finish_reason": getattr(choices[0], "finish_reason", None),
            "usage": _safe_model_dump(getattr(response, "usage", None)),
        },
    )


def _normalize_tool_calls(tool_calls: Any) -> List[Dict[str, Any]]:
    """Normalize tool call objects to plain dicts."""
    normalized = []
    if not tool_calls:
        return normalized

    for index, tool_call in enumerate(tool_calls):
        function_payload = _read_obj(tool_call, "function") or {}
        normalized.append(
            {
                "id": _read_obj(tool_call, "id") or f"call_{index}",
                "type": _read_obj(tool_call, "type") or "function",
                "function": {
                    "name": _read_obj(function_payload, "name") or "",
                    "arguments": _coerce_arguments(_read_obj(function_payload, "arguments")),
                },
            }
        )
    return normalized


def _coerce_arguments(arguments: Any) -> str:
    """Tool arguments as a JSON string; some providers send a decoded object."""
    if not arguments:
        return "{}"
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments, ensure_ascii = False)


def _coerce_text(value: Any) -> str:
    """Flatten value to text conservatively."""
    if value is None:
        return ""

    if isinstance(value, str):
        return value

    if isinstance(value, list):
        return "".join(_coerce_text(item) for item in value)

    if isinstance(value, dict):
        if "text" in value:
            return _coerce_text(value.get("text"))
        if "content" in value:
            return _coerce_text(value.get("content"))
        return ""

    for attr_name in ["text", "content"]:
        attr_value = getattr(value, attr_name, None)
        if attr_value is not None:
            return _coerce_text(attr_value)

    return str(value)


def _read_obj(obj: Any, key: str) -> Any:
    """Read key from object or dict safely."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _safe_model_dump(obj: Any) -> Any:
    """Best-effort conversion of SDK objects to plain dicts."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj

    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        try:
            return model_dump()
        except Exception:
            return str(obj)

    return str(obj)
