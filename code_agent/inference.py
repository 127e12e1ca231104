"""Inference gateway: one blocking chat completion per turn over the full transcript."""

import logging
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from code_agent.conversation import ASSISTANT, Conversation, TextSegment, ToolInvocation, Turn
from code_agent.errors import InferenceError
from code_agent.registry import ToolRegistry
from utils.llm_call import EmptyResponseError, LLMCallResult, call_chat_completion
from utils.runtime_config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL


logger = logging.getLogger("Inference-Gateway")

OVERLOADED_STATUS_CODES = {429, 503, 529}
# 429s that will not clear by waiting
FATAL_ERROR_TYPES = {"insufficient_quota"}


class InferenceGateway:
    """
    Stateless boundary to the remote model.

    The service keeps no context between calls, so every request carries the
    whole conversation and every tool schema of the registry.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        system_prompt: Optional[str] = None,
        client: Any = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.client = client or OpenAI(api_key = api_key, base_url = base_url, max_retries = 0)

    def complete(self, conversation: Conversation, registry: ToolRegistry) -> Turn:
        """
        Submit the conversation and return the model reply as an assistant turn.

        Raises:
            InferenceError: The call failed or the reply could not be read.
        """
        messages = conversation.to_messages(system_prompt = self.system_prompt)
        logger.debug(f"Requesting completion: {len(messages)} message(s), {len(registry)} tool(s)")

        try:
            result = call_chat_completion(
                client = self.client,
                model = self.model,
                messages = messages,
                tools = registry.schemas(),
                max_tokens = self.max_tokens,
            )
        except openai.APIStatusError as exc:
            raise InferenceError(
                str(exc),
                overloaded = _is_overloaded(exc),
                status_code = exc.status_code,
            ) from exc
        except openai.APIError as exc:
            raise InferenceError(str(exc)) from exc
        except EmptyResponseError as exc:
            raise InferenceError(f"unusable response: {exc}") from exc

        logger.debug(f"Completion metadata: {result.raw_metadata}")
        return reply_to_turn(result)


def reply_to_turn(result: LLMCallResult) -> Turn:
    """Convert a normalized completion into an assistant turn, text first."""
    segments: List[Any] = []
    if result.assistant_content:
        segments.append(TextSegment(result.assistant_content))

    for tool_call in result.tool_calls:
        function_block = tool_call.get("function") or {}
        segments.append(
            ToolInvocation(
                id = tool_call.get("id") or "",
                name = function_block.get("name") or "",
                arguments = function_block.get("arguments") or "{}",
            )
        )

    return Turn(role = ASSISTANT, segments = tuple(segments))


def _is_overloaded(exc: "openai.APIStatusError") -> bool:
    """Check whether a status error is a transient overload worth reporting only."""
    if FATAL_ERROR_TYPES & {_error_field(exc.body, "type"), _error_field(exc.body, "code")}:
        return False
    if exc.status_code in OVERLOADED_STATUS_CODES:
        return True
    return _error_field(exc.body, "type") == "overloaded_error"


def _error_field(body: Any, key: str) -> Optional[str]:
    """Pull one string field out of an API error body, nested under "error" or not."""
    if not isinstance(body, dict):
        return None
    error: Dict[str, Any] = body.get("error") if isinstance(body.get("error"), dict) else body
    value = error.get(key)
    return value if isinstance(value, str) else None
