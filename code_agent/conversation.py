"""Conversation transcript: role-tagged turns made of typed content segments."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from code_agent.errors import InvalidInput


USER = "user"
ASSISTANT = "assistant"

ERROR_PREFIX = "Error: "


@dataclass(frozen = True)
class TextSegment:
    """Free text written by the user or the model."""

    text: str


@dataclass(frozen = True)
class ToolInvocation:
    """One tool call requested by the model."""

    id: str
    name: str
    arguments: str = "{}"

    @property
    def input(self) -> Dict[str, Any]:
        """Decode the raw JSON arguments into a parameter mapping."""
        if not self.arguments or not self.arguments.strip():
            return {}

        try:
            payload = json.loads(self.arguments)
        except json.JSONDecodeError as exc:
            raise InvalidInput(f"invalid input format: {exc}") from exc

        if not isinstance(payload, dict):
            raise InvalidInput("invalid input format: expected a JSON object")
        return payload


@dataclass(frozen = True)
class ToolResult:
    """Outcome of one tool invocation, fed back to the model."""

    invocation_id: str
    content: str
    is_error: bool = False


Segment = Union[TextSegment, ToolInvocation, ToolResult]


@dataclass(frozen = True)
class Turn:
    """One role-tagged entry of the conversation."""

    role: str
    segments: Tuple[Segment, ...]

    def __post_init__(self):
        if self.role not in (USER, ASSISTANT):
            raise ValueError(f"Unknown role: {self.role}")
        object.__setattr__(self, "segments", tuple(self.segments))

    @classmethod
    def user_text(cls, text: str) -> "Turn":
        return cls(role = USER, segments = (TextSegment(text),))

    @classmethod
    def tool_results(cls, results: List[ToolResult]) -> "Turn":
        return cls(role = USER, segments = tuple(results))

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments if isinstance(segment, TextSegment))

    @property
    def invocations(self) -> List[ToolInvocation]:
        return [segment for segment in self.segments if isinstance(segment, ToolInvocation)]

    @property
    def results(self) -> List[ToolResult]:
        return [segment for segment in self.segments if isinstance(segment, ToolResult)]

    def to_messages(self) -> List[Dict[str, Any]]:
        """
        Render this turn as OpenAI-compatible chat messages.

        Assistant turns become one message carrying text and tool_calls.
        Tool results become one `tool` message each, followed by any user text.
        """
        if self.role == ASSISTANT:
            message: Dict[str, Any] = {
                "role": ASSISTANT,
                "content": self.text,
            }
            invocations = self.invocations
            if invocations:
                message["tool_calls"] = [
                    {
                        "id": invocation.id,
                        "type": "function",
                        "function": {
                            "name": invocation.name,
                            "arguments": invocation.arguments or "{}",
                        },
                    }
                    for invocation in invocations
                ]
            return [message]

        messages = []
        for result in self.results:
            content = result.content
            if result.is_error:
                content = ERROR_PREFIX + content
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": result.invocation_id,
                    "content": content,
                }
            )

        text = self.text
        if text or not messages:
            messages.append({"role": USER, "content": text})
        return messages


class Conversation:
    """Append-only transcript owned by the dispatch loop."""

    def __init__(self):
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        """Append a turn, refusing anything that leaves a tool call unanswered."""
        pending = self.pending_invocation_ids()
        if pending:
            if turn.role != USER:
                raise ValueError("Tool invocations must be answered before the next assistant turn")
            answered = [result.invocation_id for result in turn.results]
            if sorted(answered) != sorted(pending):
                raise ValueError(
                    f"Tool results {answered} do not answer pending invocations {pending}"
                )
        self._turns.append(turn)

    def pending_invocation_ids(self) -> List[str]:
        """Ids of tool invocations in the last turn that still need a result."""
        last = self.last_turn
        if last is None or last.role != ASSISTANT:
            return []
        return [invocation.id for invocation in last.invocations]

    @property
    def last_turn(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def to_messages(self, system_prompt: Optional[str] = None) -> List[Dict[str, Any]]:
        """Flatten the whole transcript into the chat message list sent each turn."""
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        for turn in self._turns:
            messages.extend(turn.to_messages())
        return messages

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)
