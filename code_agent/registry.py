"""Tool descriptors and the registry that dispatches model tool calls."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from code_agent.conversation import ToolInvocation, ToolResult
from code_agent.errors import ToolNotFound


logger = logging.getLogger("Tool-Registry")

ToolFunction = Callable[[Dict[str, Any]], str]


@dataclass(frozen = True)
class ToolDescriptor:
    """
    One local capability offered to the model.

    Attributes:
        name: Unique tool name the model calls.
        description: Usage guidance shown to the model.
        input_schema: JSON schema of the parameters object.
        function: Executable taking the decoded parameters and returning text.
    """

    name: str
    description: str
    input_schema: Dict[str, Any]
    function: ToolFunction

    def to_openai_schema(self) -> Dict[str, Any]:
        """Render OpenAI function-calling schema for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


class ToolRegistry:
    """Fixed, ordered set of tool descriptors with unique names."""

    def __init__(self, descriptors: Iterable[ToolDescriptor]):
        self._tools: Dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            self._tools[descriptor.name] = descriptor
        logger.debug(f"Registry ready with tools: {', '.join(self._tools)}")

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDescriptor:
        """Look up a descriptor by name."""
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFound(name) from None

    def schemas(self) -> List[Dict[str, Any]]:
        """Return the tool list advertised to the model on every call."""
        return [descriptor.to_openai_schema() for descriptor in self._tools.values()]

    def execute(
        self,
        invocation: ToolInvocation,
        notify: Optional[Callable[[ToolInvocation], None]] = None,
    ) -> ToolResult:
        """
        Run one tool invocation and wrap the outcome as a tool result.

        Tool failures never escape: they come back as is-error results so the
        model can see them and adjust.

        Parameters:
            invocation: Tool call requested by the model.
            notify: Optional callback run before the tool executes.
        """
        try:
            descriptor = self.get(invocation.name)
        except ToolNotFound as exc:
            logger.warning(f"Model requested unknown tool: {invocation.name}")
            return ToolResult(invocation_id = invocation.id, content = str(exc), is_error = True)

        if notify is not None:
            notify(invocation)

        try:
            output = descriptor.function(invocation.input)
        except Exception as exc:
            logger.info(f"Tool {invocation.name} failed: {exc}")
            return ToolResult(invocation_id = invocation.id, content = str(exc), is_error = True)

        return ToolResult(invocation_id = invocation.id, content = output, is_error = False)

    def __len__(self) -> int:
        return len(self._tools)
