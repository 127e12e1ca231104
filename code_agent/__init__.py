"""code_agent - chat with an LLM that can read, list and edit local files.

The Loop
--------
    You: list files
      -> model replies with tool_calls [list_files({})]
      -> tool runs locally, result appended as a tool message
      -> model is called again with the whole transcript (no new input read)
      -> model replies with text only
    You: ...

The remote service keeps no state between calls, so the full conversation
is resent every turn. Context length is bounded by the service input limit.
"""

from code_agent.agent import Agent, LoopState, main
from code_agent.conversation import Conversation, TextSegment, ToolInvocation, ToolResult, Turn
from code_agent.errors import InferenceError, InvalidInput, NotFound, ToolError, ToolIOError, ToolNotFound
from code_agent.file_tools import build_default_registry, edit_file, list_files, read_file
from code_agent.inference import InferenceGateway
from code_agent.registry import ToolDescriptor, ToolRegistry

__all__ = [
    "Agent",
    "LoopState",
    "main",
    "Conversation",
    "TextSegment",
    "ToolInvocation",
    "ToolResult",
    "Turn",
    "InferenceError",
    "InvalidInput",
    "NotFound",
    "ToolError",
    "ToolIOError",
    "ToolNotFound",
    "build_default_registry",
    "edit_file",
    "list_files",
    "read_file",
    "InferenceGateway",
    "ToolDescriptor",
    "ToolRegistry",
]
