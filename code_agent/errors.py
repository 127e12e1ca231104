"""Error taxonomy for tool execution and remote inference."""

from typing import Optional


class ToolError(Exception):
    """Base class for failures raised by local tools."""


class InvalidInput(ToolError):
    """Tool parameters are malformed, missing or inconsistent."""


class NotFound(ToolError):
    """A path that had to exist does not."""


class ToolIOError(ToolError):
    """Read, write or traversal failure other than a missing path."""


class ToolNotFound(ToolError):
    """The model asked for a tool name that is not registered."""

    def __init__(self, name: str):
        super().__init__("tool not found")
        self.name = name


class InferenceError(Exception):
    """Remote model call failed or returned an unusable reply."""

    def __init__(
        self,
        message: str,
        overloaded: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.overloaded = bool(overloaded)
        self.status_code = status_code
