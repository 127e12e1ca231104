"""
Interactive chat loop that lets the model read, list and edit local files.

Usage:
    1. Set LLM_API_KEY (or put LLM_API_KEY=... in config.env)
    2. python code_agent/agent.py
    3. Chat; end input (ctrl-d) or press ctrl-c to quit
"""

import enum
import logging
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from code_agent.conversation import Conversation, TextSegment, ToolInvocation, ToolResult, Turn
from code_agent.errors import InferenceError
from code_agent.file_tools import build_default_registry
from code_agent.inference import InferenceGateway
from code_agent.registry import ToolRegistry
from utils.credentials import MissingCredentialError, load_api_key, mask_key
from utils.runtime_config import RuntimeOptions, add_runtime_args, runtime_options_from_args
from utils.trace_logger import TraceLogger


logger = logging.getLogger("Code-Agent")

USER_PROMPT = "\033[94mYou\033[0m: "
ASSISTANT_LABEL = "\033[93mAssistant\033[0m"
TOOL_LABEL = "\033[92mtool\033[0m"
OVERLOADED_NOTICE = "The model service is overloaded right now. Please try again in a moment."


class LoopState(enum.Enum):
    """States of the dispatch loop."""

    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_MODEL_REPLY = "awaiting_model_reply"
    EMITTING_TEXT = "emitting_text"
    EXECUTING_TOOLS = "executing_tools"
    CLOSED = "closed"


class Agent:
    """
    Dispatch loop between the user, the remote model and the local tools.

    The loop reads a line, sends the whole conversation to the model, prints
    any text, runs any requested tools and, when tools ran, sends their results
    straight back without asking the user for more input.
    """

    def __init__(
        self,
        gateway: InferenceGateway,
        registry: ToolRegistry,
        input_func: Callable[[str], str] = input,
        output_stream = None,
        trace_logger: Optional[TraceLogger] = None,
    ):
        self.gateway = gateway
        self.registry = registry
        self.input_func = input_func
        self.output_stream = output_stream or sys.stdout
        self.tracer = trace_logger or TraceLogger(enabled = False)
        self.conversation = Conversation()
        self.state = LoopState.AWAITING_USER_INPUT

    def run(self) -> None:
        """
        Drive the loop until the input source is exhausted.

        Raises:
            InferenceError: The model call failed for a reason other than overload.
        """
        self._write("Chat with the model (use 'ctrl-c' to quit)\n")
        self.state = LoopState.AWAITING_USER_INPUT

        while self.state is not LoopState.CLOSED:
            if self.state is LoopState.AWAITING_USER_INPUT:
                self._read_user_turn()
            else:
                self._exchange()

        logger.info(f"Conversation closed after {len(self.conversation)} turn(s)")

    def _read_user_turn(self) -> None:
        """Block for one line of user text; end-of-input closes the loop."""
        try:
            line = self.input_func(USER_PROMPT)
        except EOFError:
            self.state = LoopState.CLOSED
            return

        self.conversation.append(Turn.user_text(line))
        self.state = LoopState.AWAITING_MODEL_REPLY

    def _exchange(self) -> None:
        """Run one model call and handle the reply."""
        try:
            reply = self.gateway.complete(self.conversation, self.registry)
        except InferenceError as exc:
            if not exc.overloaded:
                raise
            logger.warning(f"Model overloaded (status {exc.status_code}): {exc}")
            self._write(f"{ASSISTANT_LABEL}: {OVERLOADED_NOTICE}\n")
            self.state = LoopState.AWAITING_USER_INPUT
            return

        self.conversation.append(reply)
        self.tracer.log_turn(actor = "main", turn = reply)

        results = self._process_reply(reply)
        if results:
            self.conversation.append(Turn.tool_results(results))
            self.state = LoopState.AWAITING_MODEL_REPLY
        else:
            self.state = LoopState.AWAITING_USER_INPUT

    def _process_reply(self, reply: Turn) -> List[ToolResult]:
        """Print text segments and execute tool invocations in reply order."""
        results = []
        for segment in reply.segments:
            if isinstance(segment, TextSegment):
                self.state = LoopState.EMITTING_TEXT
                self._write(f"{ASSISTANT_LABEL}: {segment.text}\n")
            elif isinstance(segment, ToolInvocation):
                self.state = LoopState.EXECUTING_TOOLS
                result = self.registry.execute(segment, notify = self._print_tool_notice)
                self.tracer.log_result(actor = "main", tool_name = segment.name, result = result)
                results.append(result)
        return results

    def _print_tool_notice(self, invocation: ToolInvocation) -> None:
        self._write(f"{TOOL_LABEL}: {invocation.name}({invocation.arguments})\n")

    def _write(self, text: str) -> None:
        """Write text to configured stream with immediate flush."""
        self.output_stream.write(text)
        self.output_stream.flush()


def load_system_prompt(path: Optional[Path]) -> Optional[str]:
    """Read the optional system prompt file, formatted with the workspace path."""
    if path is None:
        return None
    with path.open("r", encoding = "utf-8") as file:
        prompt = file.read()
    return prompt.replace("{workspace}", str(Path.cwd()))


def parse_args(argv: Optional[List[str]] = None) -> Any:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed CLI arguments with resolved runtime options.
    """
    import argparse

    parser = argparse.ArgumentParser(
        description = "Code Agent - chat with an LLM that can read, list and edit local files",
    )
    add_runtime_args(parser)

    args = parser.parse_args(argv)
    args.runtime_options = runtime_options_from_args(args)
    return args


def build_agent(
    options: RuntimeOptions,
    api_key: str,
    client: Any = None,
    input_func: Callable[[str], str] = input,
) -> Agent:
    """Wire gateway, registry and trace logger from resolved options."""
    gateway = InferenceGateway(
        api_key = api_key,
        model = options.model,
        base_url = options.base_url,
        max_tokens = options.max_tokens,
        system_prompt = load_system_prompt(options.system_prompt_file),
        client = client,
    )
    tracer = TraceLogger(enabled = options.show_llm_response, logger = logger)
    return Agent(
        gateway = gateway,
        registry = build_default_registry(),
        input_func = input_func,
        trace_logger = tracer,
    )


def main(
    argv: Optional[List[str]] = None,
    client: Any = None,
    input_func: Callable[[str], str] = input,
) -> int:
    """
    Run the interactive agent from the command line.

    Returns:
        int: Process exit code.
    """
    args = parse_args(argv)
    options = args.runtime_options

    logging.basicConfig(
        level = getattr(logging, options.log_level, logging.INFO),
        format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers = [logging.StreamHandler()],
    )

    try:
        api_key = load_api_key(
            config_values = options.config_values,
            config_file = options.config_file,
        )
    except MissingCredentialError as exc:
        print(f"Error: {exc}")
        return 1

    logger.info(f"API key loaded: {mask_key(api_key)}")
    logger.info(f"Runtime options: {options.as_dict()}")

    try:
        agent = build_agent(options, api_key, client = client, input_func = input_func)
        agent.run()
    except KeyboardInterrupt:
        logger.info("Conversation interrupted.")
    except InferenceError as exc:
        logger.error(f"Inference failed: {exc}")
        print(f"Error: {exc}")
        return 1
    except OSError as exc:
        logger.error(f"Startup failed: {exc}")
        print(f"Error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
