"""
Shared test utilities for this repository.

Provides:
1) Scripted OpenAI-compatible fake client (no network)
2) Reply builders for text and tool-call completions
3) Scripted line input for driving the dispatch loop
4) Common test runner
"""

import copy
import json
import traceback
from types import SimpleNamespace

import httpx
import openai


def text_response(content):
    """
    Build a completion whose message carries only text.

    Parameters:
        content: Assistant text.
    """
    return _response(content = content, tool_calls = None)


def tool_call_response(calls, content = None):
    """
    Build a completion that requests tool calls.

    Parameters:
        calls: List of (id, name, arguments) tuples; arguments may be a dict or raw string.
        content: Optional assistant text sent alongside the calls.
    """
    tool_calls = []
    for call_id, name, arguments in calls:
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        tool_calls.append(
            SimpleNamespace(
                id = call_id,
                type = "function",
                function = SimpleNamespace(name = name, arguments = arguments),
            )
        )
    return _response(content = content, tool_calls = tool_calls)


def _response(content, tool_calls):
    message = SimpleNamespace(role = "assistant", content = content, tool_calls = tool_calls)
    return SimpleNamespace(
        id = "chatcmpl-test",
        model = "fake-model",
        choices = [SimpleNamespace(index = 0, message = message, finish_reason = "stop")],
        usage = None,
    )


def status_error(status_code, body = None):
    """
    Build an openai.APIStatusError for a given HTTP status.

    Parameters:
        status_code: HTTP status of the fake response.
        body: Optional decoded error body.
    """
    request = httpx.Request("POST", "https://example.invalid/v1/chat/completions")
    response = httpx.Response(status_code, request = request)
    return openai.APIStatusError(f"Error code: {status_code}", response = response, body = body)


class FakeChatClient:
    """
    Stand-in for OpenAI() that replays scripted completions.

    Each item in `script` is either a response object or an exception to raise.
    Every request is deep-copied into `requests` for later inspection.
    """

    def __init__(self, script):
        self.script = list(script)
        self.requests = []
        self.chat = SimpleNamespace(completions = self)

    def create(self, **request):
        self.requests.append(copy.deepcopy(request))
        if not self.script:
            raise AssertionError("FakeChatClient script exhausted")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class ScriptedInput:
    """input()-compatible callable that returns queued lines, then raises EOFError."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt = ""):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


def run_tests(test_functions):
    """
    Run test callables and print a compact summary.

    Parameters:
        test_functions: List of test functions.
    """
    failed = []
    for test_function in test_functions:
        print(f"\n{'=' * 60}")
        print(f"Running: {test_function.__name__}")
        print("=" * 60)
        try:
            if not test_function():
                failed.append(test_function.__name__)
        except Exception as exc:
            print(f"FAILED: {exc}")
            traceback.print_exc()
            failed.append(test_function.__name__)

    passed = len(test_functions) - len(failed)
    print(f"\n{'=' * 60}")
    print(f"Results: {passed}/{len(test_functions)} passed")
    print("=" * 60)
    if failed:
        print(f"FAILED: {failed}")
        return False
    print("All tests passed!")
    return True
