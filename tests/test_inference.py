"""Unit tests for the inference gateway against a scripted fake client."""

import os
import sys
from types import SimpleNamespace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from tests.helpers import FakeChatClient, run_tests, status_error, text_response, tool_call_response
from code_agent.conversation import Conversation, TextSegment, ToolInvocation, Turn
from code_agent.errors import InferenceError
from code_agent.file_tools import build_default_registry
from code_agent.inference import InferenceGateway
from utils.trace_logger import _summarize_tool_call


def _gateway(script, **kwargs):
    client = FakeChatClient(script)
    gateway = InferenceGateway(api_key = "test-key", model = "fake-model", client = client, **kwargs)
    return gateway, client


def _conversation(text = "hello"):
    conversation = Conversation()
    conversation.append(Turn.user_text(text))
    return conversation


def test_request_carries_transcript_and_tools():
    """Each call sends model, max_tokens, every message and every tool schema."""
    gateway, client = _gateway([text_response("hi")], max_tokens = 321, system_prompt = "sys")
    registry = build_default_registry()

    gateway.complete(_conversation("hello"), registry)

    request = client.requests[0]
    assert request["model"] == "fake-model"
    assert request["max_tokens"] == 321
    assert request["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hello"},
    ]
    assert request["tools"] == registry.schemas()

    print("PASS: test_request_carries_transcript_and_tools")
    return True


def test_text_reply_becomes_assistant_turn():
    """A plain text completion becomes one text segment."""
    gateway, _ = _gateway([text_response("Hello there")])
    turn = gateway.complete(_conversation(), build_default_registry())

    assert turn.role == "assistant"
    assert turn.segments == (TextSegment("Hello there"),)

    print("PASS: test_text_reply_becomes_assistant_turn")
    return True


def test_tool_call_reply_keeps_order():
    """Text comes first, then invocations in the order the model listed them."""
    gateway, _ = _gateway([
        tool_call_response(
            [("call_a", "read_file", {"path": "a.txt"}), ("call_b", "list_files", "{}")],
            content = "Checking.",
        )
    ])
    turn = gateway.complete(_conversation(), build_default_registry())

    assert turn.segments[0] == TextSegment("Checking.")
    assert turn.invocations == [
        ToolInvocation(id = "call_a", name = "read_file", arguments = '{"path": "a.txt"}'),
        ToolInvocation(id = "call_b", name = "list_files", arguments = "{}"),
    ]

    print("PASS: test_tool_call_reply_keeps_order")
    return True


def test_overload_is_flagged():
    """429/503/529 and overloaded_error bodies are marked as overload."""
    for status, body in [
        (529, None),
        (503, None),
        (429, None),
        (500, {"error": {"type": "overloaded_error", "message": "Overloaded"}}),
    ]:
        gateway, _ = _gateway([status_error(status, body)])
        try:
            gateway.complete(_conversation(), build_default_registry())
            assert False, "Should raise InferenceError"
        except InferenceError as error:
            assert error.overloaded is True, f"status {status} should be overload"
            assert error.status_code == status

    print("PASS: test_overload_is_flagged")
    return True


def test_other_failures_are_fatal_errors():
    """Other status codes and empty replies are non-overload InferenceErrors."""
    gateway, _ = _gateway([status_error(401, {"error": {"type": "authentication_error"}})])
    try:
        gateway.complete(_conversation(), build_default_registry())
        assert False, "Should raise InferenceError"
    except InferenceError as error:
        assert error.overloaded is False
        assert error.status_code == 401

    empty = SimpleNamespace(id = "x", model = "fake-model", choices = [], usage = None)
    gateway, _ = _gateway([empty])
    try:
        gateway.complete(_conversation(), build_default_registry())
        assert False, "Should raise InferenceError"
    except InferenceError as error:
        assert error.overloaded is False
        assert "unusable response" in str(error)

    print("PASS: test_other_failures_are_fatal_errors")
    return True


def test_insufficient_quota_is_fatal():
    """A 429 for an exhausted quota will not clear by waiting, so it is not overload."""
    for body in [
        {"error": {"type": "insufficient_quota", "code": "insufficient_quota", "message": "quota"}},
        {"type": "insufficient_quota"},
        {"error": {"type": "requests", "code": "insufficient_quota"}},
    ]:
        gateway, _ = _gateway([status_error(429, body)])
        try:
            gateway.complete(_conversation(), build_default_registry())
            assert False, "Should raise InferenceError"
        except InferenceError as error:
            assert error.overloaded is False, f"body {body} should be fatal"
            assert error.status_code == 429

    print("PASS: test_insufficient_quota_is_fatal")
    return True


def test_decoded_tool_arguments_become_json_text():
    """Providers that send arguments as an object still yield a JSON string invocation."""
    call = SimpleNamespace(
        id = "call_d",
        type = "function",
        function = SimpleNamespace(name = "read_file", arguments = {"path": "a.txt"}),
    )
    reply = tool_call_response([])
    reply.choices[0].message.tool_calls = [call]
    gateway, _ = _gateway([reply])

    turn = gateway.complete(_conversation(), build_default_registry())

    invocation = turn.invocations[0]
    assert invocation.arguments == '{"path": "a.txt"}'
    assert invocation.input == {"path": "a.txt"}

    print("PASS: test_decoded_tool_arguments_become_json_text")
    return True


def test_trace_summary_tolerates_non_string_arguments():
    """Tool-call summaries never fail on arguments that are not JSON text."""
    assert _summarize_tool_call("read_file", {"path": "a.txt"}) == "read_file({'path': 'a.txt'})"
    assert _summarize_tool_call("list_files", "not json") == "list_files(not json)"
    assert _summarize_tool_call("", "") == "unknown({})"

    print("PASS: test_trace_summary_tolerates_non_string_arguments")
    return True


if __name__ == "__main__":
    sys.exit(0 if run_tests([
        test_request_carries_transcript_and_tools,
        test_text_reply_becomes_assistant_turn,
        test_tool_call_reply_keeps_order,
        test_overload_is_flagged,
        test_other_failures_are_fatal_errors,
        test_insufficient_quota_is_fatal,
        test_decoded_tool_arguments_become_json_text,
        test_trace_summary_tolerates_non_string_arguments,
    ]) else 1)
