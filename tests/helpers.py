"""Builders for Responses API shaped dicts used across the test suite."""

from unittest.mock import Mock


def make_response(text, input_tokens=10, output_tokens=5, *, with_details=True):
    """Return a response dict with one message output carrying *text*."""
    usage = {
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
    }
    if with_details:
        usage["input_tokens_details"] = {"cached_tokens": 1}
        usage["output_tokens_details"] = {"reasoning_tokens": 2}
    return {
        "id": f"resp_{input_tokens}_{output_tokens}",
        "object": "response",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": text, "annotations": []}],
            }
        ],
        "output_text": text,
        "usage": usage,
    }


def record_call_order(client, sleep):
    """Route the client's create calls and *sleep* through one parent mock."""
    parent = Mock()
    parent.attach_mock(client.responses.create, "create")
    parent.attach_mock(sleep, "sleep")
    return parent


def call_names(parent):
    return [name for name, _args, _kwargs in parent.mock_calls]
