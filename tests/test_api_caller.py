"""
Unit tests for request construction and sequential sending.
"""

import json
from unittest.mock import MagicMock, Mock

import httpx
import openai
import pytest

from prompt_batch.api_caller import (
    build_input,
    build_request,
    send_batches,
    send_request,
)
from prompt_batch.config import Settings
from tests.helpers import call_names, make_response, record_call_order


class TestBuildRequest:
    """Fixed request parameters"""

    def test_fixed_parameters(self, settings):
        request = build_request(settings, [])

        assert request == {
            "prompt": {"id": "pmpt_test", "version": "25"},
            "input": [],
            "text": {"format": {"type": "text"}},
            "reasoning": {},
            "max_output_tokens": 16384,
            "store": False,
            "include": ["web_search_call.action.sources"],
        }

    def test_empty_input_for_prompt_only(self):
        assert build_input(None) == []

    def test_raw_input_is_the_json_text(self):
        assert build_input('[{"a": 1}]', "raw") == '[{"a": 1}]'

    def test_message_input_wraps_json_text(self):
        value = build_input('[{"a": 1}]', "message")

        assert value == [
            {"role": "user", "content": [{"type": "input_text", "text": '[{"a": 1}]'}]}
        ]

    def test_unknown_input_format(self):
        with pytest.raises(ValueError):
            build_input("[]", "xml")


class TestSendRequest:
    """One API call"""

    def test_records_are_serialized_into_the_message(self, settings, fake_client):
        records = [{"name": "日本"}, {"name": "b"}]

        response = send_request(fake_client, settings, records)

        sent = fake_client.calls[0]["input"][0]["content"][0]["text"]
        assert json.loads(sent) == records
        assert "日本" in sent
        assert response["output_text"] == "```\nbatch 1\n```"

    def test_prompt_only_sends_empty_input(self, settings, fake_client):
        send_request(fake_client, settings, None, input_format="raw")

        assert fake_client.calls[0]["input"] == []

    def test_sdk_objects_are_dumped_with_output_text(self, settings):
        sdk_response = Mock()
        sdk_response.model_dump.return_value = {"output": [], "usage": None}
        sdk_response.output_text = "hello"
        client = MagicMock()
        client.responses.create.return_value = sdk_response

        response = send_request(client, settings, [1])

        assert response == {"output": [], "usage": None, "output_text": "hello"}

    def test_api_errors_propagate_without_retry(self, settings, capture_logs):
        caplog = capture_logs("prompt_batch.api_caller")
        request = httpx.Request("POST", "https://api.openai.com/v1/responses")
        error = openai.RateLimitError(
            "rate limited", response=httpx.Response(429, request=request), body=None
        )
        client = MagicMock()
        client.responses.create.side_effect = error

        with pytest.raises(openai.RateLimitError):
            send_request(client, settings, [1], label="Batch 2/3")

        assert client.responses.create.call_count == 1
        assert any("Batch 2/3 failed (HTTP 429)" in r.getMessage() for r in caplog.records)


class TestSendBatches:
    """Sequential batch loop"""

    def test_batches_are_sent_in_order_with_pauses_between(self, settings, fake_client):
        sleep = Mock()
        batches = [[1, 2], [3], [4, 5]]
        order = record_call_order(fake_client, sleep)

        responses = send_batches(fake_client, settings, batches, sleep=sleep)

        sent = [json.loads(c["input"][0]["content"][0]["text"]) for c in fake_client.calls]
        assert sent == batches
        assert [r["output_text"] for r in responses] == [
            "```\nbatch 1\n```",
            "```\nbatch 2\n```",
            "```\nbatch 3\n```",
        ]
        assert call_names(order) == ["create", "sleep", "create", "sleep", "create"]
        assert sleep.call_count == 2
        sleep.assert_called_with(1.0)

    def test_single_batch_does_not_sleep(self, settings, fake_client):
        sleep = Mock()

        send_batches(fake_client, settings, [[1]], sleep=sleep)

        sleep.assert_not_called()

    def test_configured_delay_is_used(self, fake_client):
        sleep = Mock()
        settings = Settings(api_key="k", prompt_id="p", batch_delay=2.5)

        send_batches(fake_client, settings, [[1], [2]], sleep=sleep)

        sleep.assert_called_once_with(2.5)

    def test_failure_stops_remaining_batches(self, settings):
        sleep = Mock()
        client = MagicMock()
        client.responses.create.side_effect = [
            make_response("A"),
            openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com")),
            make_response("C"),
        ]

        with pytest.raises(openai.APIConnectionError):
            send_batches(client, settings, [[1], [2], [3]], sleep=sleep)

        assert client.responses.create.call_count == 2
        assert sleep.call_count == 1
