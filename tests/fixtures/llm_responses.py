"""Canned LLM completions and a fake chat model for generation tests."""

import json
from typing import Optional, Union
from langchain_core.messages import AIMessage

from tests.utils.factories import create_listing_payload


def batch_response(payloads: list[dict], fence: Optional[str] = None) -> str:
    """Serialize listing payloads the way the LLM answers, optionally fenced."""
    body = json.dumps({"properties": payloads}, indent=2)
    if fence == "json":
        return f"```json\n{body}\n```"
    if fence == "plain":
        return f"```\n{body}\n```"
    return body


def listings_response(count: int, fence: Optional[str] = None) -> str:
    return batch_response([create_listing_payload() for _ in range(count)], fence=fence)


TRUNCATED_RESPONSE = '{"properties": [{"zpid": "12345678", "address": "5800 College Ave"'

# Envelope is wrong, so the whole completion fails
SCHEMA_MISMATCH_RESPONSE = json.dumps({"listings": [{"zpid": "12345678", "bedrooms": 3}]})


def mixed_response(good: int = 2) -> str:
    """``good`` valid listings plus one missing its price and one with half a bedroom."""
    no_price = create_listing_payload(zpid="51000001")
    del no_price["price"]
    half_bedroom = create_listing_payload(zpid="51000002", bedrooms=3.5)
    valid = [create_listing_payload(zpid=f"5000000{i}") for i in range(good)]
    return batch_response([valid[0], no_price, *valid[1:], half_bedroom])


class FakeChatModel:
    """Replays scripted responses; an Exception entry is raised instead."""

    def __init__(self, responses: list[Union[str, Exception]]):
        self.responses = list(responses)
        self.calls: list[list[tuple[str, str]]] = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return AIMessage(content=response)

    def requested_sizes(self) -> list[int]:
        """How many per-item specs each call's user prompt carried."""
        return [call[1][1].count('"property_id":') for call in self.calls]
