import json

import httpx
import pytest

from sinta_reviewer.utils.text_generation import GeminiClient


def gemini_response(text, status_code=200):
    body = {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}
    return httpx.Response(status_code, json=body)


class RecordingTransport:
    """Fake Gemini endpoint that records every request payload"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return gemini_response(reply)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def make_client():
    def factory(*replies):
        recorder = RecordingTransport(*replies)
        client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(recorder))
        return client, recorder
    return factory


@pytest.fixture
def sample_analysis():
    return {
        "sintaLevel": "SINTA 2",
        "publishabilityScore": 87,
        "completeness": 92,
        "weaknesses": ["Literature review cites few recent papers"],
        "suggestions": ["Add references from the last five years"],
        "detailedAnalysis": {
            "title": "Specific and concise.",
            "abstract": "Structured but lacks the main result.",
            "methodology": "Reproducible survey design.",
            "results": "Tables are clear.",
            "references": "Only 12 references.",
        },
    }


@pytest.fixture
def sample_checklist():
    items = [{"item": f"Requirement {i}", "status": "pass", "details": "ok"} for i in range(1, 8)]
    items += [
        {"item": "Requirement 8", "status": "warning", "details": "Conclusion is vague"},
        {"item": "Requirement 9", "status": "fail", "details": "Only 9 references"},
        {"item": "Requirement 10", "status": "FAIL", "details": "Several grammar errors"},
    ]
    return {"passed": 7, "total": 10, "checklist": items}
