"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from vocab_relay.models import Completion, ToolCall
from vocab_relay.prompts import GENERATE_QUESTION_TOOL


class FakeLLM:
    """Scripted provider; records every prompt it is sent."""

    def __init__(self, completion: Completion | None = None, error: Exception | None = None):
        self.completion = completion or Completion()
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, prompt: str, tools=None, tool_name=None) -> Completion:
        self.calls.append({"prompt": prompt, "tools": tools, "tool_name": tool_name})
        if self.error is not None:
            raise self.error
        return self.completion

    def name(self) -> str:
        return "fake-llm"


@pytest.fixture(autouse=True)
def provider_api_keys(monkeypatch):
    """SDK clients refuse to build without credentials; never use real ones."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")


@pytest.fixture
def mitosis_question():
    return {
        "word": "mitosis",
        "definition": "division of a cell nucleus into two identical nuclei",
        "multipleChoiceSiblingDefinitions": [
            "division producing four genetically distinct cells",
            "the fusion of two gametes",
        ],
        "exampleUsages": [
            "Skin cells renew themselves through mitosis.",
            "The chromosomes lined up during mitosis.",
            "Cancer can involve unchecked mitosis.",
        ],
    }


@pytest.fixture
def tool_call_llm(mitosis_question):
    """FakeLLM that answers with a question tool call."""
    return FakeLLM(Completion(tool_calls=[
        ToolCall(name=GENERATE_QUESTION_TOOL, arguments=json.dumps(mitosis_question)),
    ]))
