from __future__ import annotations

import json
import logging
import os
import time

from vocab_relay.models import Completion, ToolCall
from vocab_relay.providers.base import LLMProvider

log = logging.getLogger("vocab_relay.llm")


def _to_anthropic_tool(tool: dict) -> dict:
    """Translate an OpenAI-style function tool into Anthropic's shape."""
    fn = tool["function"]
    return {
        "name": fn["name"],
        "description": fn.get("description", ""),
        "input_schema": fn["parameters"],
    }


class AnthropicProvider(LLMProvider):
    def __init__(self, model: str = "claude-sonnet-4-20250514"):
        import anthropic
        self.client = anthropic.AsyncAnthropic(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        )
        self.model = model

    async def complete(
        self, prompt: str, tools: list[dict] | None = None, tool_name: str | None = None
    ) -> Completion:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        kwargs: dict = {}
        if tools:
            kwargs["tools"] = [_to_anthropic_tool(t) for t in tools]
        if tool_name:
            kwargs["tool_choice"] = {"type": "tool", "name": tool_name}

        # Anthropic requires at least one user turn; the prompt rides in system.
        t0 = time.monotonic()
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=1024,
            system=prompt,
            messages=[{"role": "user", "content": "Begin."}],
            **kwargs,
        )
        texts = []
        calls = []
        for block in message.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                calls.append(ToolCall(name=block.name, arguments=json.dumps(block.input)))
        text = "".join(texts) if texts else None
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0,
                 text if text is not None else calls)
        return Completion(text=text, tool_calls=calls)

    def name(self) -> str:
        return f"anthropic/{self.model}"
