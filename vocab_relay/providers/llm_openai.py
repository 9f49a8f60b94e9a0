from __future__ import annotations

import logging
import os
import time

from vocab_relay.models import Completion, ToolCall
from vocab_relay.providers.base import LLMProvider

log = logging.getLogger("vocab_relay.llm")


class OpenAIProvider(LLMProvider):
    def __init__(self, model: str = "gpt-4o"):
        import openai
        self.client = openai.AsyncOpenAI(
            api_key=os.environ.get("OPENAI_API_KEY", ""),
        )
        self.model = model

    async def complete(
        self, prompt: str, tools: list[dict] | None = None, tool_name: str | None = None
    ) -> Completion:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        kwargs: dict = {}
        if tools:
            kwargs["tools"] = tools
        if tool_name:
            kwargs["tool_choice"] = {"type": "function", "function": {"name": tool_name}}

        t0 = time.monotonic()
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": prompt}],
            **kwargs,
        )
        message = resp.choices[0].message
        calls = [
            ToolCall(name=tc.function.name, arguments=tc.function.arguments)
            for tc in (message.tool_calls or [])
        ]
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0,
                 message.content if message.content is not None else calls)
        return Completion(text=message.content, tool_calls=calls)

    def name(self) -> str:
        return f"openai/{self.model}"
