from __future__ import annotations

import json
import logging
import time

import httpx

from vocab_relay.models import Completion, ToolCall
from vocab_relay.providers.base import LLMProvider

log = logging.getLogger("vocab_relay.llm")


class OllamaProvider(LLMProvider):
    def __init__(self, base_url: str = "http://localhost:11434", model: str = "qwen3:8b"):
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def complete(
        self, prompt: str, tools: list[dict] | None = None, tool_name: str | None = None
    ) -> Completion:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        body: dict = {
            "model": self.model,
            "messages": [{"role": "system", "content": prompt}],
            "stream": False,
        }
        # Ollama has no tool_choice; offering only the required tool is the
        # closest it gets to forcing the call.
        if tools:
            if tool_name:
                tools = [t for t in tools if t["function"]["name"] == tool_name]
            body["tools"] = tools

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=120.0) as client:
            resp = await client.post(f"{self.base_url}/api/chat", json=body)
            resp.raise_for_status()
            data = resp.json()
        elapsed = time.monotonic() - t0

        message = data.get("message", {})
        calls = []
        for tc in message.get("tool_calls") or []:
            fn = tc.get("function", {})
            args = fn.get("arguments", {})
            if not isinstance(args, str):
                args = json.dumps(args)
            calls.append(ToolCall(name=fn.get("name", ""), arguments=args))
        text = message.get("content") or None
        tokens = data.get("eval_count", "?")
        log.info("── RESPONSE (%.1fs, %s tokens) ──\n%s", elapsed, tokens,
                 text if text is not None else calls)
        return Completion(text=text, tool_calls=calls)

    def name(self) -> str:
        return f"ollama/{self.model}"
