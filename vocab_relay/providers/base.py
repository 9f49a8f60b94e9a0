from __future__ import annotations

from abc import ABC, abstractmethod

from vocab_relay.models import Completion


class LLMProvider(ABC):
    @abstractmethod
    async def complete(
        self, prompt: str, tools: list[dict] | None = None, tool_name: str | None = None
    ) -> Completion:
        """Send *prompt* as a system message.

        When *tool_name* is given the model must answer by calling that tool
        from *tools*; otherwise it answers with free text.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...
