from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GeneratedQuestion:
    word: str
    definition: str
    distractor_definitions: list[str]
    example_usages: list[str]

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "definition": self.definition,
            "multipleChoiceSiblingDefinitions": self.distractor_definitions,
            "exampleUsages": self.example_usages,
        }


@dataclass
class ScoreResult:
    score: float

    def to_dict(self) -> dict:
        return {"score": self.score}


@dataclass
class ToolCall:
    name: str
    arguments: str  # raw JSON text


@dataclass
class Completion:
    text: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class Decoded:
    ok: bool
    value: Any = None
    error: str = ""

    @classmethod
    def success(cls, value: Any) -> Decoded:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> Decoded:
        return cls(ok=False, error=error)
