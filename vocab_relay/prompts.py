"""Prompt templates and the tool schema sent to the completion provider."""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

GENERATE_QUESTION_TOOL = "generate_vocabulary_word"

GENERATE_QUESTION_PROMPT = """\

We are using this conversation as the backbone of a vocabulary acquisition app. \
You are going to be indefinitely generating me a set of words, exactly one word \
per message, in the domain of ${domain}.

I am providing you a tool that you need to supply a set of 4 arguments to.  \
You must always call this tool.

Words you will not generate include the set (${seenWords}).
"""

SCORE_USER_ANSWER_PROMPT = """\

You are scoring a definition provided by a student of a term in the domain of \
${domain}. The result will be in the format of a score between 0 and 1. The \
result will be returned in a JSON format in the following form:

interface ScoringResponse {
  similarityScore: number;
}

The word is ${word}.

The provided definition is: ${userAnswer}

You are *never* to return me an answer that is not pure JSON.  You only answer \
in the JSON format provided.

Your response must be valid JSON. Do not include any text before or after the \
JSON object.
"""

QUESTION_FIELDS = (
    "word",
    "definition",
    "multipleChoiceSiblingDefinitions",
    "exampleUsages",
)

GENERATE_QUESTION_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": GENERATE_QUESTION_TOOL,
            "description": (
                "Generates a word, its definition, sibling definitions, and example "
                "usages in JSON format for vocabulary acquisition."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "word": {
                        "type": "string",
                        "description": "The vocabulary word being generated.",
                    },
                    "definition": {
                        "type": "string",
                        "description": (
                            "The definition of the word.  The word itself must not "
                            "be included in this."
                        ),
                    },
                    "multipleChoiceSiblingDefinitions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": (
                            "Definitions of similar terms that might confuse a "
                            "beginner.  The word being defined must not be included "
                            "in the string.  Do not put the word being defined at the "
                            "beginning of the string."
                        ),
                    },
                    "exampleUsages": {
                        "type": "array",
                        "items": {"type": "string"},
                        "minItems": 3,
                        "maxItems": 3,
                        "description": "Three example sentences that demonstrate the word's usage.",
                    },
                },
                "required": list(QUESTION_FIELDS),
            },
        },
    }
]

_PLACEHOLDER = re.compile(r"\$\{\s*([^}]+?)\s*\}")


def render_template(template: str, context: Mapping[str, str | Sequence[str] | None]) -> str:
    """Substitute ``${name}`` placeholders from *context*.

    Sequence values are joined with ``", "``.  Names missing from *context*
    (or mapped to ``None``) keep their placeholder text verbatim so the gap
    shows up in the rendered prompt.
    """
    def _sub(m: re.Match) -> str:
        value = context.get(m.group(1))
        if value is None:
            return m.group(0)
        if isinstance(value, str):
            return value
        if isinstance(value, Sequence):
            return ", ".join(str(v) for v in value)
        return str(value)

    return _PLACEHOLDER.sub(_sub, template)
