"""Deterministic offline text generator for development and tests.

Output depends only on the operation and the input text (plus an explicit
seed, when given), so test runs are reproducible.
"""

from __future__ import annotations

import hashlib
import random
import re
from dataclasses import dataclass

from llm_router.core.types import AIOperation, TokenUsage, estimate_tokens

FILLER_WORDS = frozenset(
    {
        "very",
        "really",
        "quite",
        "rather",
        "somewhat",
        "basically",
        "actually",
        "literally",
    }
)

_FILLER_PHRASES = re.compile(r"\b(kind of|sort of)\b", re.IGNORECASE)
_POLITE_PHRASES = (
    re.compile(r"\b(please|kindly|if you could|would you mind)\b", re.IGNORECASE),
    re.compile(r"\b(I would like|I want|I need)\b", re.IGNORECASE),
    re.compile(r"\b(can you|could you)\b", re.IGNORECASE),
    re.compile(r"\b(thank you|thanks)\b", re.IGNORECASE),
    re.compile(r"\b(write|create|generate|produce)\s+(a|an)\s+", re.IGNORECASE),
    re.compile(r"\b(that is|which is|who is)\b", re.IGNORECASE),
)

EXPANSIONS = (
    "Provide detailed and comprehensive information.",
    "Include specific examples and practical applications.",
    "Consider different perspectives and approaches.",
    "Ensure the response is well-structured and easy to understand.",
    "Focus on actionable insights and practical recommendations.",
    "Address potential challenges and provide solutions.",
    "Include relevant context and background information.",
    "Make sure to cover all important aspects thoroughly.",
)

GENERIC_REPLIES = (
    "This is a mock response for development purposes.",
    "Mock data generated for testing.",
    "Development mode: This would be the actual AI response.",
    "Test response - no actual AI processing performed.",
    "Mock content generated based on your request.",
)


@dataclass(frozen=True)
class MockOutput:
    text: str
    usage: TokenUsage


def _stable_index(text: str, size: int) -> int:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % size


_IMPROVE_ENVELOPE = re.compile(
    r'^\s*please (?:tighten|expand) this prompt:\s*"(.*)"\s*$', re.IGNORECASE | re.DOTALL
)


def unwrap_improve_prompt(user_prompt: str) -> str:
    """Return the quoted prompt from an improve instruction, or the input unchanged."""
    match = _IMPROVE_ENVELOPE.match(user_prompt)
    return match.group(1) if match else user_prompt


def extract_mode(system_prompt: str) -> str:
    """Infer the improve mode from a system prompt."""
    lowered = system_prompt.lower()
    if "tighten" in lowered or "concise" in lowered:
        return "tighten"
    return "expand"


def tighten(prompt: str) -> str:
    """Strip filler words and lead-in phrases from ``prompt``."""
    words = [w for w in prompt.split(" ") if w.lower() not in FILLER_WORDS]
    result = _FILLER_PHRASES.sub("", " ".join(words))
    for pattern in _POLITE_PHRASES:
        result = pattern.sub("", result)
    result = " ".join(result.split())

    if len(result.split()) < 3:
        return prompt
    return result


def expand(prompt: str, seed: int | None = None) -> str:
    """Append two expansion sentences to ``prompt``."""
    if seed is not None:
        picked = random.Random(seed).sample(EXPANSIONS, 2)
    else:
        first = _stable_index(prompt, len(EXPANSIONS))
        second = (first + 1 + _stable_index(prompt[::-1], len(EXPANSIONS) - 1)) % len(EXPANSIONS)
        picked = [EXPANSIONS[first], EXPANSIONS[second]]
    return f"{prompt}\n\n{' '.join(picked)}"


_CREATE_PREFIX = re.compile(r"^\s*create a prompt for:\s*", re.IGNORECASE)


def structured_prompt(description: str) -> str:
    topic = _CREATE_PREFIX.sub("", description).strip() or description.strip()
    return (
        f"You are an expert assistant helping with: {topic}\n\n"
        "Task:\n"
        f"- {topic}\n\n"
        "Guidelines:\n"
        "- Be specific and accurate\n"
        "- Structure the answer with clear sections\n"
        "- Ask for clarification if requirements are ambiguous\n\n"
        "Output format:\n"
        "- A concise summary followed by the detailed response"
    )


def generic_reply(user_prompt: str, seed: int | None = None) -> str:
    if seed is not None:
        reply = random.Random(seed).choice(GENERIC_REPLIES)
    else:
        reply = GENERIC_REPLIES[_stable_index(user_prompt, len(GENERIC_REPLIES))]
    return f"{reply}\n\nOriginal request: {user_prompt}"


def generate(
    operation: AIOperation | str | None,
    user_prompt: str,
    *,
    system_prompt: str = "",
    seed: int | None = None,
) -> MockOutput:
    """Produce the mock reply for ``operation`` and its token usage.

    Cost is always zero.
    """
    op = AIOperation(operation) if operation is not None else None
    if op is AIOperation.PROMPT_IMPROVE:
        original = unwrap_improve_prompt(user_prompt)
        if extract_mode(system_prompt) == "tighten":
            text = tighten(original)
        else:
            text = expand(original, seed)
    elif op is AIOperation.PROMPT_GENERATE:
        text = structured_prompt(user_prompt)
    else:
        text = generic_reply(user_prompt, seed)

    usage = TokenUsage(
        input_tokens=estimate_tokens(system_prompt + user_prompt),
        output_tokens=estimate_tokens(text),
        cost_cents=0.0,
    )
    return MockOutput(text=text, usage=usage)
