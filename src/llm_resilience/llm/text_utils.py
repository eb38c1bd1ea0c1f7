"""Text helpers for token budgeting."""

import json
import math

from llm_resilience.models.llm_models import PromptPayload


CHARS_PER_TOKEN = 4


def count_tokens_approximate(text: str) -> int:
    """
    Rough approximation of token count for text.

    Uses the ~4 characters per token heuristic for English text. Not
    accurate, but good enough to refuse a prompt that obviously cannot fit
    when no tokenizer is available for the model.

    Args:
        text: Text to estimate tokens for

    Returns:
        ceil(len(text) / 4)
    """
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def serialize_prompt(prompt_payload: PromptPayload) -> str:
    """
    Render a prompt payload as text for budgeting.

    Plain strings are returned as-is; structured input (chat messages) is
    JSON encoded. The rendered text is only ever counted, never sent.
    """
    if isinstance(prompt_payload, str):
        return prompt_payload
    return json.dumps(prompt_payload, ensure_ascii=False, default=str)
