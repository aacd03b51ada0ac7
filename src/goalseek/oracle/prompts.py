"""Prompt construction and reply parsing for the fix oracle."""

import re

from goalseek.domain.models import AttemptSummary

SYSTEM_PROMPT = """\
You are an AI coding assistant specializing in fixing code based on error \
messages and build outputs.

Rules:
- Reply with the COMPLETE updated code in exactly one fenced code block.
- Do not omit unchanged parts of the code.
- Keep any explanation short and outside the code block.
"""

# First fenced block; the language tag after the opening fence is optional.
_CODE_BLOCK = re.compile(r"```[\w+-]*[ \t]*\n(.*?)```", re.DOTALL)


def build_messages(
    original_code: str, goal: str, summary: AttemptSummary
) -> list[dict[str, str]]:
    """Build the chat messages for one oracle request."""
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"Original Code:\n```\n{original_code}\n```\n\nUser Instructions:\n{goal}"
            ),
        },
    ]
    if summary.total > 0:
        messages.append(
            {
                "role": "user",
                "content": (
                    f"{summary.render()}\n\n"
                    "Please fix the code based on these errors and previous attempts."
                ),
            }
        )
    return messages


def extract_code(reply: str) -> str:
    """Return the first fenced code block of a reply, else the whole reply.

    Replies with several blocks only yield the first one.
    """
    match = _CODE_BLOCK.search(reply)
    if match:
        return match.group(1).strip()
    return reply.strip()
