"""
Recovery of a JSON object from noisy model output.

Models wrap structured output in code fences or explanatory prose despite
being told not to. Repair is two steps:

1. Remove every fence marker (``` optionally followed by a language tag),
   wherever it appears, not only at the start and end.
2. Slice from the first '{' to the last '}' inclusive.

If there is no '{ ... }' span, the fence-stripped text is returned as-is and
the JSON parse downstream fails cleanly.
"""

import re

# ``` followed by an optional language tag such as json, JSON, jsonc, js
FENCE_PATTERN = re.compile(r'```[A-Za-z0-9_+-]*')


def strip_code_fences(text: str) -> str:
    """Remove all markdown code-fence markers from text."""
    if not text:
        return ''
    return FENCE_PATTERN.sub('', text)


def isolate_json_object(text: str) -> str:
    """
    Return the substring from the first '{' to the last '}'.

    Examples:
        >>> isolate_json_object('Here you go: {"a": 1} Hope this helps!')
        '{"a": 1}'

        >>> isolate_json_object('no json here')
        'no json here'
    """
    first_brace = text.find('{')
    last_brace = text.rfind('}')

    if first_brace == -1 or last_brace == -1 or last_brace < first_brace:
        return text

    return text[first_brace:last_brace + 1]


def repair(raw_text: str) -> str:
    """Best-effort JSON candidate from raw model text."""
    return isolate_json_object(strip_code_fences(raw_text)).strip()
