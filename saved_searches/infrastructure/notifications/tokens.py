"""Placeholder replacement for notification mail templates.

Placeholders look like ``[type:name]`` (e.g. ``[site:name]``) or ``[name]``
(e.g. ``[activation_link]``). Unknown placeholders are left in the text.
"""

from __future__ import annotations

import re
from typing import Mapping

TOKEN_PATTERN = re.compile(r"\[([a-z_]+(?::[a-z_\-]+)?)\]")


def replace_tokens(text: str, values: Mapping[str, str]) -> str:
    def _substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in values:
            return str(values[token])
        return match.group(0)

    return TOKEN_PATTERN.sub(_substitute, text)


__all__ = ["replace_tokens", "TOKEN_PATTERN"]
