from __future__ import annotations

import re
from collections.abc import Mapping

TOKEN_OPEN = "{{"
TOKEN_CLOSE = "}}"

_TOKEN_NAME_RE = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")


def _compile_tokens(tokens: list[str]) -> re.Pattern[str]:
    # Longest first so a registered token never loses to one of its prefixes.
    ordered = sorted(tokens, key=lambda t: (-len(t), t))
    return re.compile("|".join(re.escape(t) for t in ordered))


def substitute(
    template: str,
    mapping: Mapping[str, str],
    *,
    token_open: str = TOKEN_OPEN,
    token_close: str = TOKEN_CLOSE,
) -> str:
    """
    Replace every ``{{KEY}}`` token whose ``KEY`` is in ``mapping``.

    This is literal text replacement in a single left-to-right pass. Replacement values are not
    scanned again, and tokens whose key is not in ``mapping`` are left exactly as written.

    Parameters
    ----------
    template:
        Text containing tokens.
    mapping:
        Token key (without delimiters) to replacement text.
    token_open, token_close:
        Token delimiters.

    Returns
    -------
    str
        The expanded text. Identical to ``template`` when no recognised token occurs.
    """

    if not mapping or token_open not in template:
        return template

    replacements = {f"{token_open}{key}{token_close}": value for key, value in mapping.items()}
    pattern = _compile_tokens(list(replacements))
    return pattern.sub(lambda m: replacements[m.group(0)], template)


def find_tokens(text: str) -> list[str]:
    """Return the distinct ``{{NAME}}`` token keys present in ``text``, in first-seen order."""
    seen: dict[str, None] = {}
    for match in _TOKEN_NAME_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)
