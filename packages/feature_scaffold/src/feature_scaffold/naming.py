from __future__ import annotations

import re
from dataclasses import dataclass

from feature_scaffold.errors import InvalidFeatureNameError

_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")

# Acronym run ending before a capitalised word, a capitalised or lowercase word, or a trailing
# acronym run. Digits stay attached to the word they follow.
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z]+[0-9]*")


@dataclass(frozen=True)
class NameContext:
    original: str
    pascal: str
    lower: str
    upper: str
    snake: str
    camel: str


def split_words(name: str) -> list[str]:
    """
    Split an identifier into words.

    Boundaries are underscores, lower/digit to upper transitions and the end of an acronym run
    that is followed by a capitalised word (``HTTPServer`` -> ``HTTP``, ``Server``).
    """

    words: list[str] = []
    for chunk in name.split("_"):
        if chunk:
            words.extend(_WORD_RE.findall(chunk))
    return words


def derive_names(name: str) -> NameContext:
    """
    Derive every casing variant needed by the templates from a single feature name.

    Parameters
    ----------
    name:
        Feature name, conventionally PascalCase (``UserProfile``).

    Returns
    -------
    NameContext
        ``UserProfile`` yields pascal ``UserProfile``, lower ``userprofile``, upper
        ``USER_PROFILE``, snake ``user_profile`` and camel ``userProfile``.

    Raises
    ------
    InvalidFeatureNameError
        When the name is empty, contains characters outside ``[A-Za-z0-9_]`` or has no words.
    """

    if not name:
        raise InvalidFeatureNameError("Feature name is required.", code="empty_name")
    if _NAME_RE.match(name) is None:
        raise InvalidFeatureNameError(
            f"Feature name must only contain letters, digits and underscores: {name!r}",
            code="invalid_characters",
            details={"name": name},
        )

    words = split_words(name)
    if not words:
        raise InvalidFeatureNameError(
            f"Feature name has no words: {name!r}",
            code="no_words",
            details={"name": name},
        )

    capitalised = [w[:1].upper() + w[1:] for w in words]
    pascal = "".join(capitalised)
    return NameContext(
        original=name,
        pascal=pascal,
        lower="".join(words).lower(),
        upper="_".join(w.upper() for w in words),
        snake="_".join(w.lower() for w in words),
        camel=words[0].lower() + "".join(capitalised[1:]),
    )
