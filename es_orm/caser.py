"""Identifier case conversion used for field and option names."""

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_WORD = re.compile(r"[^0-9a-zA-Z]+")


def snake(value: str) -> str:
    """``indexAnalyzer`` -> ``index_analyzer``, ``HTTPStatus`` -> ``http_status``."""
    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", value)
    value = _WORD_BOUNDARY.sub(r"\1_\2", value)
    value = _NON_WORD.sub("_", value)
    return value.strip("_").lower()

