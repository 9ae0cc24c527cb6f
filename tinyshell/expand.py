"""Expansion of ``$NAME`` and ``$?`` references inside a word."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional


def lookup_variable(name: str, envp: Iterable[str]) -> Optional[str]:
    """Return the value of ``name`` from ``NAME=value`` strings, or None."""
    prefix = name + "="
    return next(
        (entry[len(prefix):] for entry in envp if entry.startswith(prefix)),
        None,
    )


def _reference_end(text: str, start: int) -> int:
    end = start + 1
    while end < len(text) and text[end] not in " $":
        end += 1
    return end


def expand(text: str, envp: Iterable[str], status: int = 0) -> str:
    """Replace the first resolvable ``$`` reference in ``text``.

    A reference name runs up to the next space, ``$`` or the end of the word.
    ``$?`` becomes ``status``. References that cannot be resolved are kept.
    Once a reference resolves, the result is the text before the first ``$``
    of the word, the value, and whatever follows the reference; only one
    reference per word is expanded.
    """
    envp = list(envp)
    prefix = text.partition("$")[0]
    for start, ch in enumerate(text):
        if ch != "$":
            continue
        end = _reference_end(text, start)
        name = text[start + 1:end]
        value = str(status) if name == "?" else lookup_variable(name, envp)
        if value is None or value == text:
            continue
        return prefix + value + text[end:]
    return text