"""Identifier word splitting used to derive external field names."""

from __future__ import annotations


def split_on_word_boundaries(text: str) -> list[str]:
    """Split ``text`` into words at case transitions.

    A boundary sits before an uppercase letter that follows a lowercase letter,
    and before an uppercase letter that follows another uppercase letter when the
    character after it is lowercase. ``"HTTPServer"`` becomes ``["HTTP", "Server"]``
    and ``"UserID"`` becomes ``["User", "ID"]``. ``"".join(result) == text`` always
    holds.
    """

    if not text:
        return []

    words: list[str] = []
    start = 0
    last = len(text) - 1
    for index in range(1, last):
        char = text[index]
        if not char.isupper():
            continue
        previous = text[index - 1]
        if previous.islower() or (previous.isupper() and text[index + 1].islower()):
            words.append(text[start:index])
            start = index
    words.append(text[start:])
    return words


def split_identifier(name: str) -> list[str]:
    """Split a Python attribute name into words.

    snake_case pieces are split on ``_`` first, then each piece on case
    transitions, so ``max_idle_conns`` and ``MaxIdleConns`` agree.
    """

    words: list[str] = []
    for piece in name.split("_"):
        if piece:
            words.extend(split_on_word_boundaries(piece))
    return words


__all__ = ["split_identifier", "split_on_word_boundaries"]
