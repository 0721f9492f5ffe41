"""Localized text — language-tagged literals.

Two field kinds read language-tagged literals:

- single-locale (LocalizedString): the first matching literal, language and
  text. Which literal is "first" depends on the graph's ordering, so use the
  multi-locale kind when a specific language is needed.
- multi-locale (LocalizedText): every matching literal, keyed by language.
  A later literal for the same language replaces an earlier one. Objects that
  are not literals are skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from .errors import TypeMismatch
from .terms import Literal, Term


@dataclass(frozen=True)
class LocalizedString:
    """A single string with its language tag ('' when untagged)."""
    value: str
    language: str = ""

    def __str__(self) -> str:
        if not self.language:
            return self.value
        return f"{self.value}@{self.language}"


class LocalizedText(Mapping[str, str]):
    """Translations of one text: language tag -> text. Read-only once built."""

    def __init__(self, translations: Iterable[tuple[str, str]] | Mapping[str, str] = ()) -> None:
        if isinstance(translations, Mapping):
            translations = translations.items()
        self._translations: dict[str, str] = {}
        for language, text in translations:
            self._translations[language] = text

    def __getitem__(self, language: str) -> str:
        return self._translations[language]

    def __iter__(self) -> Iterator[str]:
        return iter(self._translations)

    def __len__(self) -> int:
        return len(self._translations)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LocalizedText):
            return self._translations == other._translations
        if isinstance(other, Mapping):
            return self._translations == dict(other)
        return NotImplemented

    def get_with_fallback(self, language: str, fallback: str) -> str:
        """Text in ``language``, else ``fallback``, else any text, else ''."""
        if language in self._translations:
            return self._translations[language]
        if fallback in self._translations:
            return self._translations[fallback]
        for text in self._translations.values():
            return text
        return ""

    def __repr__(self) -> str:
        return f"LocalizedText({self._translations!r})"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_single(objects: list[Term], context: str) -> LocalizedString | None:
    """First object as a LocalizedString; None when there are no objects."""
    if not objects:
        return None
    first = objects[0]
    if not isinstance(first, Literal):
        raise TypeMismatch(f"expected a literal for localized string {context}, got {first}")
    return LocalizedString(first.value, first.language or "")


def decode_multi(objects: list[Term]) -> LocalizedText:
    """All literal objects as a LocalizedText; non-literals are skipped."""
    return LocalizedText(
        (obj.language or "", obj.value)
        for obj in objects
        if isinstance(obj, Literal)
    )
