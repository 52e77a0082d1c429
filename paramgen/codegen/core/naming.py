"""
Identifier checks for generated class and field names.

Names in a parameter document are emitted verbatim. The sanitizer never
changes them; it only tells the validator whether a name will compile and
what a compilable spelling would be.
"""

import re
from typing import Iterable, List, Optional


IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Word boundaries: separators, and lower->upper transitions (moveSpeed)
_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+|(?<=[a-z0-9])(?=[A-Z])")


def split_words(name: str) -> List[str]:
    """Split ``move_speed``, ``move-speed`` or ``moveSpeed`` into words."""
    return [word for word in _WORD_SPLIT.split(name) if word]


class NameSanitizer:
    """Keyword-aware identifier rules for one target language."""

    def __init__(
        self,
        reserved_words: Optional[Iterable[str]] = None,
        builtin_types: Optional[Iterable[str]] = None,
    ):
        """
        Args:
            reserved_words: Keywords that cannot be used as identifiers
            builtin_types: Type names a generated class should not shadow
        """
        self.reserved_words = frozenset(reserved_words or ())
        self.builtin_types = frozenset(builtin_types or ())

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words

    def is_valid_identifier(self, name: str) -> bool:
        """True if ``name`` compiles as an identifier."""
        return bool(IDENTIFIER_PATTERN.match(name)) and not self.is_reserved(name)

    def shadows_builtin(self, name: str) -> bool:
        return name in self.builtin_types

    def suggest_class_name(self, name: str) -> str:
        """PascalCase spelling of ``name`` that is safe as a class name."""
        words = split_words(name) or ["Generated"]
        suggestion = "".join(word[:1].upper() + word[1:] for word in words)
        return self._finish(suggestion)

    def suggest_field_name(self, name: str) -> str:
        """camelCase spelling of ``name`` that is safe as a field name."""
        words = split_words(name) or ["value"]
        first, rest = words[0], words[1:]
        suggestion = first[:1].lower() + first[1:]
        suggestion += "".join(word[:1].upper() + word[1:] for word in rest)
        return self._finish(suggestion)

    def _finish(self, suggestion: str) -> str:
        if suggestion[0].isdigit():
            suggestion = f"_{suggestion}"
        if self.is_reserved(suggestion) or self.shadows_builtin(suggestion):
            suggestion = f"{suggestion}_"
        return suggestion
