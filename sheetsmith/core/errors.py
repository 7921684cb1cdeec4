"""Exception types raised by the derivation pipeline and compendium loader.

Advisory conditions (unknown catalog keys, missing references, failed package
fetches) are logged rather than raised; the classes here cover contract
violations and unreadable content only.
"""

from __future__ import annotations

from typing import Optional


class SheetsmithError(Exception):
    """Base exception for library errors."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class CompendiumLoadError(SheetsmithError):
    """Compendium data could not be located or indexed."""


class UnknownCatalogKeyError(SheetsmithError, KeyError):
    """A stored value does not exist in the rule catalog."""

    def __init__(self, category: str, key: str):
        super().__init__(
            f"Unknown {category} key {key!r}",
            user_message=f"'{key}' is not a recognised entry of {category}.",
        )
        self.category = category
        self.key = key

    def __str__(self) -> str:
        return self.args[0]


class InvalidChoiceError(SheetsmithError, ValueError):
    """A player selection is not among the options a choice slot offers."""


class UnknownChoiceSlotError(SheetsmithError, KeyError):
    """A selection names a slot the trait choice does not have."""

    def __init__(self, choice_id: str, slot_key: str):
        super().__init__(
            f"Trait {choice_id!r} has no choice {slot_key!r}",
            user_message=f"This trait has no choice called '{slot_key}'.",
        )
        self.choice_id = choice_id
        self.slot_key = slot_key

    def __str__(self) -> str:
        return self.args[0]


__all__ = [
    "CompendiumLoadError",
    "InvalidChoiceError",
    "SheetsmithError",
    "UnknownCatalogKeyError",
    "UnknownChoiceSlotError",
]
