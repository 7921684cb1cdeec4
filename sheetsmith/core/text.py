"""Text helpers shared by catalog sorting and advantage ordering."""

from __future__ import annotations

import unicodedata
from typing import Tuple


def locale_key(text: str) -> Tuple[str, str]:
    """Sort key approximating a locale-aware collation.

    Accents are folded into their base letters and case is ignored for the
    primary comparison; the raw text breaks ties so ordering stays total.
    """

    decomposed = unicodedata.normalize("NFKD", text or "")
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text or ""


__all__ = ["locale_key"]
