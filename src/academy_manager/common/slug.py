from __future__ import annotations

import re
import unicodedata

from ..core.exceptions import ValidationError

# ELOT 743 style, one Latin group per Greek letter.
_GREEK_TO_LATIN = {
    "α": "a", "β": "v", "γ": "g", "δ": "d", "ε": "e", "ζ": "z", "η": "i",
    "θ": "th", "ι": "i", "κ": "k", "λ": "l", "μ": "m", "ν": "n", "ξ": "x",
    "ο": "o", "π": "p", "ρ": "r", "σ": "s", "ς": "s", "τ": "t", "υ": "y",
    "φ": "f", "χ": "ch", "ψ": "ps", "ω": "o",
}

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def transliterate(value: str) -> str:
    # NFD splits tonos/dialytika off the base letter so they can be dropped.
    decomposed = unicodedata.normalize("NFD", value.lower())
    out: list[str] = []
    for ch in decomposed:
        if unicodedata.combining(ch):
            continue
        out.append(_GREEK_TO_LATIN.get(ch, ch))
    return unicodedata.normalize("NFKD", "".join(out)).encode("ascii", "ignore").decode("ascii")


def slugify(value: str) -> str:
    """Deterministic ASCII slug, e.g. ``"Κ10 Α"`` -> ``"k10-a"``."""
    slug = _NON_SLUG.sub("-", transliterate(value or "")).strip("-")
    if not slug:
        raise ValidationError(f"Δεν είναι δυνατή η δημιουργία αναγνωριστικού από: {value!r}")
    return slug


def team_slug(age_group: str, group_name: str) -> str:
    return slugify(f"{age_group}-{group_name}")
