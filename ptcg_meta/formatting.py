"""
Display names and URL slugs for deck identifiers.
"""
import re
from typing import Iterable, Optional


# Card-mechanic suffixes printed in lower case on the cards themselves
LOWERCASE_TOKENS = {"ex"}

_SLUG_INVALID = re.compile(r"[^a-z0-9-]")


def format_deck_name(deck: str) -> str:
    """
    Turn a deck identifier into a display name.

    Args:
        deck: Identifier, e.g. "charizard-ex-arcanine"

    Returns:
        Display name, e.g. "Charizard ex Arcanine"
    """
    if not deck:
        return deck

    parts = []
    for part in deck.split("-"):
        if part.lower() in LOWERCASE_TOKENS:
            parts.append(part.lower())
        else:
            parts.append(part[:1].upper() + part[1:])
    return " ".join(p for p in parts if p)


def deck_slug(deck: str) -> str:
    """URL-safe, lower-case form of a deck identifier."""
    slug = deck.strip().lower().replace(" ", "-")
    return _SLUG_INVALID.sub("", slug)


def resolve_deck_name(names: Iterable[str], query: str) -> Optional[str]:
    """
    Find the deck a user-supplied name refers to.

    Exact (case-sensitive) matches win; otherwise the query is compared by
    slug. Returns None when nothing matches or the slug is ambiguous.
    """
    names = list(names)
    if query in names:
        return query

    wanted = deck_slug(query)
    matches = [n for n in names if deck_slug(n) == wanted]
    if len(matches) == 1:
        return matches[0]
    return None
