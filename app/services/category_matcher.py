from typing import Iterable, Optional
from uuid import UUID

from app.schemas.category import CategoryRecord


def match_category(text: Optional[str], categories: Iterable[CategoryRecord]) -> Optional[UUID]:
    """
    Map an external category label onto one of our existing categories.

    A category matches when its name equals the label or the label contains it,
    ignoring case. The first match in ``categories`` wins, so callers should pass
    them in a stable order (the stores return them sorted by name).
    Never creates a category; returns None when nothing matches.
    """
    if not text or not text.strip():
        return None

    needle = text.strip().lower()
    for category in categories:
        name = (category.name or "").strip().lower()
        if not name:
            continue
        if name == needle or name in needle:
            return category.id
    return None
