from __future__ import annotations

import re
from typing import Iterable

MENU_ID_PREFIX = "menu_"


def slugify_title(title: str) -> str:
    """Convert a display title into the lowercase, underscore-joined id slug."""
    cleaned = re.sub(r"[^a-z0-9\s]", "", (title or "").lower())
    slug = re.sub(r"\s+", "_", cleaned.strip()).strip("_")
    return slug or "item"


def generate_menu_id(title: str, existing_ids: Iterable[str]) -> str:
    """Mint a `menu_<slug>` id that does not collide with `existing_ids`.

    On collision the suffix is one past the highest numeric suffix already
    used for the same base, so ids keep growing after deletions.
    """
    base_id = f"{MENU_ID_PREFIX}{slugify_title(title)}"
    existing = set(existing_ids)
    if base_id not in existing:
        return base_id

    suffix_re = re.compile(rf"^{re.escape(base_id)}_(\d+)$")
    numbers = [0]
    for existing_id in existing:
        match = suffix_re.match(existing_id)
        if match:
            numbers.append(int(match.group(1)))
    return f"{base_id}_{max(numbers) + 1}"
