"""Core utility functions for the Logseq graph bridge."""

from __future__ import annotations

import re

_PAGE_REF_RE = re.compile(r"\[\[([^\[\]]+)\]\]")
_TAG_RE = re.compile(r"(?<!\S)#([^\s#\[\],;!?()]+)")


def normalize_name(name: str) -> str:
    """Fold a page name into the lookup key used by the store's name index.

    Logseq indexes ``:block/name`` in lowercase, so every lookup path must
    pass through here. Display names keep their original casing elsewhere.
    """
    return name.strip().lower()


def extract_references(content: str | None) -> list[str]:
    """Extract embedded page names from block content.

    Recognizes ``[[Page Name]]``, ``#[[Multi Word Tag]]`` and ``#tag``.
    Order of first appearance is preserved and duplicates (compared by
    normalized name) are dropped.
    """
    if not content:
        return []

    found: list[str] = []
    seen: set[str] = set()

    candidates = [m.group(1) for m in _PAGE_REF_RE.finditer(content)]
    candidates += [m.group(1).rstrip(".:") for m in _TAG_RE.finditer(content)]

    for candidate in candidates:
        candidate = candidate.strip()
        key = normalize_name(candidate)
        if key and key not in seen:
            seen.add(key)
            found.append(candidate)
    return found


def mentions(content: str | None, page_name: str) -> bool:
    """Whether block content embeds ``page_name`` as a reference or tag."""
    target = normalize_name(page_name)
    return any(normalize_name(ref) == target for ref in extract_references(content))
