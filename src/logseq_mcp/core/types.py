"""Core types for pages, blocks and backlinks read from Logseq.

Logseq returns the same entity with different key spellings depending on
which API produced it: the Editor API uses camel case (``journalDay``,
``originalName``), Datalog pulls use kebab case or namespaced keys
(``journal-day``, ``block/original-name``) and ``db/id`` for the entity id.
``from_payload`` maps every spelling onto one canonical field so that the
rest of the code never needs dual-key lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# canonical field -> accepted spellings after namespace stripping
_PAGE_KEYS = {
    "original_name": ("originalName", "original-name", "original_name"),
    "journal": ("journal?", "journal"),
    "journal_day": ("journalDay", "journal-day", "journal_day"),
    "updated_at": ("updatedAt", "updated-at", "updated_at"),
    "created_at": ("createdAt", "created-at", "created_at"),
}


def _strip_namespaces(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop ``block/`` style prefixes; ``db/id`` becomes ``id``."""
    flat: dict[str, Any] = {}
    for key, value in payload.items():
        key = str(key).lstrip(":")
        if key == "db/id":
            flat.setdefault("id", value)
        elif "/" in key:
            flat.setdefault(key.rsplit("/", 1)[1], value)
        else:
            flat[key] = value
    return flat


def _pick(payload: dict[str, Any], spellings: tuple[str, ...]) -> Any:
    for key in spellings:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def entity_id(payload: Any) -> int | None:
    """Return the numeric id of an entity payload or bare id reference."""
    if isinstance(payload, bool):
        return None
    if isinstance(payload, int):
        return payload
    if isinstance(payload, dict):
        value = payload.get("id", payload.get("db/id"))
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


@dataclass
class Page:
    """A named node in the Logseq graph."""

    id: int
    name: str
    original_name: str | None = None
    uuid: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    journal: bool = False
    journal_day: int | None = None
    updated_at: int | None = None
    created_at: int | None = None
    children: list["Block"] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Name with its original casing, falling back to the lookup key."""
        return self.original_name or self.name

    @property
    def is_journal(self) -> bool:
        return self.journal or self.journal_day is not None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Page | None":
        """Normalize a raw page payload. Returns None for anonymous refs."""
        if not isinstance(payload, dict):
            return None
        flat = _strip_namespaces(payload)
        page_id = entity_id(flat)
        name = flat.get("name")
        if page_id is None or not name:
            return None

        journal_day = _pick(flat, _PAGE_KEYS["journal_day"])
        return cls(
            id=page_id,
            name=str(name),
            original_name=_pick(flat, _PAGE_KEYS["original_name"]),
            uuid=flat.get("uuid"),
            properties=dict(flat.get("properties") or {}),
            journal=bool(_pick(flat, _PAGE_KEYS["journal"])),
            journal_day=int(journal_day) if journal_day is not None else None,
            updated_at=_pick(flat, _PAGE_KEYS["updated_at"]),
            created_at=_pick(flat, _PAGE_KEYS["created_at"]),
            children=[
                child
                for child in (Block.from_payload(c) for c in flat.get("children") or [])
                if child is not None
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "original_name": self.display_name,
            "journal": self.is_journal,
            "properties": self.properties,
        }
        if self.uuid:
            result["uuid"] = self.uuid
        if self.journal_day is not None:
            result["journal_day"] = self.journal_day
        if self.updated_at is not None:
            result["updated_at"] = self.updated_at
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@dataclass
class Block:
    """A content fragment belonging to exactly one page."""

    id: int
    uuid: str | None = None
    content: str = ""
    page_id: int | None = None
    page: Page | None = None
    parent_id: int | None = None
    format: str | None = None
    level: int | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    children: list["Block"] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def journal_day(self) -> int | None:
        """Journal date of the owning page, when the payload carried it."""
        return self.page.journal_day if self.page else None

    def walk(self) -> list["Block"]:
        """This block followed by all its descendants, depth first."""
        blocks = [self]
        for child in self.children:
            blocks.extend(child.walk())
        return blocks

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Block | None":
        if not isinstance(payload, dict):
            return None
        flat = _strip_namespaces(payload)
        block_id = entity_id(flat)
        if block_id is None:
            return None

        raw_page = flat.get("page")
        page = Page.from_payload(raw_page) if isinstance(raw_page, dict) else None

        children = []
        for raw_child in flat.get("children") or []:
            # children may be ["uuid", "..."] pairs when not expanded
            child = cls.from_payload(raw_child) if isinstance(raw_child, dict) else None
            if child is not None:
                children.append(child)

        return cls(
            id=block_id,
            uuid=flat.get("uuid"),
            content=flat.get("content") or "",
            page_id=entity_id(raw_page),
            page=page,
            parent_id=entity_id(flat.get("parent")),
            format=flat.get("format"),
            level=flat.get("level"),
            properties=dict(flat.get("properties") or {}),
            children=children,
            meta=dict(flat.get("meta") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "uuid": self.uuid,
            "content": self.content,
            "page_id": self.page_id,
            "parent_id": self.parent_id,
            "properties": self.properties,
        }
        if self.page is not None:
            result["page"] = {"id": self.page.id, "name": self.page.display_name}
            if self.page.journal_day is not None:
                result["page"]["journal_day"] = self.page.journal_day
        if self.format:
            result["format"] = self.format
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@dataclass
class Backlink:
    """Blocks on one source page that reference a target page."""

    source_page: Page | None
    blocks: list[Block] = field(default_factory=list)

    @property
    def source_page_id(self) -> int | None:
        if self.source_page is not None:
            return self.source_page.id
        for block in self.blocks:
            if block.page_id is not None:
                return block.page_id
        return None

    @classmethod
    def from_payload(cls, payload: Any) -> "Backlink | None":
        """Parse one ``[page, [blocks...]]`` pair."""
        if not isinstance(payload, (list, tuple)) or len(payload) != 2:
            return None
        raw_page, raw_blocks = payload
        blocks = [b for b in (Block.from_payload(rb) for rb in raw_blocks or []) if b]
        return cls(source_page=Page.from_payload(raw_page), blocks=blocks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_page": self.source_page.to_dict() if self.source_page else None,
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass
class GraphInfo:
    """Information about the graph currently open in Logseq."""

    name: str | None = None
    path: str | None = None
    url: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GraphInfo":
        return cls(
            name=payload.get("name"),
            path=payload.get("path"),
            url=payload.get("url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "path": self.path, "url": self.url}
