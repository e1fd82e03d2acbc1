"""Query builders for the Logseq graph store.

All builders are pure: they only produce query text. Page names always pass
through ``normalize_name`` before they are embedded, so callers never need
to lowercase anything themselves.
"""

from __future__ import annotations

import re
from typing import Iterable

from logseq_mcp.core.exceptions import InvalidInputError
from logseq_mcp.core.utils import normalize_name

_PROPERTY_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-?!.]*$")

# Outbound/inbound disjunction shared by the network shapes. ``{src}`` is the
# logic variable bound to the page being expanded.
_LINK_CLAUSE = """(or-join [{src} ?connected ?rel-type]
               ;; outbound: blocks on the page that reference a named page
               (and
                 [?b :block/page {src}]
                 [?b :block/refs ?connected]
                 [?connected :block/name]
                 [(ground "outbound") ?rel-type])
               ;; inbound: blocks on a named page that reference the page
               (and
                 [?b :block/refs {src}]
                 [?b :block/page ?connected]
                 [?connected :block/name]
                 [(ground "inbound") ?rel-type]))"""


def edn_string(value: str) -> str:
    """Quote a value as an EDN string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DatalogQueryBuilder:
    """Builds Datalog queries for ``logseq.DB.datascriptQuery``.

    Example:
        >>> query = DatalogQueryBuilder.connected_pages([12, 40])
        >>> rows = await client.datascript_query(query)
        >>> for source_id, page, rel_type in rows:
        ...     ...
    """

    @staticmethod
    def page(page_name: str) -> str:
        """Single page by name. Rows: ``[page]``."""
        name = edn_string(normalize_name(page_name))
        return f"""[:find (pull ?p [*])
             :where
             [?p :block/name {name}]]"""

    @staticmethod
    def page_blocks(page_name: str) -> str:
        """All blocks of a page. Rows: ``[block]``."""
        name = edn_string(normalize_name(page_name))
        return f"""[:find (pull ?b [*])
             :where
             [?p :block/name {name}]
             [?b :block/page ?p]]"""

    @staticmethod
    def concept_network(root_name: str, max_hops: int) -> str:
        """Root page and, for ``max_hops >= 1``, its direct neighbours.

        With zero hops this is the same query as ``page``. Otherwise rows are
        ``[root, connected, rel-type]`` where rel-type is ``"outbound"`` or
        ``"inbound"``.
        """
        if max_hops < 0:
            raise InvalidInputError(f"max_hops must be >= 0, got {max_hops}")
        if max_hops == 0:
            return DatalogQueryBuilder.page(root_name)

        name = edn_string(normalize_name(root_name))
        link_clause = _LINK_CLAUSE.format(src="?p")
        return f"""[:find (pull ?p [*]) (pull ?connected [*]) ?rel-type
             :where
             [?p :block/name {name}]
             {link_clause}
             [(not= ?p ?connected)]]"""

    @staticmethod
    def connected_pages(page_ids: Iterable[int]) -> str:
        """Pages linked to any of ``page_ids``, one BFS level at a time.

        Rows are ``[source-id, connected, rel-type]``.
        """
        ids = sorted({int(i) for i in page_ids})
        if not ids:
            raise InvalidInputError("connected_pages needs at least one page id")

        id_set = "#{" + " ".join(str(i) for i in ids) + "}"
        link_clause = _LINK_CLAUSE.format(src="?src")
        return f"""[:find ?src (pull ?connected [*]) ?rel-type
             :where
             [?src :block/name]
             [(contains? {id_set} ?src)]
             {link_clause}
             [(not= ?src ?connected)]]"""

    @staticmethod
    def blocks_referencing(page_name: str, target_name: str) -> str:
        """Blocks on ``page_name`` whose reference index includes ``target_name``."""
        page = edn_string(normalize_name(page_name))
        target = edn_string(normalize_name(target_name))
        return f"""[:find (pull ?b [*])
             :where
             [?p :block/name {page}]
             [?t :block/name {target}]
             [?b :block/page ?p]
             [?b :block/refs ?t]]"""

    @staticmethod
    def search_content(text: str) -> str:
        """Blocks whose content contains ``text`` (case-sensitive)."""
        return f"""[:find (pull ?b [*])
             :where
             [?b :block/content ?content]
             [(clojure.string/includes? ?content {edn_string(text)})]]"""

    @staticmethod
    def property_match(property_key: str, property_value: str) -> str:
        """Blocks whose property ``property_key`` equals ``property_value``."""
        if not _PROPERTY_KEY_RE.match(property_key):
            raise InvalidInputError(f"Invalid property key: {property_key!r}")
        return f"""[:find (pull ?b [*])
             :where
             [?b :block/properties ?props]
             [(get ?props :{property_key}) ?val]
             [(= ?val {edn_string(property_value)})]]"""


class SimpleQueryBuilder:
    """Builds Logseq simple queries for ``logseq.DB.q``."""

    @staticmethod
    def block_content(*terms: str) -> str:
        """Blocks containing every term."""
        if not terms:
            raise InvalidInputError("block_content needs at least one term")
        clauses = [f"(block-content {edn_string(t)})" for t in terms]
        if len(clauses) == 1:
            return clauses[0]
        return f"(and {' '.join(clauses)})"

    @staticmethod
    def page_mention(page_name: str) -> str:
        """Blocks whose content embeds ``[[page_name]]``."""
        return SimpleQueryBuilder.block_content(f"[[{page_name}]]")
