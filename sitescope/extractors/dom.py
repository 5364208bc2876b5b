"""Immutable, index-addressed snapshot of a parsed HTML document.

The document is parsed once with BeautifulSoup/lxml and flattened into an
arena of :class:`Node` records in document (pre-order) order.  Every node
knows its parent, its next element sibling and the end of its subtree, so a
subtree is simply ``range(node.index + 1, node.end)``.

Consumers (heading builder, section extractor, summarizer) work on indices
into the arena.  The underlying parse tree is private to the snapshot and is
never handed out, so nothing can mutate what another consumer sees.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag

from sitescope.errors import ParseError

logger = logging.getLogger(__name__)

NO_NODE = -1


class Node(NamedTuple):
    index: int
    tag: str
    attrs: Mapping[str, str]
    parent: int          # NO_NODE for top-level elements
    next_sibling: int    # next *element* sibling, NO_NODE at the end
    end: int             # one past the last descendant


def _attr_value(val: object) -> str:
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


class DocumentSnapshot:
    """Flat node arena built from one HTML document."""

    def __init__(self, nodes: tuple[Node, ...], tags: tuple[Tag, ...], url: str = "") -> None:
        self._nodes = nodes
        self._tags = tags
        self.url = url

    @classmethod
    def from_html(cls, html: str | bytes, url: str = "") -> DocumentSnapshot:
        """Parse *html* into a snapshot.

        Raises:
            ParseError: if the markup cannot be parsed at all.
        """
        try:
            soup = BeautifulSoup(html, "lxml")
        except Exception as exc:
            raise ParseError(f"Could not parse HTML from {url or '<string>'}: {exc}", url=url) from exc

        tags = tuple(t for t in soup.find_all(True) if isinstance(t, Tag))
        position = {id(t): i for i, t in enumerate(tags)}

        parents: list[int] = []
        siblings: list[int] = []
        ends = list(range(1, len(tags) + 1))
        for tag in tags:
            parents.append(position.get(id(tag.parent), NO_NODE))
            nxt = tag.find_next_sibling()
            siblings.append(position[id(nxt)] if isinstance(nxt, Tag) else NO_NODE)

        # children have larger indices than their parent, so one reverse
        # pass propagates subtree ends upwards
        for i in range(len(tags) - 1, -1, -1):
            p = parents[i]
            if p != NO_NODE and ends[i] > ends[p]:
                ends[p] = ends[i]

        nodes = tuple(
            Node(
                index=i,
                tag=tag.name.lower(),
                attrs=MappingProxyType({k: _attr_value(v) for k, v in tag.attrs.items()}),
                parent=parents[i],
                next_sibling=siblings[i],
                end=ends[i],
            )
            for i, tag in enumerate(tags)
        )
        logger.debug("snapshot of %s: %d nodes", url or "<string>", len(nodes))
        return cls(nodes, tags, url=url)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def text(self, index: int) -> str:
        """Concatenated text of the node and its descendants (untrimmed)."""
        return self._tags[index].get_text()

    def markup(self, index: int) -> str:
        """Serialized outer HTML of the node."""
        return str(self._tags[index])

    def attr(self, index: int, name: str) -> str | None:
        return self._nodes[index].attrs.get(name)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def descendants(self, index: int) -> range:
        return range(index + 1, self._nodes[index].end)

    def children(self, index: int) -> Iterator[int]:
        node = self._nodes[index]
        child = index + 1 if index + 1 < node.end else NO_NODE
        while child != NO_NODE:
            yield child
            child = self._nodes[child].next_sibling

    def find_all(self, names: str | tuple[str, ...], within: int | None = None) -> list[int]:
        """Indices of elements named *names*, in document order.

        When *within* is given only its descendants are searched.
        """
        wanted = (names,) if isinstance(names, str) else names
        span = range(len(self._nodes)) if within is None else self.descendants(within)
        return [i for i in span if self._nodes[i].tag in wanted]

    def find_first(
        self,
        name: str,
        within: int | None = None,
        *,
        attr: str | None = None,
        value: str | None = None,
    ) -> int:
        """First matching element index or :data:`NO_NODE`.

        *attr* alone requires the attribute to be present; with *value* it
        must also be equal.
        """
        span = range(len(self._nodes)) if within is None else self.descendants(within)
        for i in span:
            node = self._nodes[i]
            if name != "*" and node.tag != name:
                continue
            if attr is not None:
                if attr not in node.attrs:
                    continue
                if value is not None and node.attrs[attr] != value:
                    continue
            return i
        return NO_NODE
