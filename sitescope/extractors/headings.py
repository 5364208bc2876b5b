"""Heading tree builder.

Produces the document's ``h1``-``h6`` elements as :class:`HeadingNode`
records in document order.  Ranks are the raw tag levels; nothing is
renumbered, so a page that jumps from ``h1`` to ``h4`` keeps rank 4.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from sitescope.extractors.dom import NO_NODE, DocumentSnapshot

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

_HEADING_RE = re.compile(r"^h([1-6])$")


class HeadingNode(NamedTuple):
    rank: int
    identifier: str | None
    text: str
    position: int  # arena index in the snapshot


def heading_rank(tag: str) -> int | None:
    """Return 1-6 for heading tag names, ``None`` for anything else."""
    m = _HEADING_RE.match(tag.lower())
    return int(m.group(1)) if m else None


def heading_identifier(doc: DocumentSnapshot, index: int) -> str | None:
    """The heading's own ``id``, else the ``id`` of a nested ``<a id>``."""
    own = doc.attr(index, "id")
    if own:
        return own
    anchor = doc.find_first("a", within=index, attr="id")
    if anchor != NO_NODE:
        return doc.attr(anchor, "id") or None
    return None


def build_headings(
    document: DocumentSnapshot | str,
    *,
    max_rank: int = 6,
    within: int | None = None,
) -> list[HeadingNode]:
    """Return every heading of rank <= *max_rank* in document order.

    *within* restricts the scan to one subtree of the snapshot.
    """
    doc = document if isinstance(document, DocumentSnapshot) else DocumentSnapshot.from_html(document)
    headings: list[HeadingNode] = []
    for index in doc.find_all(HEADING_TAGS, within=within):
        rank = heading_rank(doc[index].tag)
        if rank is None or rank > max_rank:
            continue
        headings.append(
            HeadingNode(
                rank=rank,
                identifier=heading_identifier(doc, index),
                text=doc.text(index).strip(),
                position=index,
            ),
        )
    return headings
