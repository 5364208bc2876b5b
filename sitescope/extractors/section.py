"""Heading-scoped section extraction.

A section is everything that follows a heading, sibling by sibling, until
the next heading of equal or higher rank.  Output is bounded by a character
budget on the serialized markup; an element that does not fit is left out
whole rather than cut mid-tag.
"""

from __future__ import annotations

import logging

from sitescope.extractors.dom import NO_NODE, DocumentSnapshot
from sitescope.extractors.headings import HEADING_TAGS, HeadingNode, build_headings, heading_rank
from sitescope.items import SectionResult

logger = logging.getLogger(__name__)

_CODE_TAGS: tuple[str, ...] = ("pre", "code")


def find_target_heading(
    headings: list[HeadingNode],
    identifier: str | None = None,
    heading_text: str | None = None,
) -> HeadingNode | None:
    """First heading matching *identifier* or *heading_text*, no scoring.

    Text comparison is case-insensitive and exact on trimmed text.
    """
    wanted_text = heading_text.strip().lower() if heading_text else None
    for heading in headings:
        if identifier and heading.identifier == identifier:
            return heading
        if wanted_text is not None and heading.text.lower() == wanted_text:
            return heading
    return None


def _crosses_boundary(doc: DocumentSnapshot, index: int, boundary_rank: int) -> bool:
    """True if *index* is, or contains, a heading of rank <= *boundary_rank*."""
    rank = heading_rank(doc[index].tag)
    if rank is not None and rank <= boundary_rank:
        return True
    for inner in doc.find_all(HEADING_TAGS, within=index):
        inner_rank = heading_rank(doc[inner].tag)
        if inner_rank is not None and inner_rank <= boundary_rank:
            return True
    return False


def _code_blocks(doc: DocumentSnapshot, index: int) -> list[str]:
    if doc[index].tag in _CODE_TAGS:
        return [doc.text(index).strip()]
    blocks: list[str] = []
    skip_until = NO_NODE
    for inner in doc.find_all("pre", within=index):
        if inner < skip_until:
            continue  # nested inside a pre already taken
        blocks.append(doc.text(inner).strip())
        skip_until = doc[inner].end
    return blocks


def extract_section(
    document: DocumentSnapshot | str,
    *,
    identifier: str | None = None,
    heading_text: str | None = None,
    max_chars: int = 5000,
) -> SectionResult:
    """Extract the section owned by one heading.

    Args:
        document:     Parsed snapshot or raw HTML.
        identifier:   Heading ``id`` (or nested anchor ``id``) to look for.
        heading_text: Heading text to look for (case-insensitive, exact).
        max_chars:    Budget for the accumulated serialized markup.

    Returns:
        :class:`SectionResult`.  ``found`` is ``False`` when no heading
        matches; that is a value, not an error.

    Raises:
        ValueError: if neither *identifier* nor *heading_text* is given.
    """
    if not identifier and not heading_text:
        raise ValueError("extract_section needs an identifier or heading_text")

    doc = document if isinstance(document, DocumentSnapshot) else DocumentSnapshot.from_html(document)
    target = find_target_heading(build_headings(doc), identifier, heading_text)
    if target is None:
        logger.debug("section not found: id=%r text=%r in %s", identifier, heading_text, doc.url)
        return SectionResult(
            found=False,
            url=doc.url or None,
            reason="Section not found by anchorId or headingText.",
        )

    html_parts: list[str] = []
    html_len = 0
    text_chunks: list[str] = []
    code_blocks: list[str] = []
    truncated = False

    node = doc[target.position].next_sibling
    while node != NO_NODE:
        if _crosses_boundary(doc, node, target.rank):
            break

        snippet = doc.markup(node)
        if html_len + len(snippet) > max_chars:
            truncated = True
            break
        html_parts.append(snippet)
        html_len += len(snippet)

        code_blocks.extend(_code_blocks(doc, node))
        chunk = doc.text(node).strip()
        if chunk:
            text_chunks.append(chunk)

        node = doc[node].next_sibling

    logger.debug(
        "section %r (h%d): %d chars, %d code blocks, truncated=%s",
        target.text, target.rank, html_len, len(code_blocks), truncated,
    )
    return SectionResult(
        found=True,
        url=doc.url or None,
        heading=target.text,
        identifier=identifier or target.identifier,
        html="".join(html_parts),
        text="\n\n".join(text_chunks),
        code_blocks=code_blocks,
        truncated=truncated,
    )
