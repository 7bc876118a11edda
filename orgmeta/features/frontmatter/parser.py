"""Frontmatter extraction for org-style documents.

Only the header block is read. A header line looks like

    #+TITLE: Some title
    #+FILETAGS: :book:read:

and the block is the first run of consecutive header lines in the
document. Anything after the first non-header line (a blank line
included) is ignored.

Values may carry a rich link of the form [[target][display]]. The
display text becomes the stored value and the whole bracketed construct
becomes the stored link.
"""

import re

from loguru import logger

HEADER_LINE_RE = re.compile(r"^#\+([^:\s]+):\s*(.*)$", re.IGNORECASE)
RICH_LINK_RE = re.compile(r"\[\[([^\[\]]+)\]\[(.*?)\]\]")


def parse_frontmatter(text: str) -> list[tuple[str, str]]:
    """Return the (key, raw_value) pairs of the leading header block.

    Args:
        text: Full document text

    Returns:
        Pairs in source order. Keys are lower-cased and values trimmed.
        Duplicate keys are kept; the store keeps the last one.
    """
    entries: list[tuple[str, str]] = []
    in_block = False

    for line in text.splitlines():
        match = HEADER_LINE_RE.match(line)
        if match is None:
            if in_block:
                break
            continue
        in_block = True
        entries.append((match.group(1).lower(), match.group(2).strip()))

    logger.trace(f"Parsed {len(entries)} frontmatter entries")
    return entries


def extract_link(raw_value: str) -> tuple[str, str | None]:
    """Split a raw header value into display text and link.

    >>> extract_link("[[id:abc][My Title]]")
    ('My Title', '[[id:abc][My Title]]')
    >>> extract_link("plain text")
    ('plain text', None)

    Only the first link in the value is considered. Text around the link
    is dropped from the display value. Malformed brackets are treated as
    plain text.
    """
    match = RICH_LINK_RE.search(raw_value)
    if match is None:
        return raw_value, None
    return match.group(2), match.group(0)
