"""Reader for the document ID registry.

The registry is owned by the editor and maps files to the IDs they
contain. Two serialisations are understood:

    org-id-locations (s-expression):
        (("/home/me/org/a.org" "ID-1" "ID-2") ("/home/me/org/b.org" "ID-3"))

    JSON:
        [["/home/me/org/a.org", "ID-1", "ID-2"], ["/home/me/org/b.org", "ID-3"]]

The first string of each entry is an absolute path, the rest are IDs.
This module only reads the registry; it never writes to it.
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath

from loguru import logger

from orgmeta.common.errors import RegistryFormatError

# Strings, parens, and any other run of non-space characters (bare atoms)
_SEXP_TOKEN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|(\()|(\))|([^\s()"]+)', re.DOTALL)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class RegisteredDocument:
    """A document known to the registry."""

    id: str
    path: str  # relative to the configured root, POSIX separators


def _parse_sexp(text: str) -> list:
    """Parse a nested list of strings from s-expression text.

    Bare atoms (e.g. nil) are returned as plain strings.

    Raises:
        RegistryFormatError: On unbalanced parentheses or trailing garbage
    """
    stack: list[list] = [[]]
    pos = 0
    for match in _SEXP_TOKEN_RE.finditer(text):
        gap = text[pos : match.start()]
        if gap.strip():
            raise RegistryFormatError(f"Unexpected registry content at offset {pos}")
        pos = match.end()

        string, open_paren, close_paren, atom = match.groups()
        if open_paren:
            stack.append([])
        elif close_paren:
            if len(stack) == 1:
                raise RegistryFormatError("Unbalanced ')' in registry file")
            finished = stack.pop()
            stack[-1].append(finished)
        elif string is not None:
            stack[-1].append(_ESCAPE_RE.sub(r"\1", string))
        else:
            stack[-1].append(atom)

    if text[pos:].strip():
        raise RegistryFormatError(f"Unexpected registry content at offset {pos}")
    if len(stack) != 1:
        raise RegistryFormatError("Unbalanced '(' in registry file")

    top = stack[0]
    if not top:
        return []
    if len(top) != 1 or not isinstance(top[0], list):
        raise RegistryFormatError("Registry must contain a single top-level list")
    return top[0]


def _load_entries(text: str) -> list:
    if not text.strip() or text.strip() == "nil":
        return []
    if text.lstrip().startswith("["):
        try:
            entries = json.loads(text)
        except json.JSONDecodeError as e:
            raise RegistryFormatError(f"Invalid JSON registry: {e}") from e
        if not isinstance(entries, list):
            raise RegistryFormatError("JSON registry must be an array")
        return entries
    return _parse_sexp(text)


def _relative_path(absolute_path: str, root_dir: str) -> str:
    # Emacs abbreviates paths under $HOME to "~/..."
    expanded = os.path.expanduser(absolute_path)
    return PurePath(os.path.relpath(expanded, root_dir)).as_posix()


def read_registered_ids(locations_file: str, root_dir: str) -> list[RegisteredDocument]:
    """Read the registry and return one record per distinct ID.

    Args:
        locations_file: Path to the registry file
        root_dir: Directory that stored paths are made relative to

    Returns:
        Records in registry order. For duplicate IDs the first path seen
        wins. An absent registry file yields an empty list.

    Raises:
        RegistryFormatError: If the file exists but cannot be parsed
    """
    registry = Path(locations_file)
    if not registry.exists():
        logger.debug(f"ID registry does not exist: {locations_file}")
        return []

    entries = _load_entries(registry.read_text(encoding="utf-8"))

    documents: list[RegisteredDocument] = []
    seen: set[str] = set()
    duplicates = 0

    for entry in entries:
        if not isinstance(entry, list) or not entry or not all(isinstance(v, str) for v in entry):
            raise RegistryFormatError(f"Registry entry is not a list of strings: {entry!r}")

        absolute_path, *ids = entry
        relative = _relative_path(absolute_path, root_dir)
        for doc_id in ids:
            if doc_id in seen:
                duplicates += 1
                logger.debug(f"Dropping duplicate registry ID {doc_id} ({absolute_path})")
                continue
            seen.add(doc_id)
            documents.append(RegisteredDocument(id=doc_id, path=relative))

    logger.info(
        f"Read {len(documents)} registered IDs from {locations_file}"
        + (f" ({duplicates} duplicates dropped)" if duplicates else "")
    )
    return documents
