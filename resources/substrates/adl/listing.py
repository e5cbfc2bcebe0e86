"""Flat and delimited listing emulated over a hierarchical directory tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence

from packages.lakeblob_shared.blob import BlobItem, BlobPrefix
from packages.lakeblob_shared.errors import NotFoundError
from packages.lakeblob_shared.logging import get_logger
from resources.substrates.adl.paths import DELIMITER, join_key
from resources.substrates.adl.remote import FileStatus

_LOGGER = get_logger(__name__)

FetchStatuses = Callable[[str], Sequence[FileStatus]]


@dataclass
class KeyBudget:
    """Best-effort ``max_keys`` hint, decremented per directory fetched.

    The budget never stops the walk or truncates output.
    """

    remaining: int | None = None

    def consume(self, count: int) -> None:
        if self.remaining is None:
            return
        was_positive = self.remaining > 0
        self.remaining = max(0, self.remaining - count)
        if was_positive and self.remaining == 0:
            _LOGGER.debug("listing key budget exhausted; continuing walk")


@dataclass
class ListingRows:
    prefixes: list[BlobPrefix] = field(default_factory=list)
    items: list[BlobItem] = field(default_factory=list)


def walk(
    fetch: FetchStatuses,
    *,
    prefix: str,
    recursive: bool,
    budget: KeyBudget | None = None,
) -> ListingRows:
    """List ``prefix`` and, when ``recursive``, every directory beneath it.

    Traversal is depth-first pre-order: a directory's placeholder row is
    followed by its whole subtree before the next sibling. An explicit stack
    of child iterators stands in for call-stack recursion. ``fetch`` returns
    the children of one path or raises a classified error.
    """
    budget = budget or KeyBudget()
    rows = ListingRows()
    pending: list[Iterator[tuple[str, FileStatus]]] = []

    try:
        children = _expand(
            fetch, prefix, recursive=recursive, rows=rows, budget=budget
        )
    except NotFoundError:
        # Only a missing root lists as empty; missing subdirectories raise.
        return rows
    if children is not None:
        pending.append(children)

    while pending:
        try:
            parent, status = next(pending[-1])
        except StopIteration:
            pending.pop()
            continue

        key = join_key(parent, status.path_suffix)
        if not status.is_directory:
            rows.items.append(_item(key, status))
        elif recursive:
            rows.items.append(_item(key + DELIMITER, status))
            nested = _expand(fetch, key, recursive=True, rows=rows, budget=budget)
            if nested is not None:
                pending.append(nested)
        else:
            rows.prefixes.append(BlobPrefix(prefix=key + DELIMITER))
    return rows


def _expand(
    fetch: FetchStatuses,
    path: str,
    *,
    recursive: bool,
    rows: ListingRows,
    budget: KeyBudget,
) -> Iterator[tuple[str, FileStatus]] | None:
    """Fetch one path and emit its own rows; return its children, if any."""
    statuses = fetch(path)
    if path != "":
        if len(statuses) == 1 and statuses[0].path_suffix == "":
            # The path names a file. A delimiter-terminated query cannot.
            if not path.endswith(DELIMITER):
                rows.items.append(_item(path, statuses[0]))
            return None
        if not recursive:
            if path.endswith(DELIMITER):
                rows.items.append(BlobItem(key=path))
            else:
                rows.prefixes.append(BlobPrefix(prefix=path + DELIMITER))

    parent = path.rstrip(DELIMITER)
    budget.consume(len(statuses))
    return ((parent, status) for status in statuses)


def after_marker(rows: ListingRows, marker: str | None) -> ListingRows:
    """Drop rows that do not sort strictly after ``marker``."""
    if not marker:
        return rows
    return ListingRows(
        prefixes=[row for row in rows.prefixes if row.prefix > marker],
        items=[row for row in rows.items if row.key > marker],
    )


def _item(key: str, status: FileStatus) -> BlobItem:
    return BlobItem(key=key, size=status.length, last_modified=status.last_modified)
