"""Unit tests for flat and delimited listing over the directory tree."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from packages.lakeblob_shared.blob import ListBlobsResult
from packages.lakeblob_shared.errors import NotFoundError, NotSupportedError
from resources.substrates.adl.remote import RemoteOp
from resources.substrates.adl.tests.fakes import (
    FakeTransport,
    dir_entry,
    file_entry,
    make_backend,
)


def _keys(result: ListBlobsResult) -> list[str]:
    return [item.key for item in result.items]


def _prefixes(result: ListBlobsResult) -> list[str]:
    return [row.prefix for row in result.prefixes]


def test_delimited_listing_of_directory_does_not_recurse() -> None:
    """Child directories become prefixes and are never listed themselves."""
    transport = FakeTransport()
    transport.listing("d/", file_entry("a", length=4), dir_entry("b"))
    backend = make_backend(transport)

    result = backend.list_objects(prefix="d/", delimiter="/")

    assert _prefixes(result) == ["d/b/"]
    assert _keys(result) == ["d/", "d/a"]
    assert result.items[1].size == 4
    assert [call.path for call in transport.calls(RemoteOp.LISTSTATUS)] == ["d/"]


def test_delimited_listing_without_trailing_delimiter_adds_self_prefix() -> None:
    """A directory queried without its delimiter is reported as a prefix row."""
    transport = FakeTransport()
    transport.listing("d", file_entry("a"))
    backend = make_backend(transport)

    result = backend.list_objects(prefix="d", delimiter="/")

    assert _prefixes(result) == ["d/"]
    assert _keys(result) == ["d/a"]


def test_recursive_listing_emits_directory_placeholders_in_preorder() -> None:
    """Each directory adds its own row before its subtree and no prefixes appear."""
    transport = FakeTransport()
    transport.listing("", dir_entry("d"), file_entry("top"))
    transport.listing("d", file_entry("a", length=3), dir_entry("e"))
    transport.listing("d/e", file_entry("f"))
    backend = make_backend(transport)

    result = backend.list_objects()

    assert _keys(result) == ["d/", "d/a", "d/e/", "d/e/f", "top"]
    assert result.prefixes == ()
    assert result.truncated is False


def test_single_file_path_lists_as_one_item() -> None:
    """A path naming a file yields only that file's row."""
    transport = FakeTransport()
    transport.listing("d/file", file_entry("", length=5, modified_ms=1_500))
    backend = make_backend(transport)

    result = backend.list_objects(prefix="d/file", delimiter="/")

    assert _keys(result) == ["d/file"]
    assert result.prefixes == ()
    assert result.items[0].size == 5
    assert result.items[0].last_modified == datetime(
        1970, 1, 1, 0, 0, 1, 500_000, tzinfo=UTC
    )


def test_delimiter_terminated_query_is_not_reinterpreted_as_file() -> None:
    """A trailing delimiter cannot name a file, so nothing is returned."""
    transport = FakeTransport()
    transport.listing("d/file/", file_entry("", length=5))
    backend = make_backend(transport)

    result = backend.list_objects(prefix="d/file/", delimiter="/")

    assert result.items == ()
    assert result.prefixes == ()


def test_missing_top_level_prefix_lists_empty() -> None:
    """Not found at the queried prefix is an empty result."""
    transport = FakeTransport()
    transport.reply(RemoteOp.LISTSTATUS, "missing", status_code=404)
    backend = make_backend(transport)

    result = backend.list_objects(prefix="missing", delimiter="/")

    assert result.items == ()
    assert result.prefixes == ()


def test_missing_nested_directory_during_recursion_raises() -> None:
    """Only the queried prefix may be missing; a vanished subtree is an error."""
    transport = FakeTransport()
    transport.listing("", dir_entry("d"))
    transport.reply(RemoteOp.LISTSTATUS, "d", status_code=404)
    backend = make_backend(transport)

    with pytest.raises(NotFoundError):
        backend.list_objects()


def test_flat_listing_rejects_resume_markers() -> None:
    """A tree walk cannot resume from a continuation token or start-after key."""
    backend = make_backend(FakeTransport())

    with pytest.raises(NotSupportedError):
        backend.list_objects(continuation_token="a")
    with pytest.raises(NotSupportedError):
        backend.list_objects(start_after="a")


def test_listing_rejects_foreign_delimiter() -> None:
    """Only the hierarchical separator is accepted as delimiter."""
    with pytest.raises(NotSupportedError):
        make_backend(FakeTransport()).list_objects(prefix="d", delimiter="|")


def test_delimited_listing_skips_rows_up_to_start_after() -> None:
    """Rows at or before the marker are dropped from a delimited listing."""
    transport = FakeTransport()
    transport.listing("d/", file_entry("a"), file_entry("b"), dir_entry("c"))
    backend = make_backend(transport)

    result = backend.list_objects(prefix="d/", delimiter="/", start_after="d/a")

    assert _keys(result) == ["d/b"]
    assert _prefixes(result) == ["d/c/"]


def test_max_keys_does_not_truncate_listing() -> None:
    """The key budget is a hint; every row is still returned."""
    transport = FakeTransport()
    transport.listing("", file_entry("a"), file_entry("b"), file_entry("c"))
    backend = make_backend(transport)

    result = backend.list_objects(max_keys=1)

    assert _keys(result) == ["a", "b", "c"]
    assert result.truncated is False


def test_listing_under_bucket_reports_logical_keys() -> None:
    """Remote paths carry the root prefix but listed keys do not."""
    transport = FakeTransport()
    transport.listing("root", dir_entry("d"))
    transport.listing("root/d", file_entry("a"))
    backend = make_backend(transport, bucket="root")

    result = backend.list_objects()

    assert _keys(result) == ["d/", "d/a"]
