"""Tests for MediaArchive lookups."""
import io
import zipfile

import pytest

from services.exceptions import (
    ArchiveEntryNotFoundError,
    ArchiveReadError,
    ArchiveUnavailableError,
    MediaExtractionError,
)
from services.media_archive import MediaArchive
from tests.factories import make_zip


def test__extract__returns_entry_bytes() -> None:
    archive = MediaArchive(make_zip({"a.jpg": b"\xff\xd8jpeg", "b.mp4": b"video"}))
    assert archive.is_available
    assert archive.extract("a.jpg") == b"\xff\xd8jpeg"
    assert archive.extract("b.mp4") == b"video"


def test__extract__accepts_file_object_at_any_position() -> None:
    """Upload temp files may already have been read; the archive rewinds them."""
    fileobj = io.BytesIO(make_zip({"a.jpg": b"data"}))
    fileobj.seek(0, io.SEEK_END)
    archive = MediaArchive(fileobj)
    assert archive.extract("a.jpg") == b"data"


def test__extract__empty_entry() -> None:
    """A zero-length entry is a valid (empty) payload."""
    archive = MediaArchive(make_zip({"empty.jpg": b""}))
    assert archive.extract("empty.jpg") == b""


def test__extract__match_is_exact() -> None:
    """Lookups are by exact name: no case folding and no directory search."""
    archive = MediaArchive(make_zip({"media/a.jpg": b"nested", "B.jpg": b"upper"}))
    with pytest.raises(ArchiveEntryNotFoundError):
        archive.extract("a.jpg")
    with pytest.raises(ArchiveEntryNotFoundError):
        archive.extract("b.jpg")
    assert archive.extract("media/a.jpg") == b"nested"


def test__extract__missing_entry() -> None:
    archive = MediaArchive(make_zip({"a.jpg": b"data"}))
    with pytest.raises(ArchiveEntryNotFoundError) as exc_info:
        archive.extract("missing.jpg")
    assert exc_info.value.file_name == "missing.jpg"
    assert "not found" in str(exc_info.value)


def test__extract__directory_entry_is_not_a_payload() -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("media/", b"")
    archive = MediaArchive(buffer.getvalue())
    with pytest.raises(ArchiveEntryNotFoundError):
        archive.extract("media/")


def test__extract__corrupt_entry_raises_read_error() -> None:
    """A CRC mismatch surfaces as ArchiveReadError."""
    content = b"A" * 64
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_STORED) as zf:
        zf.writestr("a.jpg", content)
    raw = bytearray(buffer.getvalue())
    # Stored entries hold the payload verbatim; altering it breaks the CRC
    raw[raw.index(content)] = ord("B")
    archive = MediaArchive(bytes(raw))
    with pytest.raises(ArchiveReadError):
        archive.extract("a.jpg")


def test__not_a_zip__every_lookup_fails_softly() -> None:
    """An unreadable archive doesn't raise on open; each lookup fails instead."""
    archive = MediaArchive(b"this is not a zip file")
    assert not archive.is_available
    assert archive.names() == []
    with pytest.raises(ArchiveUnavailableError) as exc_info:
        archive.extract("a.jpg")
    assert isinstance(exc_info.value, MediaExtractionError)


def test__empty_upload__is_unavailable() -> None:
    archive = MediaArchive(b"")
    assert not archive.is_available


def test__names__lists_entries() -> None:
    archive = MediaArchive(make_zip({"a.jpg": b"1", "b.jpg": b"2"}))
    assert sorted(archive.names()) == ["a.jpg", "b.jpg"]


def test__context_manager__closes() -> None:
    with MediaArchive(make_zip({"a.jpg": b"1"})) as archive:
        assert archive.is_available
    assert not archive.is_available
    with pytest.raises(ArchiveUnavailableError):
        archive.extract("a.jpg")
