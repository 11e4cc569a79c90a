"""Lookup of media payloads inside the export ZIP archive."""
import io
import logging
import zipfile
from types import TracebackType
from typing import BinaryIO, Self

from services.exceptions import (
    ArchiveEntryNotFoundError,
    ArchiveReadError,
    ArchiveUnavailableError,
)

logger = logging.getLogger(__name__)


class MediaArchive:
    """
    A ZIP archive opened once and queried by exact entry name.

    The central directory is read a single time when the archive is opened, so
    looking up many media items costs one seek and one decompression each rather
    than a re-read of the upload per item.

    An archive that cannot be opened at all does not raise here: every
    ``extract()`` then fails with ArchiveUnavailableError, which the importer
    treats like any other missing asset.
    """

    def __init__(self, source: bytes | BinaryIO) -> None:
        """
        Open the archive.

        Args:
            source: The archive bytes, or a seekable binary file positioned
                anywhere (e.g. an upload's spooled temporary file).
        """
        self._zip: zipfile.ZipFile | None = None
        self._open_error: str | None = None

        fileobj = io.BytesIO(source) if isinstance(source, bytes | bytearray) else source
        try:
            fileobj.seek(0)
            self._zip = zipfile.ZipFile(fileobj)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            self._open_error = str(e) or e.__class__.__name__
            logger.warning("Could not open media archive: %s", self._open_error)
        else:
            logger.debug("Opened media archive with %d entries", len(self._zip.namelist()))

    @property
    def is_available(self) -> bool:
        """Whether the archive was opened successfully."""
        return self._zip is not None

    def names(self) -> list[str]:
        """List entry names (empty if the archive is unavailable)."""
        if self._zip is None:
            return []
        return self._zip.namelist()

    def extract(self, file_name: str) -> bytes:
        """
        Return the decompressed bytes of the entry named exactly ``file_name``.

        Raises:
            ArchiveUnavailableError: If the archive could not be opened.
            ArchiveEntryNotFoundError: If there is no such entry.
            ArchiveReadError: If the entry is corrupt or can't be decompressed.
        """
        if self._zip is None:
            raise ArchiveUnavailableError(file_name, self._open_error or "not open")
        try:
            info = self._zip.getinfo(file_name)
        except KeyError as e:
            raise ArchiveEntryNotFoundError(file_name) from e
        if info.is_dir():
            raise ArchiveEntryNotFoundError(file_name)
        try:
            return self._zip.read(info)
        except (zipfile.BadZipFile, OSError, NotImplementedError, RuntimeError) as e:
            # BadZipFile covers CRC mismatches; NotImplementedError unsupported
            # compression; RuntimeError encrypted entries.
            raise ArchiveReadError(file_name, str(e)) from e

    def close(self) -> None:
        """Release the underlying ZipFile."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
