"""Shared exceptions for service layer operations."""


class BookmarkImportError(Exception):
    """
    Base class for errors that abort a whole import.

    Anything raised as a BookmarkImportError means nothing from the batch was
    committed.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ManifestDecodeError(BookmarkImportError):
    """Raised when the manifest is not valid JSON or doesn't match the export schema."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid manifest: {message}")


class ImportFailedError(BookmarkImportError):
    """Raised when persisting a record fails; the whole batch has been rolled back."""

    def __init__(self, record_index: int, record_id: str, reason: str) -> None:
        self.record_index = record_index
        self.record_id = record_id
        super().__init__(
            f"Import failed at record {record_index} (id={record_id}): {reason}",
        )


class MediaExtractionError(Exception):
    """
    Base class for per-asset failures.

    The importer logs these and keeps going; the media row is stored without a
    payload.
    """

    def __init__(self, file_name: str, message: str) -> None:
        self.file_name = file_name
        super().__init__(message)


class ArchiveEntryNotFoundError(MediaExtractionError):
    """Raised when the archive has no entry with the requested name."""

    def __init__(self, file_name: str) -> None:
        super().__init__(file_name, f"File {file_name} not found in zip archive")


class ArchiveReadError(MediaExtractionError):
    """Raised when an archive entry exists but cannot be decompressed."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(file_name, f"Failed to read {file_name} from zip archive: {reason}")


class ArchiveUnavailableError(MediaExtractionError):
    """Raised for every lookup when the archive itself could not be opened."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(file_name, f"Cannot look up {file_name}, zip archive unusable: {reason}")


class InvalidMediaReferenceError(ValueError):
    """Raised when an archive filename cannot be derived for a media item."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class BookmarkNotFoundError(Exception):
    """Raised when a bookmark is not found."""

    def __init__(self, bookmark_id: str) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark '{bookmark_id}' not found")
