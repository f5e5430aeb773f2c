"""Document file helpers: content types, loading and directory listing."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".bmp": "image/bmp",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str | Path) -> str:
    """Return the MIME type for a document based on its extension.

    Unknown extensions map to ``application/octet-stream``.
    """
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def read_document(path: str | Path) -> tuple[bytes, str]:
    """Read a document from disk.

    Args:
        path: Path to the document.

    Returns:
        Tuple of (content bytes, content type).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Document not found: {path}")

    data = path.read_bytes()
    if not data:
        raise ValueError(f"Document is empty: {path}")

    logger.debug(f"Read {len(data)} bytes from {path.name}")
    return data, content_type_for(path)


def list_supported_documents(
    directory: str | Path, extensions: list[str] | tuple[str, ...] | None = None
) -> list[Path]:
    """List the supported documents directly inside a directory.

    Subdirectories are not searched.

    Args:
        directory: Directory to scan.
        extensions: Extensions to accept (case-insensitive). Defaults to
            every extension with a known content type.

    Returns:
        Matching files sorted by name.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")

    accepted = {ext.lower() for ext in (extensions or CONTENT_TYPES)}
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in accepted),
        key=lambda p: p.name,
    )


def operation_id_from_handle(handle: str | None) -> str | None:
    """Derive a short operation id from an operation handle.

    Takes the last path segment of the handle, drops any query string and
    cuts at the first underscore::

        .../analyzerResults/abc_123?api-version=... -> "abc"

    Returns:
        The operation id, or None if nothing usable remains.
    """
    if not handle:
        return None
    segment = handle.rstrip("/").rsplit("/", 1)[-1]
    segment = segment.split("?", 1)[0].split("_", 1)[0]
    return segment or None
