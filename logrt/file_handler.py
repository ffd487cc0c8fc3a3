"""Recursive extraction of text content from files and nested archives."""

from __future__ import annotations

import bz2
import enum
import io
import logging
import lzma
import os
import tarfile
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]"]
Notify = Callable[[str], object]

MAX_DEPTH = 10
_HEAD_SIZE = 300  # enough to see the "ustar" marker at offset 257

_EMPTY_TEXT_SUFFIXES = (".txt", ".md", ".log")
_TEXT_SUFFIXES = (".txt", ".md", ".rs", ".toml", ".json", ".xml", ".log")

_HTML_SIGNATURES = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)


class ExtractionError(Exception):
    """Raised when a file or archive cannot be read or unpacked."""


class FileType(enum.Enum):
    SEVEN_Z = "7z"
    XZ = "xz"
    BZIP2 = "bz2"
    GZIP = "gz"
    TAR = "tar"
    ZIP = "zip"
    PLAIN_TEXT = "text"
    UNKNOWN = "unknown"


def _is_bytes(source: Source) -> bool:
    return isinstance(source, (bytes, bytearray, memoryview))


def _read_head(source: Source) -> bytes:
    if _is_bytes(source):
        return bytes(source[:_HEAD_SIZE])
    path = Path(source)
    try:
        with path.open("rb") as handle:
            return handle.read(_HEAD_SIZE)
    except OSError as exc:
        raise ExtractionError(
            f"Failed to open file for type identification: {path}"
        ) from exc


def _read_all(source: Source) -> bytes:
    if _is_bytes(source):
        return bytes(source)
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ExtractionError(
            f"Failed to read file content from path: {path}"
        ) from exc


def _looks_like_html(head: bytes) -> bool:
    body = head.lstrip(b" \t\r\n\x0c")
    upper = body.upper()
    for signature in _HTML_SIGNATURES:
        if upper.startswith(signature):
            following = body[len(signature):len(signature) + 1]
            if following in (b" ", b">"):
                return True
    return False


def _sniff(head: bytes) -> str | None:
    """Guess a format from magic bytes, returning a file extension."""
    if head.startswith(b"\x37\x7a\xbc\xaf\x27\x1c"):
        return "7z"
    if head.startswith(b"\xfd\x37\x7a\x58\x5a\x00"):
        return "xz"
    if head.startswith(b"\x42\x5a\x68"):
        return "bz2"
    if head.startswith(b"\x1f\x8b\x08"):
        return "gz"
    if (
        len(head) >= 4
        and head[0] == 0x50
        and head[1] == 0x4B
        and head[2] in (3, 5, 7)
        and head[3] in (4, 6, 8)
    ):
        return "zip"
    if len(head) > 261 and head[257:262] == b"ustar":
        return "tar"
    if head.lstrip(b" \t\r\n\x0c").startswith(b"<?xml "):
        return "xml"
    if _looks_like_html(head):
        return "html"
    return None


_SNIFFED_TYPES = {
    "7z": FileType.SEVEN_Z,
    "xz": FileType.XZ,
    "bz2": FileType.BZIP2,
    "gz": FileType.GZIP,
    "tar": FileType.TAR,
    "zip": FileType.ZIP,
    "xml": FileType.PLAIN_TEXT,
    "html": FileType.PLAIN_TEXT,
}


def identify_file_type(source: Source, item_name: str) -> FileType:
    """Work out the type of an item from its leading bytes, then its name."""
    head = _read_head(source)

    if not head:
        if item_name.endswith(_EMPTY_TEXT_SUFFIXES):
            return FileType.PLAIN_TEXT
        return FileType.UNKNOWN

    sniffed = _sniff(head)
    if sniffed in _SNIFFED_TYPES:
        return _SNIFFED_TYPES[sniffed]

    name = item_name.lower()
    if name.endswith(".7z"):
        return FileType.SEVEN_Z
    if name.endswith(".xz"):
        return FileType.XZ
    if name.endswith(".bz2"):
        return FileType.BZIP2
    if name.endswith((".gz", ".tgz")):
        return FileType.GZIP
    if name.endswith(".tar"):
        return FileType.TAR
    if name.endswith(".zip"):
        return FileType.ZIP
    if name.endswith(_TEXT_SUFFIXES):
        return FileType.PLAIN_TEXT
    return FileType.UNKNOWN


def _strip_suffix(name: str, suffix: str) -> str:
    return name[: -len(suffix)] if name.endswith(suffix) else name


def _handle_sevenz(data, name, contents, depth, notify) -> None:
    raise ExtractionError(f"7z archives cannot be unpacked: {name}")


def _handle_zip(data, name, contents, depth, notify) -> None:
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as exc:
        raise ExtractionError(f"Failed to open ZIP archive: {name}") from exc
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                payload = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError, ValueError,
                    NotImplementedError, zlib.error, EOFError) as exc:
                raise ExtractionError(
                    f"Failed to read content of {info.filename} from ZIP: {name}"
                ) from exc
            process_item(payload, info.filename, contents, depth + 1, notify)


def _handle_tar(data, name, contents, depth, notify) -> None:
    try:
        archive = tarfile.open(fileobj=io.BytesIO(data), mode="r:")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ExtractionError(f"Failed to iterate TAR entries: {name}") from exc
    with archive:
        try:
            members = archive.getmembers()
        except (tarfile.TarError, OSError, EOFError) as exc:
            raise ExtractionError(f"Invalid entry in TAR: {name}") from exc
        for member in members:
            if not member.isreg():
                continue
            try:
                handle = archive.extractfile(member)
                payload = handle.read() if handle is not None else b""
            except (tarfile.TarError, OSError, EOFError) as exc:
                raise ExtractionError(
                    f"Failed to read content of {member.name} from TAR: {name}"
                ) from exc
            process_item(payload, member.name, contents, depth + 1, notify)


def _gunzip(data: bytes) -> bytes:
    decoder = zlib.decompressobj(16 + zlib.MAX_WBITS)
    out = decoder.decompress(data) + decoder.flush()
    if not decoder.eof:
        raise EOFError("gzip stream ended unexpectedly")
    return out


def _gzip_inner_name(name: str) -> str:
    stripped = _strip_suffix(name, ".gz")
    stripped = _strip_suffix(stripped, ".tgz")
    if stripped.endswith(".tar"):
        return stripped
    if "." not in stripped and ".tar.gz" in name.lower():
        return f"{stripped}.tar"
    return stripped


def _handle_gzip(data, name, contents, depth, notify) -> None:
    try:
        payload = _gunzip(data)
    except (zlib.error, EOFError) as exc:
        raise ExtractionError(f"Failed to decompress GZIP stream: {name}") from exc
    process_item(payload, _gzip_inner_name(name), contents, depth + 1, notify)


def _handle_xz(data, name, contents, depth, notify) -> None:
    try:
        payload = lzma.decompress(data, format=lzma.FORMAT_XZ)
    except (lzma.LZMAError, EOFError) as exc:
        raise ExtractionError(f"Failed to decompress XZ stream: {name}") from exc
    process_item(payload, _strip_suffix(name, ".xz"), contents, depth + 1, notify)


def _handle_bzip2(data, name, contents, depth, notify) -> None:
    try:
        payload = bz2.decompress(data)
    except (OSError, ValueError, EOFError) as exc:
        raise ExtractionError(f"Failed to decompress BZIP2 stream: {name}") from exc
    process_item(payload, _strip_suffix(name, ".bz2"), contents, depth + 1, notify)


_HANDLERS = {
    FileType.SEVEN_Z: ("7z", _handle_sevenz),
    FileType.ZIP: ("zip", _handle_zip),
    FileType.TAR: ("tar", _handle_tar),
    FileType.GZIP: ("gzip", _handle_gzip),
    FileType.XZ: ("xz", _handle_xz),
    FileType.BZIP2: ("bzip2", _handle_bzip2),
}


def _accept_unknown(data: bytes) -> str | None:
    text = data.decode("utf-8", errors="replace")
    if "\ufffd" not in text or len(text.encode("utf-8")) < 256:
        return text
    return None


def process_item(
    source: Source,
    item_name: str,
    contents: list[str] | None = None,
    depth: int = 0,
    notify: Notify | None = None,
) -> list[str]:
    """Collect the text of an item, unpacking archives recursively.

    Text found is appended to ``contents`` (a new list if none is given),
    which is also returned. ``notify`` is called with each item's name.
    """
    if contents is None:
        contents = []
    if depth > MAX_DEPTH:
        logger.warning("Max recursion depth reached for item: %s", item_name)
        return contents

    try:
        file_type = identify_file_type(source, item_name)
    except ExtractionError as exc:
        raise ExtractionError(
            f"Failed to identify file type for {item_name}"
        ) from exc

    if notify is not None:
        notify(item_name)

    data = _read_all(source)

    if file_type is FileType.PLAIN_TEXT:
        contents.append(data.decode("utf-8", errors="replace"))
    elif file_type is FileType.UNKNOWN:
        text = _accept_unknown(data)
        if text is not None:
            contents.append(text)
    else:
        label, handler = _HANDLERS[file_type]
        try:
            handler(data, item_name, contents, depth + 1, notify)
        except ExtractionError as exc:
            raise ExtractionError(f"Error handling {label}: {item_name}") from exc
    return contents