"""Extension checks and collision-free writes into the upload directory."""

from __future__ import annotations

import os
from typing import Iterable, Iterator

from fastapi import UploadFile

CHUNK_SIZE = 1 << 20  # 1 MB


class UploadError(Exception):
    """Base class for upload rejections raised by the storage helpers."""


class FileTooLarge(UploadError):
    def __init__(self, limit: int):
        super().__init__(f"payload exceeds {limit} bytes")
        self.limit = limit


def split_name(filename: str) -> tuple[str, str]:
    """Split a name into stem and extension at the last dot.

    One leading dot belongs to the stem, so ``.epub`` has no extension while
    ``..epub`` has ``epub``.
    """
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    lead = "." if base.startswith(".") else ""
    stem, dot, ext = base[len(lead):].rpartition(".")
    if not dot:
        return base, ""
    return lead + stem, ext


def extension_of(filename: str) -> str:
    return split_name(filename)[1]


def is_allowed_file_type(filename: str, allowed_extensions: Iterable[str]) -> bool:
    ext = extension_of(filename)
    if not ext:
        return False
    return ext.lower() in {a.strip().lower() for a in allowed_extensions}


def safe_filename(filename: str | None) -> str:
    """Keep only the last path component of a client-supplied name."""
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        return "unknown"
    return name


def candidate_names(filename: str) -> Iterator[str]:
    """Yield ``filename``, then ``<stem>_1.<ext>``, ``<stem>_2.<ext>``, ..."""
    stem, ext = split_name(filename)
    yield filename
    counter = 0
    while True:
        counter += 1
        yield f"{stem}_{counter}.{ext}" if ext else f"{stem}_{counter}"


async def read_limited(file: UploadFile, limit: int) -> bytes:
    """Read the whole upload, giving up as soon as it grows past ``limit``."""
    buf = bytearray()
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            raise FileTooLarge(limit)
    return bytes(buf)


def write_unique(upload_dir: str | os.PathLike, filename: str, data: bytes) -> str:
    """Write ``data`` under the first free candidate name and return that name.

    Each candidate is opened with exclusive create, so two writers racing on
    the same name never overwrite each other. Other OSErrors propagate.
    """
    for name in candidate_names(filename):
        try:
            fh = open(os.path.join(upload_dir, name), "xb")
        except FileExistsError:
            continue
        with fh:
            fh.write(data)
        return name
