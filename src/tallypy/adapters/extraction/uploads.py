"""Load uploaded documents from disk, expanding ZIP archives."""

from __future__ import annotations

import io
import mimetypes
import zipfile
from logging import getLogger
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Final

from tallypy.domain.model import UploadedFile

from .spreadsheet import SPREADSHEET_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

log = getLogger(__name__)

SUPPORTED_EXTENSIONS: Final[frozenset[str]] = frozenset({"pdf"}) | SPREADSHEET_EXTENSIONS
ARCHIVE_EXTENSIONS: Final[frozenset[str]] = frozenset({"zip"})


def _upload(name: str, content: bytes) -> UploadedFile:
    mime_type, _ = mimetypes.guess_type(name)
    return UploadedFile(name=name, content=content, mime_type=mime_type)


def load_uploads(paths: Iterable[Path]) -> list[UploadedFile]:
    return expand_archives(_upload(path.name, path.read_bytes()) for path in paths)


def expand_archives(files: Iterable[UploadedFile]) -> list[UploadedFile]:
    """Replace every ZIP upload by the supported documents it contains."""

    expanded: list[UploadedFile] = []
    for file in files:
        if file.extension in ARCHIVE_EXTENSIONS:
            expanded.extend(_archive_entries(file))
        else:
            expanded.append(file)
    return expanded


def _archive_entries(file: UploadedFile) -> list[UploadedFile]:
    entries: list[UploadedFile] = []
    try:
        with zipfile.ZipFile(io.BytesIO(file.content)) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                path = PurePosixPath(info.filename)
                if "__MACOSX" in path.parts or path.name.startswith("._"):
                    continue
                if path.suffix.lower().lstrip(".") not in SUPPORTED_EXTENSIONS:
                    log.debug("Ignoring %s in %s", info.filename, file.name)
                    continue
                entries.append(_upload(path.name, archive.read(info)))
    except zipfile.BadZipFile:
        log.error("Skipping %s: not a readable ZIP archive", file.name)
        return []
    log.info("Expanded %s into %d file(s)", file.name, len(entries))
    return entries
