import logging
import os
from dataclasses import asdict, dataclass
from typing import List, Optional

from .config import CONTENT_PREFIX, MEDIA_EXTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str
    is_dir: bool
    mime_type: str

    def to_dict(self):
        return asdict(self)


def classify(file_name: str) -> Optional[str]:
    """Return ``"image"``, ``"video"`` or ``None`` for a file name.

    Only the extension is looked at, case-insensitively. A leading dot is not
    an extension, so ``.png`` on its own does not classify.
    """
    ext = os.path.splitext(file_name)[1].lower()
    if not ext:
        return None
    for kind, exts in MEDIA_EXTS.items():
        if ext in exts:
            return kind
    return None


def content_url(name: str) -> str:
    return f"{CONTENT_PREFIX}/{name}"


def list_media(root_directory) -> List[FileEntry]:
    """Scan one directory and return its media files sorted by name.

    Subdirectories are skipped, not descended into. Names are compared as
    plain strings (code point order), so ``B.JPG`` sorts before ``a.png``.
    An unreadable directory gives an empty list.
    """
    try:
        with os.scandir(root_directory) as it:
            entries = list(it)
    except OSError as e:
        logger.warning("Cannot read directory %s: %s", root_directory, e)
        return []

    files = []
    for entry in entries:
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue

        kind = classify(entry.name)
        if kind is None:
            continue

        files.append(FileEntry(
            name=entry.name,
            path=content_url(entry.name),
            is_dir=False,
            mime_type=kind,
        ))

    files.sort(key=lambda f: f.name)
    return files
