"""
Blob storage for proof videos.

Videos are written under MEDIA_ROOT/videos/<user_id>/ and served back
from MEDIA_URL. Uploads are copied in chunks so callers can report
progress as a percentage.
"""
import logging
import re
import time
from pathlib import Path
from typing import BinaryIO, Callable, Optional

import config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024
ALLOWED_EXTENSIONS = {"webm", "mp4", "mov", "mkv"}

ProgressCallback = Callable[[int], None]


class StorageError(Exception):
    """The blob could not be stored."""


def _safe(part: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]", "_", part)


def _extension(filename: Optional[str]) -> str:
    ext = (filename or "").rsplit(".", 1)[-1].lower() if filename and "." in filename else "webm"
    if ext not in ALLOWED_EXTENSIONS:
        raise StorageError(f"Unsupported video type: .{ext}")
    return ext


def upload_video(stream: BinaryIO, user_id: str, challenge_id: str, filename: Optional[str] = None,
                 size: Optional[int] = None, on_progress: Optional[ProgressCallback] = None,
                 root: Optional[str] = None) -> str:
    """
    Copy ``stream`` into storage and return the public URL.

    ``on_progress`` receives whole percentages (0-100). When ``size`` is
    unknown only 0 and 100 are reported.
    """
    ext = _extension(filename)
    root_dir = Path(root or config.MEDIA_ROOT)
    name = f"{_safe(challenge_id)}_{int(time.time() * 1000)}.{ext}"
    relative = Path("videos") / _safe(user_id) / name
    target = root_dir / relative

    if on_progress:
        on_progress(0)
    written = 0
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                written += len(chunk)
                if on_progress and size:
                    on_progress(min(int(written * 100 / size), 100))
    except OSError as e:
        logger.error("Video upload failed for challenge %s: %s", challenge_id, e)
        target.unlink(missing_ok=True)
        raise StorageError("Upload failed") from e

    if written == 0:
        target.unlink(missing_ok=True)
        raise StorageError("Empty video")

    if on_progress:
        on_progress(100)
    logger.info("Stored %d bytes of proof video for challenge %s", written, challenge_id)
    return f"{config.MEDIA_URL.rstrip('/')}/{relative.as_posix()}"
