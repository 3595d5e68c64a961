from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def stored_upload(upload: BinaryIO, directory: str, suffix: Optional[str] = None) -> Iterator[str]:
    """
    Copy an uploaded file object to a temporary file and yield its path.

    The file is removed when the block exits, however it exits.
    """
    os.makedirs(directory, exist_ok=True)
    fd, path = tempfile.mkstemp(dir=directory, suffix=suffix or "")
    try:
        with os.fdopen(fd, "wb") as f:
            shutil.copyfileobj(upload, f)
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning("Upload %s was already removed", path)
