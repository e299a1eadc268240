from __future__ import annotations

import logging
import os
import tempfile
from typing import BinaryIO, Optional

from httpsimple.error import FilesystemError

logger = logging.getLogger(__name__)


class AtomicFile:
    """Writable file that only becomes visible at its target path once it is
    committed.

    Data is written to a temporary file created in the same directory as the
    target, so that the final rename stays on one filesystem and replaces the
    target in a single step. Readers of the target path never observe a
    partially written file.

    AtomicFile is a context manager. Leaving the context without calling
    commit(), or because of an exception, deletes the temporary file:

        with AtomicFile(path) as f:
            for chunk in chunks:
                f.write(chunk)
            f.commit()

    Raises:
        FilesystemError: if the temporary file cannot be created.
    """

    __slots__ = ("path", "temp_path", "_file", "_done")

    def __init__(self, path: str | os.PathLike):
        self.path = os.fspath(path)
        directory, name = os.path.split(self.path)
        try:
            fd, self.temp_path = tempfile.mkstemp(
                prefix=f".{name}.", suffix=".part", dir=directory or os.curdir
            )
        except OSError as e:
            raise FilesystemError.from_oserror("open", self.path, e) from e

        self._file: Optional[BinaryIO] = os.fdopen(fd, "wb")
        self._done = False
        logger.debug("writing %s through %s", self.path, self.temp_path)

    def __enter__(self) -> AtomicFile:
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.discard()

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, chunk: bytes):
        if self._file is None:
            raise ValueError(f"write to closed file {self.temp_path}")
        try:
            self._file.write(chunk)
        except OSError as e:
            raise FilesystemError.from_oserror("write", self.temp_path, e) from e

    def commit(self):
        """Close the temporary file and rename it over the target path, which
        is replaced if it exists.

        Raises:
            FilesystemError: if closing or renaming fails. The temporary file
                is removed in both cases.
        """
        if self._done:
            raise ValueError(f"{self.path} was already committed or discarded")
        self._done = True
        try:
            self._close()
        except OSError as e:
            self._unlink()
            raise FilesystemError.from_oserror("close", self.temp_path, e) from e
        try:
            os.replace(self.temp_path, self.path)
        except OSError as e:
            self._unlink()
            raise FilesystemError.from_oserror(
                "rename", f"{self.temp_path} to {self.path}", e
            ) from e
        logger.debug("committed %s", self.path)

    def discard(self):
        """Close and delete the temporary file, leaving the target path
        untouched. Does nothing once the file was committed or discarded."""
        if self._done:
            return
        self._done = True
        try:
            self._close()
        finally:
            self._unlink()
        logger.debug("discarded %s", self.temp_path)

    def _close(self):
        f, self._file = self._file, None
        if f is not None:
            f.close()

    def _unlink(self):
        try:
            os.unlink(self.temp_path)
        except FileNotFoundError:
            pass

