"""FUSE host adapter - mounts the calendar namespace with fusepy."""

import errno
import logging
import os
import stat
import time
from contextlib import contextmanager

from fuse import FUSE, FuseOSError, LoggingMixIn, Operations

from calfs.errors import NotDirectoryError, NotFoundError, ReadOnlyError
from calfs.namespace import DayNode, NamespaceEngine, NodeKind
from calfs.ports.calendar_source import SourceUnavailableError

logger = logging.getLogger(__name__)

DIR_MODE = stat.S_IFDIR | 0o555
FILE_MODE = stat.S_IFREG | 0o444


@contextmanager
def _translate_errors(path: str):
    """Turn engine and source failures into errno-carrying FuseOSError."""
    try:
        yield
    except NotDirectoryError:
        raise FuseOSError(errno.ENOTDIR)
    except NotFoundError:
        raise FuseOSError(errno.ENOENT)
    except ReadOnlyError:
        raise FuseOSError(errno.EROFS)
    except SourceUnavailableError as e:
        logger.warning(f"Calendar source failed for {path}: {e}")
        raise FuseOSError(errno.EIO)


class CalendarOperations(LoggingMixIn, Operations):
    """
    Path-based FUSE operations over a NamespaceEngine.

    Everything not defined here falls back to fusepy's defaults, which refuse
    writes. Handles are reported as st_ino, so mount with use_ino.
    """

    def __init__(self, engine: NamespaceEngine):
        self.engine = engine
        self.mounted_at = time.time()

    def _attrs(self, node) -> dict:
        if node.kind is NodeKind.DIRECTORY:
            attrs = {"st_mode": DIR_MODE, "st_nlink": 2, "st_size": 0}
        else:
            attrs = {"st_mode": FILE_MODE, "st_nlink": 1, "st_size": len(node.content())}

        times = node.timestamps()
        if times is None:
            mtime = atime = ctime = self.mounted_at
        else:
            mtime, atime, ctime = times.mtime, times.atime, times.ctime

        attrs.update(
            st_ino=node.handle,
            st_uid=os.getuid(),
            st_gid=os.getgid(),
            st_mtime=mtime,
            st_atime=atime,
            st_ctime=ctime,
        )
        return attrs

    def getattr(self, path, fh=None):
        with _translate_errors(path):
            return self._attrs(self.engine.lookup(path))

    def readdir(self, path, fh):
        with _translate_errors(path):
            entries = self.engine.list(path)

        yield "."
        yield ".."
        for entry in entries:
            mode = DIR_MODE if entry.kind is NodeKind.DIRECTORY else FILE_MODE
            yield entry.name, {"st_ino": entry.handle, "st_mode": mode}, 0

    def open(self, path, fi):
        write = bool(fi.flags & (os.O_WRONLY | os.O_RDWR))
        with _translate_errors(path):
            node = self.engine.lookup(path)
            if not isinstance(node, DayNode):
                raise FuseOSError(errno.EISDIR)
            handle = node.open(write=write)
        # Entries may change between reads, so the kernel must not cache pages
        fi.direct_io = handle.direct_io
        return 0

    def read(self, path, size, offset, fi):
        with _translate_errors(path):
            node = self.engine.lookup(path)
            if not isinstance(node, DayNode):
                raise FuseOSError(errno.EISDIR)
            return node.read(offset, size)


def mount(engine: NamespaceEngine, mountpoint: str, debug: bool = False) -> None:
    """Mount the namespace and block until it is unmounted."""
    logger.info(f"Mounting on {mountpoint}")
    FUSE(
        CalendarOperations(engine),
        mountpoint,
        foreground=True,
        ro=True,
        use_ino=True,
        raw_fi=True,
        fsname="calfs",
        debug=debug,
    )
    logger.info(f"Unmounted {mountpoint}")
