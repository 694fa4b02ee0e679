import os
import stat
import tempfile
from pathlib import Path

from errors import RelocationError


def _target_mode(destination: Path) -> int:
    """Mode the replaced file should carry: the old file's, else what open() would give."""
    try:
        return stat.S_IMODE(os.stat(destination).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def atomic_write(destination: Path, data: bytes) -> None:
    """Replace destination with data; readers see the old file or the new one, never a mix."""
    directory = destination.parent
    if not directory.is_dir():
        raise RelocationError(f"Destination directory does not exist: {directory}")

    try:
        fd, tmp = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=str(directory))
    except OSError as e:
        raise RelocationError(f"Destination is not writable: {directory} ({e.strerror})")

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600
        os.chmod(tmp, _target_mode(destination))
        os.replace(tmp, destination)
    except OSError as e:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise RelocationError(f"Could not replace {destination}: {e}")


def relocate_artifact(source: Path, destination: Path) -> Path:
    """
    Move the generated file onto the canonical location.

    The workspace usually lives on another filesystem (a temp dir), so the
    content goes through a temp file next to the destination and an
    os.replace, then the source is removed.
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_file():
        raise RelocationError(f"Generated artifact is missing: {source}")
    if destination.is_dir():
        raise RelocationError(f"Destination is a directory: {destination}")

    atomic_write(destination, source.read_bytes())
    source.unlink()
    return destination
