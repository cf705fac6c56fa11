"""Core I/O utilities.

Safe file access patterns used for every artifact the compiler writes:
- Temp files written with fsync under an advisory lock
- Staged multi-file writes (all files replaced, or none)
"""
from __future__ import annotations

import errno
import fcntl
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, List, Mapping, Optional, TextIO, Tuple, Union

PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: Path, create: bool = True) -> Path:
    """Ensure directory exists.

    Args:
        path: Directory path to check/create
        create: If True, create directory if missing; if False, raise if missing

    Returns:
        Path: The directory path (guaranteed to exist if create=True)

    Raises:
        FileNotFoundError: If create=False and directory doesn't exist
        NotADirectoryError: If path exists but is not a directory
    """
    path = Path(path)

    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path}")
        return path

    if create:
        path.mkdir(parents=True, exist_ok=True)
        return path
    raise FileNotFoundError(f"Directory does not exist: {path}")


def _write_temp(path: Path, write_fn: Callable[[TextIO], None], encoding: str) -> Path:
    """Write a fsync'd temp file next to ``path`` and return its location."""
    with tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as f:
        tmp_path = Path(f.name)
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except BaseException:
            f.close()
            _discard(tmp_path)
            raise
    return tmp_path


def _discard(tmp_path: Optional[Path]) -> None:
    if tmp_path is None or not tmp_path.exists():
        return
    try:
        tmp_path.unlink()
    except OSError as exc:
        logger.warning("Could not remove temp file %s: %s", tmp_path, exc)


def _move_aside(target: Path) -> Optional[Path]:
    """Rename an existing ``target`` to a backup beside it and return the backup."""
    if target.is_dir():
        raise IsADirectoryError(errno.EISDIR, "Target is a directory", str(target))
    if not os.path.lexists(target):
        return None
    fd, name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".bak")
    os.close(fd)
    backup = Path(name)
    os.replace(str(target), str(backup))
    return backup


def _roll_back(replaced: List[Tuple[Path, Optional[Path]]]) -> None:
    """Put every moved-aside target back, newest first."""
    for target, backup in reversed(replaced):
        try:
            if backup is not None:
                os.replace(str(backup), str(target))
            elif os.path.lexists(target):
                target.unlink()
        except OSError as exc:
            logger.error("Could not restore %s from %s: %s", target, backup, exc)


def atomic_write_many(contents: Mapping[PathLike, str], *, encoding: str = "utf-8") -> List[Path]:
    """Write several text files so that readers never see a partial set.

    Every file is first staged as a fsync'd temp file beside its target.
    Targets are only replaced once all files are staged; if staging fails,
    every temp file is removed and no target is touched. During the commit
    each existing target is moved to a backup before its replacement lands,
    and a failure on any target restores every earlier one.

    Args:
        contents: Mapping of target path to text content

    Returns:
        Target paths in the order they were given
    """
    staged: List[Tuple[Path, Path]] = []
    try:
        for raw_path, text in contents.items():
            target = Path(raw_path)
            ensure_parent_dir(target)

            def _writer(f: TextIO, _text: str = text) -> None:
                f.write(_text)

            staged.append((target, _write_temp(target, _writer, encoding)))
    except BaseException:
        for _, tmp in staged:
            _discard(tmp)
        raise

    replaced: List[Tuple[Path, Optional[Path]]] = []
    try:
        for target, tmp in staged:
            replaced.append((target, _move_aside(target)))
            os.replace(str(tmp), str(target))
    except BaseException:
        _roll_back(replaced)
        raise
    finally:
        for _, tmp in staged:
            _discard(tmp)

    for _, backup in replaced:
        _discard(backup)
    return [target for target, _ in staged]


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write_many",
]
