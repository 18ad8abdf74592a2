"""
File operations — read, atomic write, and the single-generation backup
sibling (``<path>.backup``) that brackets every mutation.
"""

import os
import shutil

DEFAULT_BACKUP_SUFFIX = ".backup"


def read_file(path: str) -> str:
    """Return the text of *path* with its line endings untouched."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def file_exists(path: str) -> bool:
    return os.path.exists(path)


def write_file(path: str, content: str) -> None:
    """Write *content* to *path* durably.

    Parent directories are created.  The data goes to a temp sibling that
    is flushed and fsynced, then moved over the target, so the target is
    either the old or the new content, never a partial write.
    """
    abs_path = os.path.abspath(path)
    directory = os.path.dirname(abs_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    tmp_path = abs_path + ".llm_patcher_tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        # os.replace overwrites an existing target on every platform
        os.replace(tmp_path, abs_path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def backup_path(path: str, suffix: str = DEFAULT_BACKUP_SUFFIX) -> str:
    return path + suffix


def backup_file(path: str, suffix: str = DEFAULT_BACKUP_SUFFIX) -> str:
    """Copy *path* to its backup sibling, overwriting any older backup.

    Returns the backup path.  Raises ``FileNotFoundError`` if *path* does
    not exist.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"file {path} does not exist")
    target = backup_path(path, suffix)
    shutil.copyfile(path, target)
    return target


def restore_backup(path: str, suffix: str = DEFAULT_BACKUP_SUFFIX) -> None:
    """Copy the backup sibling back over *path*."""
    source = backup_path(path, suffix)
    if not os.path.isfile(source):
        raise FileNotFoundError(f"backup file {source} does not exist")
    shutil.copyfile(source, path)


def create_file_with_content(path: str, content: str) -> None:
    """Create a new file; refuses to overwrite an existing one."""
    if file_exists(path):
        raise FileExistsError(f"file {path} already exists")
    write_file(path, content)
