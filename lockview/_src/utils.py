import logging
import re
import tomllib
from pathlib import Path

from packaging.utils import canonicalize_name

from lockview._src.constants import MANIFEST_FILE_NAMES, PYPROJECT_MANIFEST
from lockview._src.exceptions import PackageSizeError


logger = logging.getLogger(__name__)

_URL_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def is_url(s: str) -> bool:
    """True if the string starts with a url scheme, eg. `https://` or `git+ssh://`"""
    return _URL_SCHEME.match(s) is not None


def normalize_conda_name(name: str) -> str:
    return name.strip().lower()


def normalize_pypi_name(name: str) -> str:
    return canonicalize_name(name)


def get_dir_size(path: str | Path) -> int:
    """Compute the size in bytes of a file or of everything below a directory.

    Symlinks found while walking a directory are not followed and count
    for nothing, so a link cycle can't make the walk run forever and a
    linked tree is never counted twice. The path passed in is resolved
    once, so pointing at a symlinked directory still works.

    Parameters
    ----------
    path : str | Path
        File or directory to measure

    Returns
    -------
    int
        Total size in bytes

    Raises
    ------
    PackageSizeError
        If an entry can't be stat'ed or a directory can't be listed
    """
    path = Path(path)
    try:
        if path.is_symlink():
            path = path.resolve(strict=True)
        if path.is_dir():
            return _walk_dir_size(path)
        return path.stat().st_size
    except OSError as err:
        raise PackageSizeError(path, err) from err


def _walk_dir_size(directory: Path) -> int:
    result = 0
    for entry in directory.iterdir():
        if entry.is_symlink():
            logger.debug("not following symlink %s", entry)
            continue
        if entry.is_dir():
            result += _walk_dir_size(entry)
        else:
            result += entry.stat().st_size
    return result


def get_project_root(directory: str | Path, root_paths: tuple[str, ...] = MANIFEST_FILE_NAMES) -> Path | None:
    """Identify the workspace root directory: the first one, walking up
    from `directory`, that contains one of `root_paths`.

    A `pyproject.toml` only counts when it has a `[tool.pixi]` table.

    Parameters
    ----------
    directory : str | Path
        Directory which is a child of the root directory
    root_paths : tuple[str, ...]
        File names which identify the root of the workspace

    Returns
    -------
    Path | None
        Path to the workspace root, or None if a root cannot be found
    """
    directory = Path(directory).resolve()

    for candidate in [directory, *directory.parents]:
        for name in root_paths:
            manifest = candidate / name
            if not manifest.is_file():
                continue
            if name == PYPROJECT_MANIFEST and not _has_pixi_table(manifest):
                continue
            return candidate

    return None


def _has_pixi_table(pyproject: Path) -> bool:
    with open(pyproject, "rb") as file:
        return "pixi" in tomllib.load(file).get("tool", {})
