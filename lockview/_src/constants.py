from enum import Enum


PIXI_MANIFEST = "pixi.toml"
PYPROJECT_MANIFEST = "pyproject.toml"
# pixi.toml wins when both live in the same directory
MANIFEST_FILE_NAMES = (PIXI_MANIFEST, PYPROJECT_MANIFEST)
LOCK_FILE_NAME = "pixi.lock"

DEFAULT_ENVIRONMENT = "default"
DEFAULT_FEATURE = "default"

ENVIRONMENT_ENV_VAR = "LOCKVIEW_ENVIRONMENT"
FROZEN_ENV_VAR = "LOCKVIEW_FROZEN"
LOCKED_ENV_VAR = "LOCKVIEW_LOCKED"
CACHE_DIR_ENV_VAR = "LOCKVIEW_CACHE_DIR"
UV_CACHE_DIR_ENV_VAR = "UV_CACHE_DIR"
PIXI_CACHE_DIR_ENV_VAR = "PIXI_CACHE_DIR"
RATTLER_CACHE_DIR_ENV_VAR = "RATTLER_CACHE_DIR"
# pixi hands uv `<rattler cache>/uv-cache`
PIXI_UV_CACHE_DIR = "uv-cache"
# uv keeps unpacked index wheels in `<uv cache>/wheels-v5/pypi/<name>/<wheel>`
UV_WHEELS_SUBDIR = ("wheels-v5", "pypi")

CONDA_ARCHIVE_EXTENSIONS = (".conda", ".tar.bz2")


class PackageKind(str, Enum):
    CONDA = "conda"
    PYPI = "pypi"


class SortBy(str, Enum):
    SIZE = "size"
    NAME = "name"
    KIND = "kind"


class LockFileUsage(str, Enum):
    # use the lock file as is, never check it against the manifest
    FROZEN = "frozen"
    # abort when the lock file is out of date
    LOCKED = "locked"
    # warn when the lock file is out of date
    UPDATE = "update"
