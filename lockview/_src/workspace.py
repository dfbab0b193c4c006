import logging
import os
from pathlib import Path
from typing import Optional

import platformdirs
from rattler import Platform

from lockview._src.constants import (
    CACHE_DIR_ENV_VAR,
    DEFAULT_ENVIRONMENT,
    ENVIRONMENT_ENV_VAR,
    LOCK_FILE_NAME,
    PIXI_CACHE_DIR_ENV_VAR,
    PIXI_UV_CACHE_DIR,
    RATTLER_CACHE_DIR_ENV_VAR,
    UV_CACHE_DIR_ENV_VAR,
    UV_WHEELS_SUBDIR,
)
from lockview._src.exceptions import ManifestNotFound
from lockview._src.lock import LockFile
from lockview._src.manifest.manifest import Manifest
from lockview._src.models.environment import EnvironmentSpec
from lockview._src.utils import get_project_root


logger = logging.getLogger(__name__)


class Workspace():
    @classmethod
    def locate(cls, start: Optional[str | Path] = None):
        """Find the workspace that `start` belongs to.

        `start` is a manifest file or any directory inside the
        workspace, it defaults to the current directory.
        """
        start = Path(start) if start is not None else Path.cwd()
        if start.is_file():
            return cls(root=start.parent)

        root = get_project_root(start)
        if root is None:
            raise ManifestNotFound(start)
        return cls(root=root)

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.manifest = Manifest(str(self.root))
        self.lock_path = self.root / LOCK_FILE_NAME
        self._lock_file = None
        logger.debug("using workspace manifest %s", self.manifest.path)

    def lock_file(self) -> LockFile:
        if self._lock_file is None:
            self._lock_file = LockFile.from_path(self.lock_path)
        return self._lock_file

    def environment_from_name_or_env_var(self, name: Optional[str] = None) -> EnvironmentSpec:
        """Return the named environment, the one named by
        LOCKVIEW_ENVIRONMENT, or else the default environment"""
        if name is None:
            name = os.environ.get(ENVIRONMENT_ENV_VAR) or DEFAULT_ENVIRONMENT
        return self.manifest.environment(name)

    def best_platform(self, environment: EnvironmentSpec) -> str:
        """The current platform if the environment supports it, otherwise
        the first platform the environment is locked for"""
        current = str(Platform.current())
        platforms = self.manifest.platforms(environment)
        if not platforms and self.lock_path.exists():
            platforms = self.lock_file().platforms(environment.name)

        if not platforms or current in platforms:
            return current
        logger.debug("environment %s does not support %s", environment.name, current)
        return platforms[0]

    def wheel_cache_dir(self) -> Path:
        """The directory uv unpacks index wheels into.

        LOCKVIEW_CACHE_DIR points at that directory directly. Otherwise
        it lives in the uv cache: UV_CACHE_DIR when set, else the uv
        cache pixi keeps inside its own cache (PIXI_CACHE_DIR,
        RATTLER_CACHE_DIR or `<user cache>/rattler/cache`).
        """
        cache_dir = os.environ.get(CACHE_DIR_ENV_VAR)
        if cache_dir:
            return Path(cache_dir).expanduser()

        uv_cache_dir = os.environ.get(UV_CACHE_DIR_ENV_VAR)
        if uv_cache_dir:
            uv_cache = Path(uv_cache_dir).expanduser()
        else:
            uv_cache = _pixi_cache_dir() / PIXI_UV_CACHE_DIR
        return uv_cache.joinpath(*UV_WHEELS_SUBDIR)


def _pixi_cache_dir() -> Path:
    for env_var in (PIXI_CACHE_DIR_ENV_VAR, RATTLER_CACHE_DIR_ENV_VAR):
        if os.environ.get(env_var):
            return Path(os.environ[env_var]).expanduser()
    return Path(platformdirs.user_cache_dir()) / "rattler" / "cache"
