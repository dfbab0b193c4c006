import logging
import re
from typing import List, Optional

from lockview._src.constants import LockFileUsage
from lockview._src.exceptions import InvalidRegex, LockFileOutdated, NoPackagesFound
from lockview._src.models.package import Package, PypiRecord, normalized_name
from lockview._src.registry import RegistryWheelIndex
from lockview._src.workspace import Workspace


logger = logging.getLogger(__name__)


def list_packages(
    workspace: Workspace,
    regex: Optional[str] = None,
    platform: Optional[str] = None,
    environment: Optional[str] = None,
    explicit_only: bool = False,
    no_install: bool = False,
    lock_file_usage: LockFileUsage = LockFileUsage.UPDATE,
) -> List[Package]:
    """List the locked packages of an environment.

    Parameters
    ----------
    workspace: Workspace
        The workspace to list packages for
    regex: str, optional
        Only keep packages whose name matches this regular expression
    platform: str, optional
        Platform to list packages for, defaults to the best platform
        of the environment
    environment: str, optional
        Environment to list packages for, defaults to the environment
        named by LOCKVIEW_ENVIRONMENT or the default environment
    explicit_only: bool
        Only keep packages the manifest declares
    no_install: bool
        Don't use the cache of installed wheels to size pypi packages
    lock_file_usage: LockFileUsage
        What to do when the lock file is out of date with the manifest

    Returns
    -------
    packages: list[Package]
        The packages in lock file order

    Raises
    ------
    NoPackagesFound
        If no package is left after filtering
    """
    pattern = _compile(regex)
    env = workspace.environment_from_name_or_env_var(environment)
    if platform is None:
        platform = workspace.best_platform(env)

    lock_file = workspace.lock_file()
    records = lock_file.packages(env.name, platform)
    explicit_names = frozenset(workspace.manifest.get_requested_specs(env, platform))

    _check_lock_file(records, explicit_names, env.name, platform, lock_file_usage)

    registry_index = None
    if not no_install and any(isinstance(record, PypiRecord) for record in records):
        cache_dir = workspace.wheel_cache_dir()
        if cache_dir.is_dir():
            registry_index = RegistryWheelIndex(cache_dir)
        else:
            logger.debug("wheel cache %s does not exist", cache_dir)

    packages = [
        Package.from_record(record, explicit_names, registry_index=registry_index, root=lock_file.root)
        for record in records
    ]

    packages = filter_packages(packages, pattern=pattern, explicit_only=explicit_only)
    if not packages:
        raise NoPackagesFound(env.name, platform)
    return packages


def filter_packages(packages: List[Package], pattern=None, explicit_only: bool = False) -> List[Package]:
    if pattern is not None:
        packages = [pkg for pkg in packages if pattern.search(pkg.name)]
    if explicit_only:
        packages = [pkg for pkg in packages if pkg.is_explicit]
    return packages


def _compile(regex: Optional[str]):
    if regex is None:
        return None
    try:
        return re.compile(regex)
    except re.error as err:
        raise InvalidRegex(regex, err) from err


def _check_lock_file(records, explicit_names, environment, platform, lock_file_usage):
    if lock_file_usage == LockFileUsage.FROZEN:
        return

    locked_names = {normalized_name(record) for record in records}
    missing = explicit_names - locked_names
    if not missing:
        return

    if lock_file_usage == LockFileUsage.LOCKED:
        raise LockFileOutdated(environment, platform, missing)
    logger.warning(
        "lock file is out of date, %s not locked for '%s' on '%s'; listing the locked packages",
        ", ".join(sorted(missing)), environment, platform,
    )
