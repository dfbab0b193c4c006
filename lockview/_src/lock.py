import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import ValidationError

from lockview._src.constants import CONDA_ARCHIVE_EXTENSIONS, LockFileUsage
from lockview._src.exceptions import InvalidLockFile, LockFileNotFound, LockFileUsageError
from lockview._src.models.package import (
    CondaBinaryRecord,
    CondaSourceRecord,
    Location,
    PypiRecord,
    RawPackageRecord,
)
from lockview._src.models.pixi_lock import PixiLockFile
from lockview._src.utils import is_url


logger = logging.getLogger(__name__)


def lock_file_usage(frozen: bool, locked: bool) -> LockFileUsage:
    """Turn the `--frozen` and `--locked` flags into a lock file usage"""
    if frozen and locked:
        raise LockFileUsageError()
    if frozen:
        return LockFileUsage.FROZEN
    if locked:
        return LockFileUsage.LOCKED
    return LockFileUsage.UPDATE


class LockFile():
    @classmethod
    def from_path(cls, path: str | Path):
        path = Path(path)
        if not path.exists():
            raise LockFileNotFound(path)

        try:
            with open(path, 'r') as file:
                raw_lock = yaml.safe_load(file)
            lock = PixiLockFile.model_validate(raw_lock)
        except (yaml.YAMLError, ValidationError) as err:
            raise InvalidLockFile(path, err) from err

        return cls(lock=lock, path=path)

    def __init__(self, lock: PixiLockFile, path: Path):
        """A pixi lock file.

        Package paths in the lock file are relative to the directory
        the lock file is in, `root`.
        """
        self.lock = lock
        self.path = path
        self.root = path.parent
        self._table = self._package_table()

    def environment_names(self) -> List[str]:
        return list(self.lock.environments)

    def platforms(self, environment: str) -> List[str]:
        env = self.lock.environments.get(environment)
        if env is None:
            return []
        return list(env.packages)

    def packages(self, environment: str, platform: str) -> List[RawPackageRecord]:
        """Return the records locked for an environment and platform,
        in lock file order"""
        env = self.lock.environments.get(environment)
        if env is None:
            return []

        records = []
        for ref in env.packages.get(platform, []):
            key = _entry_key(ref)
            if key not in self._table:
                raise InvalidLockFile(
                    self.path,
                    f"environment '{environment}' references unknown {key[0]} package {key[1]}",
                )
            records.append(self._table[key])
        return records

    def _package_table(self) -> Dict[Tuple[str, str], RawPackageRecord]:
        table = {}
        for entry in self.lock.packages:
            key = _entry_key(entry)
            if key in table:
                # source packages can be locked once per variant, list the first
                logger.debug("duplicate lock entry for %s %s", *key)
                continue
            try:
                table[key] = _to_record(key[0], key[1], entry)
            except (KeyError, ValueError, ValidationError) as err:
                raise InvalidLockFile(self.path, f"bad package entry {key[1]}: {err}") from err
        return table


def _entry_key(entry: Dict[str, Any]) -> Tuple[str, str]:
    # format v6: `conda: <location>` / `pypi: <location>`
    for kind in ("conda", "pypi"):
        if kind in entry:
            return kind, str(entry[kind])
    # older formats tag the kind and spell out the location
    return str(entry.get("kind")), str(entry.get("url") or entry.get("path"))


def _to_record(kind: str, location: str, entry: Dict[str, Any]) -> RawPackageRecord:
    if kind == "pypi":
        return PypiRecord(
            name=entry["name"],
            version=str(entry["version"]),
            hash=_pypi_hash(entry),
            editable=bool(entry.get("editable", False)),
            location=Location.parse(location),
            requires_dist=entry.get("requires_dist") or [],
        )

    if kind != "conda":
        raise ValueError(f"unknown package kind '{kind}'")

    if not location.endswith(CONDA_ARCHIVE_EXTENSIONS):
        return CondaSourceRecord(
            name=entry["name"],
            version=str(entry["version"]),
            build=str(entry.get("build", "")),
            subdir=entry.get("subdir"),
            location=location,
            depends=entry.get("depends") or [],
        )

    name, version, build = _split_archive_name(location)
    return CondaBinaryRecord(
        name=entry.get("name", name),
        version=str(entry.get("version", version)),
        build=str(entry.get("build", build)),
        build_number=entry.get("build_number", 0),
        subdir=entry.get("subdir") or _subdir_from_url(location),
        url=location,
        size=entry.get("size"),
        channel=entry.get("channel") or _channel_from_url(location),
        sha256=entry.get("sha256"),
        md5=entry.get("md5"),
        depends=entry.get("depends") or [],
    )


def _split_archive_name(location: str) -> Tuple[str, str, str]:
    """'.../numpy-1.26.0-py311h_0.conda' -> ('numpy', '1.26.0', 'py311h_0')"""
    filename = location.replace("\\", "/").split("/")[-1]
    for ext in CONDA_ARCHIVE_EXTENSIONS:
        if filename.endswith(ext):
            filename = filename[:-len(ext)]
            break
    parts = filename.rsplit("-", 2)
    if len(parts) != 3:
        raise ValueError(f"can't read name, version and build from '{filename}'")
    return parts[0], parts[1], parts[2]


def _subdir_from_url(location: str):
    parts = location.split("/")
    return parts[-2] if len(parts) > 2 else None


def _channel_from_url(location: str):
    """The channel is the url without the trailing `<subdir>/<archive>`"""
    if not is_url(location):
        return None
    return location.rsplit("/", 2)[0] + "/"


def _pypi_hash(entry: Dict[str, Any]):
    # older formats nest the hashes in a `hash` table
    hashes = entry.get("hash") or entry
    return hashes.get("sha256") or hashes.get("md5")
