import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from packaging.utils import InvalidWheelFilename, canonicalize_name, parse_wheel_filename
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict

from lockview._src.exceptions import InvalidPackageVersion


logger = logging.getLogger(__name__)


class WheelEntry(BaseModel):
    """A wheel that was installed from an index and is kept in the cache"""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    version: Version
    # eg. 'requests-2.31.0-py3-none-any.whl'
    filename: str
    # unpacked wheel directory, or the wheel file itself
    path: Path


class RegistryWheelIndex():
    def __init__(self, cache_dir: str | Path):
        """RegistryWheelIndex finds wheels that were installed from a
        package index in a local wheel cache. The cache holds one
        directory per normalized package name and, inside it, one
        entry per wheel named after the wheel file. uv lays out its
        `wheels-v5/pypi` directory this way, with the unpacked wheels
        linked into its archive:

            <cache_dir>/requests/requests-2.31.0-py3-none-any -> ../../../archive-v0/<id>
            <cache_dir>/requests/requests-2.32.3-py3-none-any.whl

        A name's directory is only read the first time that name is
        asked for and remembered afterwards. That state is owned by a
        single inventory build, don't share an index between builds or
        threads.

        Parameters
        ----------
        cache_dir: str | Path
            The wheel cache directory
        """
        self.cache_dir = Path(cache_dir)
        self._entries: Dict[str, List[WheelEntry]] = {}

    def get(self, name: str) -> Iterator[WheelEntry]:
        """Iterate over the cached wheels of a package"""
        name = canonicalize_name(name)
        if name not in self._entries:
            self._entries[name] = self._scan(name)
        return iter(self._entries[name])

    def find(self, name: str, version: str) -> Optional[WheelEntry]:
        """Find the cached wheel of `name` with exactly `version`

        Raises
        ------
        InvalidPackageVersion
            If `version` is not a valid python package version
        """
        try:
            wanted = Version(version)
        except InvalidVersion as err:
            raise InvalidPackageVersion(name, version, err) from err

        for entry in self.get(name):
            if entry.version == wanted:
                return entry
        return None

    def _scan(self, name: str) -> List[WheelEntry]:
        package_dir = self.cache_dir / name
        if not package_dir.is_dir():
            return []

        entries = []
        for item in sorted(package_dir.iterdir()):
            if item.name.endswith(".whl"):
                filename = item.name
            elif item.is_dir():
                # unpacked wheels are named after the wheel without its extension
                filename = f"{item.name}.whl"
            else:
                logger.debug("skipping %s, not a wheel", item)
                continue
            try:
                wheel_name, wheel_version, _, _ = parse_wheel_filename(filename)
            except (InvalidWheelFilename, InvalidVersion):
                logger.debug("skipping %s, not a wheel", item)
                continue
            if wheel_name != name:
                logger.debug("skipping %s, it is not a wheel of %s", item, name)
                continue
            entries.append(
                WheelEntry(name=name, version=wheel_version, filename=filename, path=item)
            )
        logger.debug("found %d cached wheels for %s", len(entries), name)
        return entries
