from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lockview._src.constants import PackageKind
from lockview._src.utils import get_dir_size, is_url, normalize_conda_name, normalize_pypi_name

if TYPE_CHECKING:
    from lockview._src.registry import RegistryWheelIndex


class Location(BaseModel):
    """Where a pypi package comes from: a remote url or a local path"""
    url: Optional[str] = None
    path: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.url is None) == (self.path is None):
            raise ValueError("a location is either a url or a path")
        return self

    @classmethod
    def parse(cls, value: str) -> Location:
        if is_url(value):
            return cls(url=value)
        return cls(path=value)

    @property
    def is_url(self) -> bool:
        return self.url is not None

    def __str__(self):
        return self.url if self.url is not None else self.path


class CondaBinaryRecord(BaseModel):
    name: str
    version: str
    build: str
    build_number: int = 0
    subdir: Optional[str] = None
    url: str
    # bytes of the archive, as recorded in the repodata
    size: Optional[int] = None
    # eg. 'https://conda.anaconda.org/conda-forge/'
    channel: Optional[str] = None
    sha256: Optional[str] = None
    md5: Optional[str] = None
    depends: List[str] = Field(default=[])

    def __str__(self):
        return f"conda: {self.name} - {self.version}"


class CondaSourceRecord(BaseModel):
    name: str
    version: str
    build: str
    subdir: Optional[str] = None
    location: str
    depends: List[str] = Field(default=[])

    def __str__(self):
        return f"conda (source): {self.name} - {self.version}"


class PypiRecord(BaseModel):
    name: str
    version: str
    hash: Optional[str] = None
    editable: bool = False
    location: Location
    requires_dist: List[str] = Field(default=[])

    def __str__(self):
        return f"pypi: {self.name} - {self.version}"


RawPackageRecord = Union[CondaBinaryRecord, CondaSourceRecord, PypiRecord]


def normalized_name(record: RawPackageRecord) -> str:
    """The name of a record, normalized the way its ecosystem does"""
    if isinstance(record, PypiRecord):
        return normalize_pypi_name(record.name)
    return normalize_conda_name(record.name)


class Package(BaseModel):
    """A locked package, the same shape for every ecosystem"""
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    build: Optional[str] = None
    size_bytes: Optional[int] = None
    kind: PackageKind
    source: Optional[str] = None
    is_explicit: bool = False
    is_editable: bool = False

    def __str__(self):
        return f"{self.kind.value}: {self.name} - {self.version}"

    @classmethod
    def from_record(
        cls,
        record: RawPackageRecord,
        explicit_names,
        registry_index: Optional[RegistryWheelIndex] = None,
        root: Optional[Path] = None,
    ) -> Package:
        """Normalize a raw lock file record.

        Parameters
        ----------
        record: RawPackageRecord
            The record as read from the lock file
        explicit_names: Collection[str]
            Normalized names of the dependencies the workspace declares
            for the environment
        registry_index: RegistryWheelIndex, optional
            Cache of installed wheels, used to size pypi packages that
            come from an index
        root: Path, optional
            Directory that relative pypi paths are relative to,
            defaults to the current directory

        Returns
        -------
        package: Package
        """
        name = normalized_name(record)
        if isinstance(record, CondaBinaryRecord):
            kind = PackageKind.CONDA
            build = record.build
            size_bytes, source = record.size, record.channel
            is_editable = False
        elif isinstance(record, CondaSourceRecord):
            kind = PackageKind.CONDA
            build = record.build
            # not knowable without fetching the source
            size_bytes, source = None, record.location
            is_editable = False
        elif isinstance(record, PypiRecord):
            kind = PackageKind.PYPI
            build = None
            # only index packages carry a hash, everything else is sized from
            # its location
            if record.hash is not None and registry_index is not None:
                size_bytes, source = _registry_information(registry_index, name, record.version)
            else:
                size_bytes, source = _location_information(record.location, root)
            is_editable = record.editable
        else:
            raise TypeError(f"unknown package record {record!r}")

        return cls(
            name=name,
            version=record.version,
            build=build,
            size_bytes=size_bytes,
            kind=kind,
            source=source,
            is_explicit=name in explicit_names,
            is_editable=is_editable,
        )

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON form of the package, `is_editable` is only emitted when true"""
        data = self.model_dump(mode="json")
        if not self.is_editable:
            del data["is_editable"]
        return data

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> Package:
        return cls.model_validate(data)


def _registry_information(registry_index, name, version):
    entry = registry_index.find(name, version)
    if entry is None:
        return None, None
    return get_dir_size(entry.path), entry.filename


def _location_information(location: Location, root: Optional[Path]):
    """Return the size and source of a pypi package from where it lives"""
    if location.is_url:
        return None, location.url
    path = Path(location.path)
    if root is not None and not path.is_absolute():
        path = root / path
    return get_dir_size(path), location.path
