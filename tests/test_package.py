"""Tests for normalizing lock file records into packages."""
import json

import pytest

from conftest import make_wheel_cache, write_requests_tree
from lockview._src.constants import PackageKind
from lockview._src.exceptions import InvalidPackageVersion, PackageSizeError
from lockview._src.models.package import (
    CondaBinaryRecord,
    CondaSourceRecord,
    Location,
    Package,
    PypiRecord,
)
from lockview._src.registry import RegistryWheelIndex


NUMPY = CondaBinaryRecord(
    name="numpy",
    version="1.26.0",
    build="py311h_0",
    url="https://conda.anaconda.org/conda-forge/linux-64/numpy-1.26.0-py311h_0.conda",
    size=5_000_000,
    channel="https://conda.anaconda.org/conda-forge/",
)


def pypi_record(location, **kwargs):
    return PypiRecord(name="requests", version="2.31.0", location=Location.parse(location), **kwargs)


class TestCondaRecords:
    def test_binary(self):
        pkg = Package.from_record(NUMPY, ["numpy"])

        assert pkg.name == "numpy"
        assert pkg.version == "1.26.0"
        assert pkg.build == "py311h_0"
        assert pkg.size_bytes == 5_000_000
        assert pkg.kind == PackageKind.CONDA
        assert pkg.source == "https://conda.anaconda.org/conda-forge/"
        assert pkg.is_explicit is True
        assert pkg.is_editable is False

    def test_binary_without_channel_or_size(self):
        record = NUMPY.model_copy(update={"channel": None, "size": None})

        pkg = Package.from_record(record, [])

        assert pkg.source is None
        assert pkg.size_bytes is None
        assert pkg.is_explicit is False

    def test_source(self):
        record = CondaSourceRecord(name="MyLib", version="0.1.0", build="hbf21a9e_0", location="./mylib")

        pkg = Package.from_record(record, ["mylib"])

        assert pkg.name == "mylib"
        assert pkg.size_bytes is None
        assert pkg.source == "./mylib"
        assert pkg.build == "hbf21a9e_0"
        assert pkg.kind == PackageKind.CONDA
        assert pkg.is_explicit is True
        assert pkg.is_editable is False


class TestPypiRecords:
    def test_url_location(self):
        url = "https://files.pythonhosted.org/packages/requests-2.31.0-py3-none-any.whl"

        pkg = Package.from_record(pypi_record(url), [])

        assert pkg.kind == PackageKind.PYPI
        assert pkg.build is None
        assert pkg.size_bytes is None
        assert pkg.source == url

    def test_local_path_is_sized(self, tmp_path):
        write_requests_tree(tmp_path)

        pkg = Package.from_record(pypi_record("./requests", editable=True), [], root=tmp_path)

        assert pkg.size_bytes == 120_000
        assert pkg.source == "./requests"
        assert pkg.is_editable is True

    def test_absolute_path_ignores_root(self, tmp_path):
        tree = write_requests_tree(tmp_path)

        pkg = Package.from_record(pypi_record(str(tree)), [], root=tmp_path / "elsewhere")

        assert pkg.size_bytes == 120_000

    def test_missing_local_path_fails(self, tmp_path):
        with pytest.raises(PackageSizeError):
            Package.from_record(pypi_record("./gone"), [], root=tmp_path)

    def test_name_is_normalized(self):
        record = PypiRecord(
            name="Typing_Extensions",
            version="4.9.0",
            location=Location.parse("https://example.com/typing_extensions-4.9.0-py3-none-any.whl"),
        )

        pkg = Package.from_record(record, ["typing-extensions"])

        assert pkg.name == "typing-extensions"
        assert pkg.is_explicit is True

    def test_hash_with_registry_match(self, tmp_path):
        cache = make_wheel_cache(
            tmp_path / "cache", "requests",
            ["requests-2.30.0-py3-none-any", "requests-2.31.0-py3-none-any"],
            size=4321,
        )
        record = pypi_record("https://example.com/requests-2.31.0-py3-none-any.whl", hash="abc123")

        pkg = Package.from_record(record, [], registry_index=RegistryWheelIndex(cache))

        assert pkg.size_bytes == 4321
        assert pkg.source == "requests-2.31.0-py3-none-any.whl"

    def test_hash_with_registry_but_no_match(self, tmp_path):
        cache = make_wheel_cache(tmp_path / "cache", "requests", ["requests-2.30.0-py3-none-any"])
        write_requests_tree(tmp_path)
        # a path that could be sized, but index packages never fall back to it
        record = pypi_record("./requests", hash="abc123")

        pkg = Package.from_record(record, [], registry_index=RegistryWheelIndex(cache), root=tmp_path)

        assert pkg.size_bytes is None
        assert pkg.source is None

    def test_hash_without_registry_uses_location(self, tmp_path):
        write_requests_tree(tmp_path)
        record = pypi_record("./requests", hash="abc123")

        pkg = Package.from_record(record, [], root=tmp_path)

        assert pkg.size_bytes == 120_000
        assert pkg.source == "./requests"

    def test_no_hash_ignores_registry(self, tmp_path):
        cache = make_wheel_cache(tmp_path / "cache", "requests", ["requests-2.31.0-py3-none-any"])
        url = "https://example.com/requests-2.31.0-py3-none-any.whl"

        pkg = Package.from_record(pypi_record(url), [], registry_index=RegistryWheelIndex(cache))

        assert pkg.size_bytes is None
        assert pkg.source == url

    def test_invalid_version_with_registry(self, tmp_path):
        cache = make_wheel_cache(tmp_path / "cache", "requests", ["requests-2.31.0-py3-none-any"])
        record = PypiRecord(
            name="requests",
            version="not a version",
            hash="abc123",
            location=Location.parse("https://example.com/requests.whl"),
        )

        with pytest.raises(InvalidPackageVersion):
            Package.from_record(record, [], registry_index=RegistryWheelIndex(cache))


class TestLocation:
    def test_parse_url(self):
        location = Location.parse("git+https://github.com/psf/requests.git")
        assert location.is_url
        assert str(location) == "git+https://github.com/psf/requests.git"

    def test_parse_path(self):
        location = Location.parse("../libs/requests")
        assert not location.is_url
        assert location.path == "../libs/requests"

    def test_needs_exactly_one(self):
        with pytest.raises(ValueError):
            Location()
        with pytest.raises(ValueError):
            Location(url="https://example.com", path="./here")


class TestPackage:
    def test_is_immutable(self):
        pkg = Package.from_record(NUMPY, [])
        with pytest.raises(ValueError):
            pkg.name = "scipy"

    def test_json_omits_false_editable(self):
        data = Package.from_record(NUMPY, ["numpy"]).to_json_dict()

        assert data == {
            "name": "numpy",
            "version": "1.26.0",
            "build": "py311h_0",
            "size_bytes": 5000000,
            "kind": "conda",
            "source": "https://conda.anaconda.org/conda-forge/",
            "is_explicit": True,
        }

    def test_json_keeps_true_editable(self, tmp_path):
        write_requests_tree(tmp_path)
        pkg = Package.from_record(pypi_record("./requests", editable=True), [], root=tmp_path)

        data = pkg.to_json_dict()

        assert data["is_editable"] is True
        assert data["build"] is None

    def test_json_round_trip(self, tmp_path):
        write_requests_tree(tmp_path)
        packages = [
            Package.from_record(NUMPY, ["numpy"]),
            Package.from_record(pypi_record("./requests", editable=True), [], root=tmp_path),
        ]

        text = json.dumps([pkg.to_json_dict() for pkg in packages])
        parsed = [Package.from_json_dict(data) for data in json.loads(text)]

        assert parsed == packages
        assert parsed[0].is_editable is False
