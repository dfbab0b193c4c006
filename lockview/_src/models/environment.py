from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from lockview._src.constants import DEFAULT_ENVIRONMENT, DEFAULT_FEATURE
from lockview._src.utils import normalize_conda_name, normalize_pypi_name


# platform families the `unix` target selector covers
UNIX_FAMILIES = ("linux", "osx")

CONDA_DEPENDENCY_TABLES = ("dependencies", "host-dependencies", "build-dependencies")
PYPI_DEPENDENCY_TABLE = "pypi-dependencies"


def target_matches(selector: str, platform: str) -> bool:
    """Does `[target.<selector>]` apply to `platform`?

    A selector is a platform (`linux-64`), a family (`linux`, `osx`,
    `win`) or `unix`, which covers linux and osx.
    """
    if selector == platform:
        return True
    family = platform.split("-", 1)[0]
    if selector == "unix":
        return family in UNIX_FAMILIES
    return selector == family


class DependencyNames(BaseModel):
    """Names of the dependencies a feature declares"""
    conda: List[str] = Field(default=[])
    pypi: List[str] = Field(default=[])

    @classmethod
    def from_table(cls, table: Dict[str, Any]):
        conda = []
        for key in CONDA_DEPENDENCY_TABLES:
            conda.extend(normalize_conda_name(name) for name in table.get(key, {}))
        pypi = [normalize_pypi_name(name) for name in table.get(PYPI_DEPENDENCY_TABLE, {})]
        return cls(conda=conda, pypi=pypi)


class Feature(BaseModel):
    """A named set of dependencies, the workspace itself is the default feature"""
    name: str
    platforms: Optional[List[str]] = None
    dependencies: DependencyNames = Field(default_factory=DependencyNames)
    # target selector -> dependencies only declared for matching platforms
    targets: Dict[str, DependencyNames] = Field(default={})

    @classmethod
    def from_table(cls, name: str, table: Dict[str, Any]):
        targets = {
            selector: DependencyNames.from_table(target)
            for selector, target in table.get("target", {}).items()
        }
        return cls(
            name=name,
            platforms=table.get("platforms"),
            dependencies=DependencyNames.from_table(table),
            targets=targets,
        )

    def dependency_names(self, platform: Optional[str] = None) -> DependencyNames:
        conda = list(self.dependencies.conda)
        pypi = list(self.dependencies.pypi)
        if platform is not None:
            for selector, target in self.targets.items():
                if target_matches(selector, platform):
                    conda.extend(target.conda)
                    pypi.extend(target.pypi)
        return DependencyNames(conda=conda, pypi=pypi)


class EnvironmentSpec(BaseModel):
    """An environment of the workspace, made up of features"""
    name: str
    features: List[str] = Field(default=[])
    no_default_feature: bool = False

    @classmethod
    def from_value(cls, name: str, value: Any):
        # `test = ["test"]` or `test = {features = ["test"], no-default-feature = true}`
        if isinstance(value, list):
            return cls(name=name, features=value)
        return cls(
            name=name,
            features=value.get("features", []),
            no_default_feature=value.get("no-default-feature", False),
        )

    def feature_names(self) -> List[str]:
        if self.no_default_feature:
            return list(self.features)
        return [*self.features, DEFAULT_FEATURE]

    def is_default(self) -> bool:
        return self.name == DEFAULT_ENVIRONMENT


class WorkspaceManifest(BaseModel):
    """The parts of a pixi manifest needed to tell explicit dependencies
    apart from transitive ones"""
    name: Optional[str] = None
    platforms: List[str] = Field(default=[])
    features: Dict[str, Feature] = Field(default={})
    environments: Dict[str, EnvironmentSpec] = Field(default={})

    @classmethod
    def from_pixi_table(cls, table: Dict[str, Any], extra_features: Optional[Dict[str, Feature]] = None):
        """Parse the contents of pixi.toml, or of `[tool.pixi]`"""
        workspace = table.get("workspace") or table.get("project") or {}

        features = {DEFAULT_FEATURE: Feature.from_table(DEFAULT_FEATURE, table)}
        for name, feature_table in table.get("feature", {}).items():
            features[name] = Feature.from_table(name, feature_table)
        for name, feature in (extra_features or {}).items():
            features[name] = _merge_features(features.get(name), feature)

        environments = {DEFAULT_ENVIRONMENT: EnvironmentSpec(name=DEFAULT_ENVIRONMENT)}
        for name, value in table.get("environments", {}).items():
            environments[name] = EnvironmentSpec.from_value(name, value)

        return cls(
            name=workspace.get("name"),
            platforms=workspace.get("platforms", []),
            features=features,
            environments=environments,
        )

    def environment_platforms(self, environment: EnvironmentSpec) -> List[str]:
        """Platforms of an environment, the platforms its features agree on"""
        platforms = list(self.platforms)
        for name in environment.feature_names():
            feature = self.features.get(name)
            if feature is not None and feature.platforms is not None:
                platforms = [p for p in platforms if p in feature.platforms]
        return platforms

    def dependency_names(self, environment: EnvironmentSpec, platform: Optional[str] = None) -> DependencyNames:
        conda = []
        pypi = []
        for name in environment.feature_names():
            feature = self.features.get(name)
            if feature is None:
                continue
            names = feature.dependency_names(platform)
            conda.extend(names.conda)
            pypi.extend(names.pypi)
        return DependencyNames(conda=conda, pypi=pypi)


def _merge_features(feature: Optional[Feature], extra: Feature) -> Feature:
    if feature is None:
        return extra
    dependencies = DependencyNames(
        conda=feature.dependencies.conda + extra.dependencies.conda,
        pypi=feature.dependencies.pypi + extra.dependencies.pypi,
    )
    return feature.model_copy(update={"dependencies": dependencies})
