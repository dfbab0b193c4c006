import logging
import os
import tomllib

from packaging.requirements import InvalidRequirement, Requirement

from lockview._src.constants import DEFAULT_FEATURE, PYPROJECT_MANIFEST
from lockview._src.models.environment import DependencyNames, Feature, WorkspaceManifest
from lockview._src.utils import normalize_pypi_name


logger = logging.getLogger(__name__)


class PyprojectManifest:
    @classmethod
    def detect(cls, root):
        """Detect if the given workspace root has a pyproject.toml with
        pixi tables. If it does, it will return an instance of
        PyprojectManifest
        """
        path = f"{root}/{PYPROJECT_MANIFEST}"
        if not os.path.isfile(path):
            return None
        with open(path, "rb") as file:
            pyproject = tomllib.load(file)
        if "pixi" not in pyproject.get("tool", {}):
            return None
        return cls(root, pyproject)

    def __init__(self, root, pyproject):
        self.root = root
        self.path = f"{root}/{PYPROJECT_MANIFEST}"

        # [project] dependencies are pypi dependencies of the default
        # feature, each optional dependency group is a feature of its own
        project = pyproject.get("project", {})
        extra_features = {
            DEFAULT_FEATURE: _feature(DEFAULT_FEATURE, project.get("dependencies", []))
        }
        for group, requirements in project.get("optional-dependencies", {}).items():
            extra_features[group] = _feature(group, requirements)

        pixi_table = pyproject["tool"]["pixi"]
        workspace = pixi_table.get("workspace") or pixi_table.get("project") or {}
        if "name" not in workspace:
            pixi_table = {**pixi_table, "workspace": {**workspace, "name": project.get("name")}}
        self.workspace = WorkspaceManifest.from_pixi_table(pixi_table, extra_features=extra_features)


def _feature(name, requirements):
    return Feature(name=name, dependencies=DependencyNames(pypi=_requirement_names(requirements)))


def _requirement_names(requirements):
    names = []
    for requirement in requirements:
        try:
            names.append(normalize_pypi_name(Requirement(requirement).name))
        except InvalidRequirement as err:
            logger.warning("ignoring invalid requirement %r: %s", requirement, err)
    return names
