# Both flavours parse into the same WorkspaceManifest. pyproject.toml
# also maps its [project] dependencies onto the default feature.

import os
from typing import List, Optional

from lockview._src.exceptions import EnvironmentNotFound, ManifestNotFound
from lockview._src.manifest.pixi import PixiTomlManifest
from lockview._src.manifest.pyproject import PyprojectManifest
from lockview._src.models.environment import EnvironmentSpec


class Manifest():
    def __init__(self, root):
        """Manifest reads the environments, platforms and declared
        dependencies of a pixi workspace rooted at `root`.

        Parameters
        ----------
        root: str
            The path to the workspace root
        """
        self.root = root

        if not os.path.exists(root):
            raise ManifestNotFound(root)

        # detect which manifest flavour is used by the workspace
        for impl in [PixiTomlManifest, PyprojectManifest]:
            self.manifest = impl.detect(root)
            if self.manifest is not None:
                break

        # if none is detected raise an exception
        if self.manifest is None:
            raise ManifestNotFound(root)

        self.workspace = self.manifest.workspace

    @property
    def path(self) -> str:
        return self.manifest.path

    def environment_names(self) -> List[str]:
        return list(self.workspace.environments)

    def environment(self, name: str) -> EnvironmentSpec:
        """Return the environment called `name`

        Raises
        ------
        EnvironmentNotFound
            If the manifest does not define the environment
        """
        environment = self.workspace.environments.get(name)
        if environment is None:
            raise EnvironmentNotFound(name, self.environment_names())
        return environment

    def platforms(self, environment: EnvironmentSpec) -> List[str]:
        return self.workspace.environment_platforms(environment)

    def get_requested_specs(self, environment: EnvironmentSpec, platform: Optional[str] = None) -> List[str]:
        """Names declared in the dependency tables of the environment's
        features, plus the `[target.*]` tables that apply to `platform`.

        Conda names are lowercased and pypi names PEP 503 normalized,
        a name declared twice is listed once.

        Returns
        -------
        specs: list[str]
            Declared conda names first, then declared pypi names
        """
        names = self.workspace.dependency_names(environment, platform)
        return list(dict.fromkeys([*names.conda, *names.pypi]))
