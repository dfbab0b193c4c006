import os
import tomllib

from lockview._src.constants import PIXI_MANIFEST
from lockview._src.models.environment import WorkspaceManifest


class PixiTomlManifest:
    @classmethod
    def detect(cls, root):
        """Detect if the given workspace root has a pixi.toml.
        If it does, it will return an instance of PixiTomlManifest
        """
        if os.path.isfile(f"{root}/{PIXI_MANIFEST}"):
            return cls(root)
        return None

    def __init__(self, root):
        self.root = root
        self.path = f"{root}/{PIXI_MANIFEST}"
        with open(self.path, "rb") as file:
            self.workspace = WorkspaceManifest.from_pixi_table(tomllib.load(file))
