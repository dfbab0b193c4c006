from typing import Any, Dict, List

from pydantic import BaseModel, Field


class PixiLockEnvironment(BaseModel):
    # platform -> references into the package table, eg. {"conda": "<url>"}
    packages: Dict[str, List[Dict[str, Any]]] = Field(default={})


class PixiLockFile(BaseModel):
    version: int
    environments: Dict[str, PixiLockEnvironment] = Field(default={})
    packages: List[Dict[str, Any]] = Field(default=[])
