import textwrap

import pytest


PIXI_TOML = """
[workspace]
name = "demo"
channels = ["conda-forge"]
platforms = ["linux-64", "osx-arm64"]

[dependencies]
numpy = ">=1.26"

[feature.test.dependencies]
pytest = "*"

[environments]
test = ["test"]
"""

PIXI_LOCK = """
version: 6
environments:
  default:
    channels:
    - url: https://conda.anaconda.org/conda-forge/
    packages:
      linux-64:
      - conda: https://conda.anaconda.org/conda-forge/linux-64/numpy-1.26.0-py311h_0.conda
      - pypi: ./requests
  test:
    channels:
    - url: https://conda.anaconda.org/conda-forge/
    packages:
      linux-64:
      - conda: https://conda.anaconda.org/conda-forge/linux-64/numpy-1.26.0-py311h_0.conda
      - conda: https://conda.anaconda.org/conda-forge/noarch/pytest-8.0.0-pyhd8ed1ab_0.conda
      - pypi: ./requests
packages:
- conda: https://conda.anaconda.org/conda-forge/linux-64/numpy-1.26.0-py311h_0.conda
  sha256: 0f1e2d3c
  md5: 4b5a6978
  depends:
  - python >=3.11,<3.12.0a0
  license: BSD-3-Clause
  size: 5000000
- conda: https://conda.anaconda.org/conda-forge/noarch/pytest-8.0.0-pyhd8ed1ab_0.conda
  sha256: 1a2b3c4d
  size: 250000
- pypi: ./requests
  name: requests
  version: 2.31.0
  requires_dist:
  - idna>=2.5
  editable: true
"""


def write_requests_tree(root):
    """A local `requests` source tree of exactly 120_000 bytes"""
    tree = root / "requests"
    (tree / "src").mkdir(parents=True)
    (tree / "setup.py").write_bytes(b"x" * 100_000)
    (tree / "src" / "api.py").write_bytes(b"y" * 20_000)
    return tree


@pytest.fixture
def workspace_dir(tmp_path, monkeypatch):
    """A pixi workspace with a conda numpy and an editable local requests"""
    (tmp_path / "pixi.toml").write_text(textwrap.dedent(PIXI_TOML))
    (tmp_path / "pixi.lock").write_text(textwrap.dedent(PIXI_LOCK))
    write_requests_tree(tmp_path)

    # never look at the real wheel cache or environment selection
    monkeypatch.setenv("LOCKVIEW_CACHE_DIR", str(tmp_path / "no-cache"))
    monkeypatch.delenv("LOCKVIEW_ENVIRONMENT", raising=False)
    monkeypatch.delenv("LOCKVIEW_FROZEN", raising=False)
    monkeypatch.delenv("LOCKVIEW_LOCKED", raising=False)
    return tmp_path


def make_wheel_cache(root, name, filenames, size=1_000):
    """Create `<root>/<name>/<filename>` unpacked wheel directories"""
    package_dir = root / name
    package_dir.mkdir(parents=True, exist_ok=True)
    for filename in filenames:
        wheel_dir = package_dir / filename
        wheel_dir.mkdir()
        (wheel_dir / "METADATA").write_bytes(b"m" * size)
    return root
