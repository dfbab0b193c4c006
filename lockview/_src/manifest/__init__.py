# Reading the workspace manifest, whether it is a pixi.toml or the
# [tool.pixi] tables of a pyproject.toml.
#
# Only the dependency tables matter here. A locked package whose
# name is declared in one of them for the environment and platform
# being listed counts as explicit, every other locked package was
# pulled in by the solver.
