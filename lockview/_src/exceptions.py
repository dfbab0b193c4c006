class LockviewError(Exception):
    def __init__(self, msg):
        self.msg = msg
        super().__init__(self.msg)


class NoPackagesFound(LockviewError):
    def __init__(self, environment, platform):
        self.environment = environment
        self.platform = platform
        super().__init__(
            f"No packages found in '{environment}' environment for '{platform}' platform."
        )


class PackageSizeError(LockviewError):
    def __init__(self, path, err):
        self.path = path
        super().__init__(
            f"Failed to compute the size of `{path}`"
            f"\nError message: {err}"
        )


class InvalidPackageVersion(LockviewError):
    def __init__(self, name, version, err):
        self.name = name
        self.version = version
        super().__init__(f"invalid version '{version}' for package '{name}': {err}")


class LockFileUsageError(LockviewError):
    def __init__(self):
        super().__init__("the argument '--locked' cannot be used together with '--frozen'")


class LockFileNotFound(LockviewError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"lock file `{path}` does not exist")


class InvalidLockFile(LockviewError):
    def __init__(self, path, err):
        self.path = path
        super().__init__(
            f"Failed to read lock file `{path}`"
            f"\nError message: {err}"
        )


class LockFileOutdated(LockviewError):
    def __init__(self, environment, platform, missing):
        self.missing = missing
        super().__init__(
            f"lock file is not up-to-date with the manifest: environment '{environment}' "
            f"for '{platform}' does not lock {', '.join(sorted(missing))}"
        )


class ManifestNotFound(LockviewError):
    def __init__(self, directory):
        super().__init__(f"could not find pixi.toml or pyproject.toml with [tool.pixi] at or above `{directory}`")


class EnvironmentNotFound(LockviewError):
    def __init__(self, environment, available):
        super().__init__(
            f"unknown environment '{environment}', available environments: {', '.join(available)}"
        )


class InvalidRegex(LockviewError):
    def __init__(self, regex, err):
        super().__init__(f"invalid regex '{regex}': {err}")
