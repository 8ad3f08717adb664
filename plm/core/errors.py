"""Exceptions raised by plm."""


class PlmError(Exception):
    """Base class for plm errors."""


class PathEscapeError(PlmError, ValueError):
    """A path resolves outside the root it must stay under."""

    def __init__(self, path, root, reason: str = "escapes root"):
        self.path = path
        self.root = root
        super().__init__(f"Path '{path}' {reason} '{root}'")


class PluginNotFoundError(PlmError, FileNotFoundError):
    """Plugin is not present in the plugin cache."""


class ManifestError(PlmError, ValueError):
    """plugin.json is missing, unreadable or invalid."""


class TargetNotFoundError(PlmError, ValueError):
    """Unknown target name."""

    def __init__(self, name: str, known=()):
        self.name = name
        message = f"Unknown target: '{name}'"
        if known:
            message += f". Available targets: {', '.join(known)}"
        super().__init__(message)
