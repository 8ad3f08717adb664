"""Plugin origin identity and its path encoding."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

GITHUB_MARKETPLACE = "github"
GITHUB_SEPARATOR = "--"
GITHUB_SOURCE_PREFIX = "github:"


class PluginOrigin(ABC):
    """Where a plugin came from.

    Every origin is encoded in placement paths as two segments,
    ``<marketplace>/<plugin>``. Direct GitHub plugins use the fixed
    ``github/<owner>--<repo>`` form.
    """

    @property
    @abstractmethod
    def marketplace_dir(self) -> str:
        """First path segment (the marketplace directory)."""

    @property
    @abstractmethod
    def plugin_dir(self) -> str:
        """Second path segment (the plugin directory)."""

    def segments(self) -> Tuple[str, str]:
        return self.marketplace_dir, self.plugin_dir

    def encode(self) -> str:
        """Encode as ``marketplace/plugin`` (always ``/`` separated)."""
        return f"{self.marketplace_dir}/{self.plugin_dir}"

    @staticmethod
    def decode(encoded: str) -> "PluginOrigin":
        """
        Decode a ``marketplace/plugin`` string produced by :meth:`encode`.

        Args:
            encoded: Two ``/`` separated, non-empty segments

        Returns:
            GitHubOrigin for ``github/owner--repo``, MarketplaceOrigin otherwise

        Raises:
            ValueError: If the string is not two non-empty segments
        """
        parts = encoded.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(
                f"Invalid origin '{encoded}'. Expected 'marketplace/plugin'"
            )
        return PluginOrigin.from_segments(parts[0], parts[1])

    @staticmethod
    def from_segments(marketplace: str, plugin: str) -> "PluginOrigin":
        """Rebuild an origin from the two path segments it was placed under."""
        if marketplace == GITHUB_MARKETPLACE and GITHUB_SEPARATOR in plugin:
            owner, repo = plugin.split(GITHUB_SEPARATOR, 1)
            if owner and repo:
                return GitHubOrigin(owner=owner, repo=repo)
        return MarketplaceOrigin(marketplace=marketplace, plugin=plugin)

    @staticmethod
    def from_cached_plugin(marketplace: Optional[str], plugin_name: str) -> "PluginOrigin":
        """Origin of a cached plugin; plugins without a marketplace live under ``github``."""
        return MarketplaceOrigin(
            marketplace=marketplace or GITHUB_MARKETPLACE,
            plugin=plugin_name,
        )

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class MarketplaceOrigin(PluginOrigin):
    """Plugin installed from a named marketplace."""

    marketplace: str
    plugin: str

    @property
    def marketplace_dir(self) -> str:
        return self.marketplace

    @property
    def plugin_dir(self) -> str:
        return self.plugin


@dataclass(frozen=True)
class GitHubOrigin(PluginOrigin):
    """Plugin installed directly from a GitHub repository."""

    owner: str
    repo: str

    @property
    def marketplace_dir(self) -> str:
        return GITHUB_MARKETPLACE

    @property
    def plugin_dir(self) -> str:
        return f"{self.owner}{GITHUB_SEPARATOR}{self.repo}"


NO_ORIGIN = MarketplaceOrigin(marketplace="", plugin="")


def to_display_source(internal: str) -> str:
    """Convert ``github:owner/repo`` to ``owner/repo`` for display."""
    if internal.startswith(GITHUB_SOURCE_PREFIX):
        return internal[len(GITHUB_SOURCE_PREFIX):]
    return internal


def to_internal_source(display: str) -> str:
    """Convert user input ``owner/repo`` to ``github:owner/repo``."""
    if display.startswith(GITHUB_SOURCE_PREFIX):
        return display
    return f"{GITHUB_SOURCE_PREFIX}{display}"
