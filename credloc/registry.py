"""
Registry of compiled credential locations.

Configs are compiled once on load. The compiled specs are frozen, so the
registry can be read from any number of request hooks; reloading replaces
the global registry instead of mutating it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from credloc.compiler import compile_credentials
from credloc.errors import LocationConfigError
from credloc.models import CredentialMatch
from credloc.models import CredentialSpec
from credloc.resolver import LocationOutcome
from credloc.resolver import resolve
from credloc.resolver import resolve_all
from credloc.selectors import RequestData

logger = logging.getLogger(__name__)


class LocationRegistry:
    """
    Registry of credential specs.

    Loads a credentials config and resolves requests against it.
    """

    def __init__(self):
        self._credentials: tuple[CredentialSpec, ...] = ()

    @property
    def credentials(self) -> tuple[CredentialSpec, ...]:
        return self._credentials

    def load(self, config: Any, config_path: Path | str | None = None) -> None:
        """
        Compile and load a credentials config.

        Raises:
            LocationConfigError: if the config is invalid
        """
        self._credentials = compile_credentials(config, config_path)

        location_count = sum(len(c.locations) for c in self._credentials)
        logger.info(
            f"Loaded {len(self._credentials)} credentials with "
            f"{location_count} locations into location registry"
        )

    def load_file(self, path: Path | str) -> None:
        """
        Load a credentials config from a JSON file.

        Raises:
            LocationConfigError: if the file cannot be read or is invalid
        """
        path = Path(path).expanduser()
        try:
            with open(path) as f:
                config = json.load(f)
        except OSError as e:
            raise LocationConfigError(f"Cannot read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LocationConfigError(f"Invalid JSON in {path}: {e}") from e

        self.load(config, path)

    def resolve(self, request: RequestData) -> CredentialMatch | None:
        return resolve(self._credentials, request)

    def resolve_all(self, request: RequestData) -> list[LocationOutcome]:
        return resolve_all(self._credentials, request)


# Global registry instance
_registry: LocationRegistry | None = None


def get_registry() -> LocationRegistry:
    """Get the global location registry instance."""
    global _registry
    if _registry is None:
        _registry = LocationRegistry()
    return _registry


def load_registry(config: Any, config_path: Path | str | None = None) -> LocationRegistry:
    """
    Load the global registry from a config.

    The previous registry stays in place if the config is invalid.
    """
    global _registry
    registry = LocationRegistry()
    registry.load(config, config_path)
    _registry = registry
    return _registry


def load_registry_from_file(path: Path | str) -> LocationRegistry:
    """Load the global registry from a JSON file."""
    global _registry
    registry = LocationRegistry()
    registry.load_file(path)
    _registry = registry
    return _registry
