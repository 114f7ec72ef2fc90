"""Tests for the location registry."""

import json

import pytest

from credloc import registry as registry_module
from credloc.errors import LocationConfigError
from credloc.registry import get_registry
from credloc.registry import load_registry
from credloc.registry import LocationRegistry
from credloc.selectors import RequestData


@pytest.fixture(autouse=True)
def reset_global_registry(monkeypatch):
    monkeypatch.setattr(registry_module, "_registry", None)


class TestLocationRegistry:
    """Tests for loading configs into a registry."""

    def test_load_and_resolve(self, credentials_config):
        registry = LocationRegistry()
        registry.load(credentials_config)

        assert len(registry.credentials) == 2
        assert registry.resolve(RequestData(headers={"x-api-key": "k"})).value == "k"

    def test_load_file(self, tmp_path, credentials_config):
        path = tmp_path / "locations.json"
        path.write_text(json.dumps(credentials_config))

        registry = LocationRegistry()
        registry.load_file(path)

        assert [c.kind for c in registry.credentials] == ["user_key", "oidc"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(LocationConfigError, match="Cannot read"):
            LocationRegistry().load_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "locations.json"
        path.write_text("{")

        with pytest.raises(LocationConfigError, match="Invalid JSON"):
            LocationRegistry().load_file(path)


class TestGlobalRegistry:
    def test_get_registry_starts_empty(self):
        assert get_registry().credentials == ()

    def test_load_replaces_registry(self, credentials_config):
        before = get_registry()
        loaded = load_registry(credentials_config)

        assert loaded is not before
        assert get_registry() is loaded

    def test_invalid_config_keeps_previous(self, credentials_config):
        loaded = load_registry(credentials_config)

        with pytest.raises(LocationConfigError):
            load_registry({"credentials": "nope"})

        assert get_registry() is loaded
