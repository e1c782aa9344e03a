"""Tests for translation structure validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from homeassistant.util.yaml import load_yaml

# Path to custom_components/synology_srm
COMPONENT_DIR = Path(__file__).parent.parent / "custom_components" / "synology_srm"


@pytest.fixture
def strings_json() -> dict:
    """Load strings.json."""
    with open(COMPONENT_DIR / "strings.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def translations_en_json() -> dict:
    """Load translations/en.json."""
    with open(COMPONENT_DIR / "translations" / "en.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def services_yaml() -> dict:
    """Load services.yaml."""
    return dict(load_yaml(COMPONENT_DIR / "services.yaml"))


class TestTranslationStructure:
    """Test translation file structure."""

    def test_english_matches_strings(
        self, strings_json: dict, translations_en_json: dict
    ) -> None:
        """Test translations/en.json is in sync with strings.json."""
        assert translations_en_json == strings_json

    def test_config_errors(self, strings_json: dict) -> None:
        """Test every error key of the config flow is translated."""
        errors = strings_json["config"]["error"]
        for key in ("cannot_connect", "invalid_auth", "invalid_host", "unknown"):
            assert key in errors

    def test_repair_issue(self, strings_json: dict) -> None:
        """Test the connection issue uses the placeholders the poller sets."""
        issue = strings_json["issues"]["cannot_connect"]
        assert "{host}" in issue["title"]
        assert "{error}" in issue["description"]

    def test_service_exceptions(self, strings_json: dict) -> None:
        """Test every exception translation key raised by services exists."""
        exceptions = strings_json["exceptions"]
        for key in (
            "invalid_config_entry",
            "config_entry_required",
            "not_connected",
            "invalid_argument",
            "command_failed",
        ):
            assert "message" in exceptions[key]


class TestServiceDefinitions:
    """Test services.yaml matches the translated services."""

    def test_services_translated(self, strings_json: dict, services_yaml: dict) -> None:
        """Test each service and field has a name."""
        translated = strings_json["services"]
        assert set(services_yaml) == set(translated)
        for service, definition in services_yaml.items():
            for field in definition.get("fields", {}):
                assert "name" in translated[service]["fields"][field]
