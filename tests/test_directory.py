"""
Tests for the vendor/policy directory and settings loading.
"""

import json

import pytest

from procure_engine.config import Settings, load_settings
from procure_engine.directory import InMemoryDirectory, JsonFileDirectory, default_policies
from procure_engine.exceptions import ConfigurationError
from procure_engine.mission import Policy, Vendor


def test_json_directory_seeds_defaults(tmp_path):
    """Test a missing file is created with the default records."""
    path = tmp_path / "data" / "directory.json"
    directory = JsonFileDirectory(path)

    assert path.exists()
    assert len(directory.list_vendors()) == 6
    assert [p.id for p in directory.list_policies()] == [p.id for p in default_policies()]


def test_json_directory_add_and_remove_vendor(tmp_path):
    """Test vendor edits persist to disk."""
    path = tmp_path / "directory.json"
    directory = JsonFileDirectory(path)

    directory.add_vendor(Vendor(id="v-new", name="NewCo", is_whitelisted=True, rating=4.1))
    assert JsonFileDirectory(path).get_vendor("v-new").name == "NewCo"

    assert directory.remove_vendor("v-new") is True
    assert directory.remove_vendor("v-new") is False
    assert directory.get_vendor("v-new") is None


def test_json_directory_toggle_policy(tmp_path):
    """Test switching a policy off hides it from active_policies."""
    directory = JsonFileDirectory(tmp_path / "directory.json")

    assert directory.set_policy_active("p-green", False) is True
    assert "p-green" not in {p.id for p in directory.active_policies()}
    assert len(directory.list_policies()) == 5
    assert directory.set_policy_active("p-missing", False) is False


def test_json_directory_add_policy_replaces_same_id(tmp_path):
    """Test policies are keyed by id."""
    directory = JsonFileDirectory(tmp_path / "directory.json")
    directory.add_policy(Policy(id="p-delivery", name="Delivery Window", category="logistics",
                                rule_text="Orders must ship within 10 days"))

    policies = [p for p in directory.list_policies() if p.id == "p-delivery"]
    assert len(policies) == 1
    assert policies[0].rule_text == "Orders must ship within 10 days"


def test_invalid_json_raises_configuration_error(tmp_path):
    """Test a corrupt directory file."""
    path = tmp_path / "directory.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError):
        JsonFileDirectory(path).list_vendors()


def test_malformed_record_names_missing_field(tmp_path):
    """Test a record without a required field."""
    path = tmp_path / "directory.json"
    path.write_text(json.dumps({"vendors": [{"id": "v-1"}], "policies": []}))

    with pytest.raises(ConfigurationError) as exc_info:
        JsonFileDirectory(path).list_vendors()

    assert "vendor record at position 0" in str(exc_info.value)
    assert "name" in str(exc_info.value)
    assert exc_info.value.code == "INVALID_CONFIGURATION"


def test_in_memory_directory_validates_lazily():
    """Test raw dicts are only validated when read."""
    directory = InMemoryDirectory(vendors=[{"id": "v-1", "name": "Acme"}], policies=[{"id": "p-1"}])

    assert directory.list_vendors()[0].rating == 3.0
    with pytest.raises(ConfigurationError):
        directory.list_policies()


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.general_approval_threshold == 10000
        assert settings.source_failure_rate == 0.15
        assert settings.approval_on_compliance_failure is False
        assert settings.enhancement_enabled is False

    def test_load_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.setenv("GENERAL_APPROVAL_THRESHOLD", "15000")
        monkeypatch.setenv("SOURCE_FAILURE_RATE", "0")
        monkeypatch.setenv("APPROVAL_ON_COMPLIANCE_FAILURE", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings(tmp_path / ".env")

        assert settings.general_approval_threshold == 15000
        assert settings.source_failure_rate == 0
        assert settings.approval_on_compliance_failure is True
        assert settings.log_level == "DEBUG"
        assert settings.anthropic_api_key is None

    def test_bad_number_raises(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GENERAL_APPROVAL_THRESHOLD", "ten thousand")

        with pytest.raises(RuntimeError, match="GENERAL_APPROVAL_THRESHOLD"):
            load_settings(tmp_path / ".env")

    @pytest.mark.parametrize("name,value", [
        ("SOURCE_FAILURE_RATE", "1.5"),
        ("GENERAL_APPROVAL_THRESHOLD", "-100"),
    ])
    def test_out_of_range_number_raises(self, monkeypatch, tmp_path, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(RuntimeError, match=name):
            load_settings(tmp_path / ".env")

    def test_api_key_hidden_from_repr(self):
        settings = Settings(anthropic_api_key="sk-secret")
        assert "sk-secret" not in repr(settings)
        assert settings.enhancement_enabled is True
