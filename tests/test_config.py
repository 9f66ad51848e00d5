"""
Tests for configuration loading.
"""

import pytest

from certprep.core.config import Config


ENV_KEYS = [
    "CERTPREP_BANK_DIR",
    "CERTPREP_BUNDLE_PATH",
    "CERTPREP_BUNDLE_URL",
    "CERTPREP_BANK_BASE_URL",
    "CERTPREP_COMPOSITION",
    "CERTPREP_COMPOSITIONS_FILE",
    "HTTP_TIMEOUT",
    "HTTP_RETRY_TIMES",
    "RESTRICTED_FALLBACK",
    "SAMPLING_SEED",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear certprep variables and run from an empty directory."""
    for key in ENV_KEYS:
        # recorded so teardown also drops values loaded from .env files
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestConfig:
    """Test cases for Config."""

    def test_defaults(self, clean_env):
        config = Config.load_from_env(str(clean_env / "missing.env"))

        assert config["composition"] == "tableau-consultant"
        assert config["http_timeout"] == 30
        assert config["http_retry_times"] == 3
        assert config["restricted_fallback"] is False
        assert config["seed"] is None
        assert config["bank_dir"] == ""

    def test_load_from_env_file(self, clean_env):
        env_file = clean_env / "test.env"
        env_file.write_text(
            "CERTPREP_BANK_DIR=data/banks\n"
            "CERTPREP_COMPOSITION=my-exam\n"
            "HTTP_TIMEOUT=10\n"
            "RESTRICTED_FALLBACK=yes\n"
            "SAMPLING_SEED=42\n",
            encoding="utf-8",
        )

        config = Config.load_from_env(str(env_file))

        assert config["bank_dir"] == "data/banks"
        assert config["composition"] == "my-exam"
        assert config["http_timeout"] == 10
        assert config["restricted_fallback"] is True
        assert config["seed"] == 42

    def test_environment_variables(self, clean_env, monkeypatch):
        monkeypatch.setenv("CERTPREP_BUNDLE_URL", "https://example.com/bundle.json")
        monkeypatch.setenv("RESTRICTED_FALLBACK", "0")

        config = Config.load_from_env(str(clean_env / "missing.env"))

        assert config["bundle_url"] == "https://example.com/bundle.json"
        assert config["restricted_fallback"] is False

    def test_validate_config(self, clean_env):
        config = Config.load_from_env(str(clean_env / "missing.env"))

        assert Config.validate_config(config) is True

    @pytest.mark.parametrize("key,value", [
        ("composition", ""),
        ("http_timeout", 0),
        ("http_retry_times", -1),
        ("seed", -5),
    ])
    def test_validate_config_rejects(self, clean_env, key, value):
        config = Config.load_from_env(str(clean_env / "missing.env"))
        config[key] = value

        with pytest.raises(ValueError):
            Config.validate_config(config)

    def test_get_loader_config(self, clean_env):
        config = Config.load_from_env(str(clean_env / "missing.env"))
        config["bundle_path"] = "bundle.json"

        loader_config = Config.get_loader_config(config)

        assert loader_config == {
            "bank_dir": "",
            "bundle_path": "bundle.json",
            "bundle_url": "",
            "bank_base_url": "",
            "timeout": 30,
            "retry_times": 3,
        }
