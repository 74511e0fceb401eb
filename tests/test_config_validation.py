"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from sidecards.config import Config, load_config
from sidecards.exceptions import ConfigurationError


def _write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


class TestConfig:
    """Config model validation."""

    def test_defaults(self, test_config) -> None:
        assert test_config.flashcard_folder == "~card-data"
        assert test_config.scan_margin == 16
        assert test_config.allocator_max_attempts == 32
        assert test_config.dedupe_sorted_view is False

    def test_validate_config_accepts_valid_values(self, test_config) -> None:
        assert test_config.validate_config() is test_config

    def test_vault_path_is_required(self) -> None:
        with pytest.raises(ConfigurationError, match="vault_path is required"):
            Config(vault_path="").validate_config()

    def test_missing_vault_is_rejected(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="does not exist"):
            Config(vault_path=tmp_path / "missing").validate_config()

    @pytest.mark.parametrize("folder", ["", "/abs", "../escape", "cards/../../x"])
    def test_bad_flashcard_folder(self, test_config, folder) -> None:
        config = test_config.model_copy(update={"flashcard_folder": folder})
        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_flashcard_folder_is_normalised(self, test_config) -> None:
        config = test_config.model_copy(update={"flashcard_folder": "cards\\data/"})
        assert config.validate_config().flashcard_folder == "cards/data"

    def test_scan_margin_must_fit_a_token(self, test_config) -> None:
        config = test_config.model_copy(update={"scan_margin": 4})
        with pytest.raises(ConfigurationError, match="scan_margin"):
            config.validate_config()

    def test_invalid_log_level(self, test_config) -> None:
        config = test_config.model_copy(update={"log_level": "LOUD"})
        with pytest.raises(ConfigurationError, match="log_level"):
            config.validate_config()

    def test_log_dir_is_under_data_dir(self, test_config, tmp_path) -> None:
        assert test_config.get_log_dir() == (tmp_path / "data" / "logs").resolve()


class TestLoadConfig:
    """YAML and environment loading."""

    def test_load_from_yaml(self, tmp_path) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        config_path = _write_config(
            tmp_path / "config.yaml",
            f"vault_path: {vault}\nflashcard_folder: cards\ndedupe_sorted_view: true\n",
        )

        config = load_config(config_path)

        assert config.vault_path == vault.resolve()
        assert config.flashcard_folder == "cards"
        assert config.dedupe_sorted_view is True

    def test_environment_variables(self, tmp_path, monkeypatch) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SIDECARDS_VAULT_PATH", str(vault))
        monkeypatch.setenv("SIDECARDS_SCAN_CACHE_SIZE", "8")

        config = load_config()

        assert config.vault_path == vault.resolve()
        assert config.scan_cache_size == 8

    def test_config_env_var_points_at_file(self, tmp_path, monkeypatch) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        config_path = _write_config(tmp_path / "custom.yaml", f"vault_path: {vault}\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SIDECARDS_CONFIG", str(config_path))

        assert load_config().vault_path == vault.resolve()

    def test_invalid_yaml(self, tmp_path) -> None:
        config_path = _write_config(tmp_path / "config.yaml", "vault_path: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_config(config_path)

    def test_non_mapping_yaml(self, tmp_path) -> None:
        config_path = _write_config(tmp_path / "config.yaml", "- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_path)

    def test_invalid_value_type(self, tmp_path) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        config_path = _write_config(
            tmp_path / "config.yaml", f"vault_path: {vault}\nscan_cache_size: lots\n"
        )
        with pytest.raises(ConfigurationError, match="Invalid configuration values"):
            load_config(config_path)

    def test_unknown_keys_are_ignored(self, tmp_path) -> None:
        vault = tmp_path / "vault"
        vault.mkdir()
        config_path = _write_config(
            tmp_path / "config.yaml", f"vault_path: {vault}\nmystery_option: 1\n"
        )
        assert load_config(config_path).vault_path == vault.resolve()

    def test_non_strict_mode_downgrades_validation_errors(self, tmp_path) -> None:
        config_path = _write_config(
            tmp_path / "config.yaml",
            f"vault_path: {tmp_path / 'missing'}\nstrict_mode: false\n",
        )
        config = load_config(config_path)
        assert config.strict_mode is False
