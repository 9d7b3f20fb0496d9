"""Tests for flag/environment resolution and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from blob_folder_upload.config import Config, ConfigError


class TestResolution:
    def test_explicit_values_win_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AZURE_STORAGE_CONTAINER", "from-env")
        cfg = Config(container_name="from-flag")
        assert cfg.container_name == "from-flag"

    def test_empty_values_fall_back_to_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "acct")
        monkeypatch.setenv("AZURE_STORAGE_CONTAINER", "box")
        monkeypatch.setenv("AZURE_STORAGE_SUBFOLDER", "docs")
        monkeypatch.setenv("LOCAL_FOLDER", "/tmp/data")
        monkeypatch.setenv("AZURE_STORAGE_CONNECTION_STRING", "conn")

        cfg = Config()

        assert cfg.storage_account == "acct"
        assert cfg.container_name == "box"
        assert cfg.sub_folder == "docs"
        assert cfg.local_folder == "/tmp/data"
        assert cfg.connection_string == "conn"

    def test_unset_env_gives_empty_strings(self) -> None:
        cfg = Config()
        assert cfg.storage_account == ""
        assert cfg.sub_folder == ""
        assert cfg.log_path is None

    def test_none_is_treated_as_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOCAL_FOLDER", "/srv")
        assert Config(local_folder=None).local_folder == "/srv"

    def test_log_path_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_PATH", "/var/log/upload")
        assert Config().log_path == "/var/log/upload"

    def test_repr_hides_connection_string(self) -> None:
        cfg = Config(connection_string="AccountKey=secret")
        assert "secret" not in repr(cfg)


class TestValidate:
    def test_complete_config_with_account(self, sample_tree: Path) -> None:
        Config(
            storage_account="acct", container_name="box", local_folder=str(sample_tree)
        ).validate()

    def test_complete_config_with_connection_string(self, sample_tree: Path) -> None:
        Config(
            connection_string="conn", container_name="box", local_folder=str(sample_tree)
        ).validate()

    def test_account_and_connection_string_together(self, sample_tree: Path) -> None:
        cfg = Config(
            storage_account="acct",
            connection_string="conn",
            container_name="box",
            local_folder=str(sample_tree),
        )
        cfg.validate()
        assert cfg.uses_connection_string

    def test_missing_local_folder(self) -> None:
        with pytest.raises(ConfigError, match="local folder is required"):
            Config(storage_account="acct", container_name="box").validate()

    def test_missing_container(self, sample_tree: Path) -> None:
        with pytest.raises(ConfigError, match="container name is required"):
            Config(storage_account="acct", local_folder=str(sample_tree)).validate()

    def test_missing_account_and_connection_string(self, sample_tree: Path) -> None:
        with pytest.raises(ConfigError, match="storage account name"):
            Config(container_name="box", local_folder=str(sample_tree)).validate()

    def test_local_folder_checked_first(self) -> None:
        with pytest.raises(ConfigError, match="local folder is required"):
            Config().validate()

    def test_nonexistent_local_folder(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope"
        with pytest.raises(ConfigError, match="does not exist"):
            Config(
                storage_account="acct", container_name="box", local_folder=str(missing)
            ).validate()

    def test_file_path_passes_existence_check(self, tmp_path: Path) -> None:
        target = tmp_path / "single.txt"
        target.write_text("x", encoding="utf-8")
        Config(
            storage_account="acct", container_name="box", local_folder=str(target)
        ).validate()

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(ConfigError, ValueError)
