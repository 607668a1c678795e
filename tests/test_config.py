"""Tests for the applocker configuration."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError
from pydantic_settings import SettingsConfigDict

from applocker import AppLockerConfig, get_app_locker_config
from applocker.config import get_config_file_paths, search_existing_path
from applocker.consts import TMP_DIR
from applocker.enums import LogLevel


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
	"""Run every test away from user configuration files and variables."""
	monkeypatch.chdir(tmp_path)
	for name in (
		"APPLOCKER_LOCK_DIR",
		"APPLOCKER_GLOBAL_LOCK_TIMEOUT",
		"APPLOCKER_PORT_TIMEOUT",
		"APPLOCKER_CLIENT_TIMEOUT",
		"APPLOCKER_RETRY_INTERVAL",
		"APPLOCKER_LOG_LEVEL",
	):
		monkeypatch.delenv(name, raising=False)


def make_config_class(yaml_file: Path) -> type[AppLockerConfig]:
	class FileConfig(AppLockerConfig):
		model_config = SettingsConfigDict(yaml_file=yaml_file)

	return FileConfig


class TestAppLockerConfig:
	"""Test defaults, sources and validation of the configuration."""

	def test_defaults(self, tmp_path):
		config = make_config_class(tmp_path / "missing.yml")()
		assert config.lock_dir == Path(TMP_DIR)
		assert config.global_lock_timeout == 10.0
		assert config.port_timeout == 5.0
		assert config.client_timeout == 5.0
		assert config.retry_interval == 0.05
		assert config.max_message_size == 16 * 1024 * 1024
		assert config.log_level == LogLevel.WARNING

	def test_init_arguments(self, tmp_path):
		config = AppLockerConfig(lock_dir=tmp_path, port_timeout=1.5)
		assert config.lock_dir == tmp_path
		assert config.port_timeout == 1.5

	def test_environment(self, monkeypatch, tmp_path):
		monkeypatch.setenv("APPLOCKER_GLOBAL_LOCK_TIMEOUT", "3.5")
		monkeypatch.setenv("APPLOCKER_LOCK_DIR", str(tmp_path / "env"))
		config = make_config_class(tmp_path / "missing.yml")()
		assert config.global_lock_timeout == 3.5
		assert config.lock_dir == tmp_path / "env"

	def test_yaml_file(self, tmp_path):
		yaml_file = tmp_path / "applocker.yml"
		yaml_file.write_text(
			yaml.dump({"port_timeout": 7.0, "log_level": "debug"}),
			encoding="UTF-8",
		)
		config = make_config_class(yaml_file)()
		assert config.port_timeout == 7.0
		assert config.log_level == LogLevel.DEBUG

	def test_priority(self, monkeypatch, tmp_path):
		"""Test that arguments beat environment which beats the file."""
		yaml_file = tmp_path / "applocker.yml"
		yaml_file.write_text(
			yaml.dump({"port_timeout": 7.0, "client_timeout": 7.0, "retry_interval": 0.7}),
			encoding="UTF-8",
		)
		monkeypatch.setenv("APPLOCKER_PORT_TIMEOUT", "8.0")
		monkeypatch.setenv("APPLOCKER_CLIENT_TIMEOUT", "8.0")
		config = make_config_class(yaml_file)(port_timeout=9.0)
		assert config.port_timeout == 9.0
		assert config.client_timeout == 8.0
		assert config.retry_interval == 0.7

	@pytest.mark.parametrize(
		"field", ["global_lock_timeout", "port_timeout", "retry_interval", "max_message_size"]
	)
	def test_positive_values(self, field):
		with pytest.raises(ValidationError):
			AppLockerConfig(**{field: 0})

	def test_invalid_log_level(self):
		with pytest.raises(ValidationError):
			AppLockerConfig(log_level="verbose")

	def test_get_app_locker_config_is_cached(self):
		get_app_locker_config.cache_clear()
		try:
			assert get_app_locker_config() is get_app_locker_config()
		finally:
			get_app_locker_config.cache_clear()


class TestConfigFileSearch:
	"""Test the lookup of the configuration file."""

	def test_search_order(self):
		paths = get_config_file_paths("applocker.yml")
		assert paths[0] == Path.cwd() / "applocker.yml"
		assert paths[-1].name == "applocker.yml"

	def test_first_existing_path(self, tmp_path):
		first = tmp_path / "first.yml"
		second = tmp_path / "second.yml"
		second.touch()
		assert search_existing_path([first, second]) == second
		first.touch()
		assert search_existing_path([first, second]) == first

	def test_fallback_to_last_path(self, tmp_path):
		paths = [tmp_path / "a.yml", tmp_path / "b.yml"]
		assert search_existing_path(paths) == paths[-1]
