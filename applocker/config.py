"""Configuration of applocker timeouts and locations.

Settings are read from keyword arguments, then ``APPLOCKER_`` environment
variables, then an ``applocker.yml`` file.
"""

import logging
from functools import cache
from pathlib import Path

from platformdirs import user_config_path
from pydantic import Field
from pydantic_settings import (
	BaseSettings,
	PydanticBaseSettingsSource,
	SettingsConfigDict,
	YamlConfigSettingsSource,
)

from applocker.consts import (
	APP_AUTHOR,
	APP_NAME,
	DEFAULT_ACCEPT_TIMEOUT,
	DEFAULT_CLIENT_TIMEOUT,
	DEFAULT_GLOBAL_LOCK_TIMEOUT,
	DEFAULT_MAX_MESSAGE_SIZE,
	DEFAULT_PORT_TIMEOUT,
	DEFAULT_RETRY_INTERVAL,
	TMP_DIR,
)
from applocker.enums import LogLevel

log = logging.getLogger(__name__)

config_file_name = "applocker.yml"


def get_config_file_paths(file_path: str) -> list[Path]:
	"""Get the paths to search for a config file.

	Paths are searched in the following order:
	1. the current working directory
	2. the user configuration directory

	Args:
		file_path: The name of the config file.

	Returns:
		An ordered list of paths to search for the config file.
	"""
	return [
		Path.cwd() / file_path,
		user_config_path(APP_NAME, APP_AUTHOR) / file_path,
	]


def search_existing_path(paths: list[Path]) -> Path:
	"""Search for an existing path in a list of paths.

	Args:
		paths: A list of paths to search.

	Returns:
		The first existing path found, the last path otherwise.
	"""
	for p in paths:
		if p.exists():
			return p
	return paths[-1]


def get_settings_config_dict(file_path: str) -> SettingsConfigDict:
	"""Get the settings config dict for a config file.

	Args:
		file_path: The name of the config file.

	Returns:
		The settings config dict for the config file.
	"""
	return SettingsConfigDict(
		env_prefix="APPLOCKER_",
		extra="ignore",
		yaml_file=search_existing_path(get_config_file_paths(file_path)),
		yaml_file_encoding="UTF-8",
	)


class AppLockerConfig(BaseSettings):
	model_config = get_settings_config_dict(config_file_name)

	lock_dir: Path = Field(default=Path(TMP_DIR))
	global_lock_timeout: float = Field(default=DEFAULT_GLOBAL_LOCK_TIMEOUT, gt=0)
	port_timeout: float = Field(default=DEFAULT_PORT_TIMEOUT, gt=0)
	client_timeout: float = Field(default=DEFAULT_CLIENT_TIMEOUT, gt=0)
	retry_interval: float = Field(default=DEFAULT_RETRY_INTERVAL, gt=0)
	accept_timeout: float = Field(default=DEFAULT_ACCEPT_TIMEOUT, gt=0)
	max_message_size: int = Field(default=DEFAULT_MAX_MESSAGE_SIZE, gt=0)
	log_level: LogLevel = Field(default=LogLevel.WARNING)

	@classmethod
	def settings_customise_sources(
		cls,
		settings_cls: type[BaseSettings],
		init_settings: PydanticBaseSettingsSource,
		env_settings: PydanticBaseSettingsSource,
		dotenv_settings: PydanticBaseSettingsSource,
		file_secret_settings: PydanticBaseSettingsSource,
	) -> tuple[PydanticBaseSettingsSource, ...]:
		"""Customise the source and order of settings loading.

		Settings are loaded in the following order of priority:
		1. Initial settings
		2. Environment variables
		3. YAML file

		Args:
			settings_cls: The settings class model to load.
			init_settings: A helper class to get settings from init objects.
			env_settings: A helper class to get settings from environment variables.
			dotenv_settings: A helper class to get settings from .env files.
			file_secret_settings: A helper class to get settings from secret files.

		Returns:
			A tuple of settings sources in the order they should be loaded and merged.
		"""
		return (
			init_settings,
			env_settings,
			YamlConfigSettingsSource(settings_cls),
		)


@cache
def get_app_locker_config() -> AppLockerConfig:
	log.debug("Loading applocker config")
	return AppLockerConfig()
