"""Configuration for a folder upload: explicit flags first, environment second."""

import os
from pathlib import Path
from typing import Optional

ENV_ACCOUNT = "AZURE_STORAGE_ACCOUNT"
ENV_CONTAINER = "AZURE_STORAGE_CONTAINER"
ENV_SUBFOLDER = "AZURE_STORAGE_SUBFOLDER"
ENV_LOCAL_FOLDER = "LOCAL_FOLDER"
ENV_CONN_STR = "AZURE_STORAGE_CONNECTION_STRING"
ENV_LOG_PATH = "LOG_PATH"


class ConfigError(ValueError):
    """Raised when the resolved configuration cannot be used."""


def _value_or_env(value: Optional[str], env_var: str) -> str:
    if value:
        return value
    return os.getenv(env_var, "")


class Config:
    def __init__(
        self,
        storage_account: Optional[str] = "",
        container_name: Optional[str] = "",
        sub_folder: Optional[str] = "",
        local_folder: Optional[str] = "",
        connection_string: Optional[str] = "",
    ) -> None:
        self.storage_account: str = _value_or_env(storage_account, ENV_ACCOUNT)
        self.container_name: str = _value_or_env(container_name, ENV_CONTAINER)
        self.sub_folder: str = _value_or_env(sub_folder, ENV_SUBFOLDER)
        self.local_folder: str = _value_or_env(local_folder, ENV_LOCAL_FOLDER)
        self.connection_string: str = _value_or_env(connection_string, ENV_CONN_STR)
        self.log_path: Optional[str] = os.getenv(ENV_LOG_PATH) or None

    def __repr__(self) -> str:
        # Never echo the connection string, it carries the account key.
        return (
            f"Config(storage_account={self.storage_account!r}, "
            f"container_name={self.container_name!r}, "
            f"sub_folder={self.sub_folder!r}, "
            f"local_folder={self.local_folder!r}, "
            f"connection_string={'<set>' if self.connection_string else ''!r})"
        )

    @property
    def uses_connection_string(self) -> bool:
        return bool(self.connection_string)

    def validate(self) -> None:
        """Check required fields in a fixed order and stop at the first problem.

        The folder existence check is best effort: nothing stops the folder
        from disappearing between here and the upload.
        """
        if not self.local_folder:
            raise ConfigError(
                f"local folder is required (use -folder or {ENV_LOCAL_FOLDER} env var)"
            )
        if not self.container_name:
            raise ConfigError(
                f"container name is required (use -container or {ENV_CONTAINER} env var)"
            )
        if not self.storage_account and not self.connection_string:
            raise ConfigError(
                f"either storage account name (use -account or {ENV_ACCOUNT} env var) "
                f"or connection string (use -connection or {ENV_CONN_STR} env var) is required"
            )
        if not Path(self.local_folder).exists():
            raise ConfigError(f"local folder '{self.local_folder}' does not exist")
