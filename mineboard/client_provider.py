import os
import pathlib
import platform
from typing import Optional

from temporalio.client import Client
from temporalio.envconfig import ClientConfig

DEFAULT_TASK_QUEUE = "mineboard-task-queue"


# Task queue shared by the worker and the HTTP bridge.
def get_task_queue() -> str:
    return os.getenv("MINEBOARD_TASK_QUEUE", DEFAULT_TASK_QUEUE)


# Connects a Temporal Client. A TEMPORAL_PROFILE names a profile in the
# Temporal config file; otherwise TEMPORAL_ADDRESS and TEMPORAL_NAMESPACE
# (or their local defaults) are used.
async def get_temporal_client() -> Client:
    profile_name = os.getenv("TEMPORAL_PROFILE")
    config_file_path = get_config_file_path()
    if profile_name and config_file_path is not None and config_file_path.is_file():
        connect_config = ClientConfig.load_client_connect_config(
            profile=profile_name,
            config_file=str(config_file_path),
        )
        return await Client.connect(**connect_config)
    return await Client.connect(
        os.getenv("TEMPORAL_ADDRESS", "localhost:7233"),
        namespace=os.getenv("TEMPORAL_NAMESPACE", "default"),
    )


# Location of the Temporal config file: TEMPORAL_CONFIG_FILE if set, else
# the per-OS default. None when the OS default cannot be resolved.
def get_config_file_path() -> Optional[pathlib.Path]:
    explicit = os.getenv("TEMPORAL_CONFIG_FILE")
    if explicit:
        return pathlib.Path(explicit)

    home = pathlib.Path.home()
    system = platform.system()
    if system == "Darwin":
        return home / "Library/Application Support/temporalio/temporal.toml"
    if system == "Windows":
        app_data = os.getenv("AppData")
        return pathlib.Path(app_data) / "temporalio/temporal.toml" if app_data else None

    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    base = pathlib.Path(xdg_config_home) if xdg_config_home else home / ".config"
    return base / "temporalio/temporal.toml"
