# rpcrouter/config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# defaults, overridable from the environment or a .env file
DEFAULT_HOST: str = os.getenv("RPCROUTER_HOST", "127.0.0.1")
DEFAULT_PORT: int = int(os.getenv("RPCROUTER_PORT", "8000"))
DEFAULT_MOUNT_PATH: str = os.getenv("RPCROUTER_MOUNT_PATH", "/jsonrpc")
DEFAULT_LOG_LEVEL: str = os.getenv("RPCROUTER_LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class RouterSettings:
    warn_on_duplicate: bool = False
    log_level: str | int = DEFAULT_LOG_LEVEL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mount_path: str = DEFAULT_MOUNT_PATH


def coerce_settings(settings: "RouterSettings | dict | None") -> RouterSettings:
    """Normalize settings: accept dataclass or dict or None."""
    if settings is None:
        return RouterSettings()
    if isinstance(settings, RouterSettings):
        return settings
    if isinstance(settings, dict):
        return RouterSettings(**settings)
    raise TypeError("settings must be RouterSettings | dict | None")
