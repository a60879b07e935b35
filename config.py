"""Configuration management for URL shortener.

Precedence, highest first: environment variables, command-line flags, JSON
config file, built-in defaults.
"""

import argparse
import json
import os
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


HTTPS_SERVER_ADDRESS = "localhost:8443"

# JSON config file keys understood by load_config
JSON_CONFIG_KEYS = (
    "server_address",
    "base_url",
    "file_storage_path",
    "database_dsn",
    "enable_https",
    "trusted_subnet",
)


class Config(BaseSettings):
    """Application configuration."""
    
    # Server settings
    server_address: str = Field(
        default="localhost:8080",
        description="host:port the HTTP server listens on"
    )
    
    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL prepended to short IDs"
    )
    
    enable_https: bool = Field(
        default=False,
        description="Serve over HTTPS (requires tls_cert_file and tls_key_file)"
    )
    
    tls_cert_file: Optional[str] = Field(
        default=None,
        description="TLS certificate path used when enable_https is set"
    )
    
    tls_key_file: Optional[str] = Field(
        default=None,
        description="TLS private key path used when enable_https is set"
    )
    
    timeout: float = Field(
        default=15,
        gt=0,
        description="Request timeout in seconds"
    )
    
    # Storage settings
    database_dsn: str = Field(
        default="",
        description="PostgreSQL DSN; selects the database backend when set"
    )
    
    file_storage_path: str = Field(
        default="",
        description="Backup log path; selects the file backend when set and no DSN is given"
    )
    
    # URL shortener settings
    short_id_length: int = Field(
        default=10,
        ge=4,
        description="Length of generated short IDs"
    )
    
    num_workers: int = Field(
        default=15,
        ge=1,
        description="Worker tasks per deletion job"
    )
    
    trusted_subnet: str = Field(
        default="",
        description="CIDR allowed to read /api/internal/stats; empty denies everyone"
    )
    
    cookie_secret: str = Field(
        default="very-very-very-very-secret-key32",
        description="Secret used to sign the AuthToken cookie"
    )
    
    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )
    
    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )
    
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }
    
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values passed in (flags merged over JSON file).
        return env_settings, dotenv_settings, init_settings, file_secret_settings
    
    @property
    def host(self) -> str:
        return self.server_address.rpartition(":")[0] or "localhost"
    
    @property
    def port(self) -> int:
        port = self.server_address.rpartition(":")[2]
        return int(port) if port.isdigit() else 8080


def build_parser() -> argparse.ArgumentParser:
    """Command-line flags of the server."""
    parser = argparse.ArgumentParser(description="URL shortener service")
    parser.add_argument("-a", dest="server_address", help="HTTP server address (host:port)")
    parser.add_argument("-b", dest="base_url", help="Base URL of shortened links")
    parser.add_argument("-f", dest="file_storage_path", help="Backup log path")
    parser.add_argument("-d", dest="database_dsn", help="PostgreSQL DSN")
    parser.add_argument("-s", dest="enable_https", action="store_true", default=None, help="Enable HTTPS")
    parser.add_argument("-t", dest="trusted_subnet", help="Trusted subnet (CIDR) for internal stats")
    parser.add_argument("-w", dest="num_workers", type=int, help="Deletion workers per job")
    parser.add_argument("-c", "-config", dest="config", help="JSON config file path")
    return parser


def read_json_config(path: str) -> Dict[str, Any]:
    """Read the known keys of a JSON config file.
    
    Raises:
        ValueError: If the file is not a JSON object
        OSError: If the file cannot be read
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return {key: data[key] for key in JSON_CONFIG_KEYS if key in data}


def load_config(argv: Optional[List[str]] = None) -> Config:
    """Load configuration from environment, flags and an optional JSON file.
    
    Args:
        argv: Command-line arguments (without program name); None reads
            nothing from the command line
    """
    args = build_parser().parse_args(argv or [])
    
    values: Dict[str, Any] = {}
    config_path = os.environ.get("CONFIG") or args.config
    if config_path:
        values.update(read_json_config(config_path))
    
    flags = {
        key: value
        for key, value in vars(args).items()
        if key != "config" and value is not None
    }
    values.update(flags)
    
    config = Config(**values)
    
    if config.enable_https and "server_address" not in values and not _env_has("SERVER_ADDRESS"):
        config.server_address = HTTPS_SERVER_ADDRESS
        if "base_url" not in values and not _env_has("BASE_URL"):
            config.base_url = f"https://{HTTPS_SERVER_ADDRESS}"
    
    return config


def _env_has(name: str) -> bool:
    return any(key.upper() == name for key in os.environ)
