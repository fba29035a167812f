"""Configuration management for the homeshelf CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import DEFAULT_PORT
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("HOMESHELF_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("HOMESHELF_SERVER_PORT", str(DEFAULT_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.homeshelf/config.json)
        """
        self.config_path = Path(config_path)
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.homeshelf' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root is not an object")
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (ValueError, OSError) as e:
                logger.warning(f"Config {self.config_path} unreadable ({e}), using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write default config to {self.config_path}: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def set_server(self, host: str, port: int) -> None:
        """
        Point the CLI at another server and save to file.

        Args:
            host: Server hostname or IP
            port: Server port
        """
        self.data['server_host'] = host
        self.data['server_port'] = int(port)
        self.save()

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:3001")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', DEFAULT_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
