"""
Configuration Loader - Manages YAML configuration and environment variables
"""
import yaml
import os
from typing import Any, Optional

DEFAULT_CONTENT_BASE = "content://media/external/audio/media"
DEFAULT_ARTWORK_BASE = "content://media/external/audio/albumart"


class Config:
    """Configuration manager for the media catalog scanner"""

    def __init__(self, config_path: str = "config.yaml", data: Optional[dict] = None):
        self.config_path = str(config_path)
        self.config = data if data is not None else self._load_config()
        self._validate_config()

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a configuration without reading a file"""
        return cls(config_path="<dict>", data=data)

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def _validate_config(self):
        """Reject configs that cannot locate a media index"""
        if not isinstance(self.config, dict):
            raise ValueError(f"Configuration must be a mapping: {self.config_path}")
        if "index" not in self.config:
            raise ValueError("Missing configuration section: index")
        for section in ("index", "scan", "logging"):
            value = self.config.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping: {self.config_path}")

        db_path = (self.config["index"] or {}).get("database_path")
        if db_path is None:
            raise ValueError("Missing configuration field: index.database_path")
        if not db_path or str(db_path).startswith("YOUR_"):
            raise ValueError(f"Please set index.database_path in {self.config_path}")

        max_workers = self.max_workers
        if not isinstance(max_workers, int) or max_workers < 1:
            raise ValueError(f"scan.max_workers must be a positive integer, got {max_workers!r}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Value of section.key, or default when the section or key is absent"""
        if section not in self.config or not self.config[section]:
            return default
        return self.config[section].get(key, default)

    @property
    def index_database_path(self) -> str:
        """Get media index database path (with environment variable override)"""
        return os.getenv('MEDIA_INDEX_DB') or str(self.config['index']['database_path'])

    @property
    def content_base(self) -> str:
        """Base reference that playable content references are built from"""
        return str(self.get('index', 'content_base', DEFAULT_CONTENT_BASE)).rstrip('/')

    @property
    def artwork_base(self) -> str:
        """Base reference that album artwork references are built from"""
        return str(self.get('index', 'artwork_base', DEFAULT_ARTWORK_BASE)).rstrip('/')

    @property
    def parallel_queries(self) -> bool:
        """Run the three catalog queries on a worker pool"""
        return bool(self.get('scan', 'parallel', True))

    @property
    def max_workers(self) -> int:
        """Worker pool size for parallel catalog queries"""
        return self.get('scan', 'max_workers', 3)

    @property
    def log_level(self) -> str:
        """Get console log level"""
        return str(self.get('logging', 'level', 'INFO')).upper()

    @property
    def log_file(self) -> Optional[str]:
        """Get optional log file path"""
        return self.get('logging', 'file')
