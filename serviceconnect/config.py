"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import FrozenSet, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import BLOCKING_STATUSES, BookingStatus
from .domain.slot_calculator import DEFAULT_SLOT_INTERVAL_MINUTES


class SchedulingConfig(BaseModel):
    """Slot grid and booking policy."""
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
    blocking_statuses: List[BookingStatus] = Field(
        default_factory=lambda: sorted(BLOCKING_STATUSES, key=lambda status: status.value)
    )
    
    @field_validator("slot_interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure the slot step is positive."""
        if value <= 0:
            raise ValueError("slot_interval_minutes must be greater than zero")
        return value
    
    @field_validator("blocking_statuses", mode="before")
    @classmethod
    def normalize_statuses(cls, value):
        """Accept lower-case status names from YAML."""
        if isinstance(value, (list, tuple)):
            return [item.upper() if isinstance(item, str) else item for item in value]
        return value
    
    @field_validator("blocking_statuses")
    @classmethod
    def validate_statuses(cls, value: List[BookingStatus]) -> List[BookingStatus]:
        """Only non-terminal statuses can occupy a time range."""
        if not value:
            raise ValueError("blocking_statuses must not be empty")
        terminal = [status.value for status in value if status.is_terminal()]
        if terminal:
            raise ValueError(f"Terminal statuses cannot block slots: {terminal}")
        # Preserve order while removing duplicates
        seen: set[BookingStatus] = set()
        deduped: List[BookingStatus] = []
        for status in value:
            if status not in seen:
                deduped.append(status)
                seen.add(status)
        return deduped
    
    def blocking_set(self) -> FrozenSet[BookingStatus]:
        return frozenset(self.blocking_statuses)


class ApiConfig(BaseModel):
    """Remote ServiceConnect backend settings."""
    base_url: str = "http://localhost:3000/api"
    token: str = ""
    timeout_seconds: int = 30
    
    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
    
    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    
    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Africa/Nairobi"
    data_file: Optional[Path] = None
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    
    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.
        
        Args:
            config_path: Path to the YAML config file
        
        Returns:
            AppConfig instance
        
        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )
        
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc
        
        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")
        
        config = cls(**data)
        
        # Relative data files are resolved against the config file location
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = (config_path.parent / config.data_file).resolve()
        
        return config
    
    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """
        Load an explicit config file, or the default one if it exists.
        
        Falls back to built-in defaults when no path was given and no
        ``config.yaml`` is found.
        """
        if config_path is not None:
            return cls.load_from_yaml(config_path)
        
        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"
    
    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"
    
    return config_path
