"""Typed application settings built from the hydra config."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from omegaconf import DictConfig, OmegaConf


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class StorageConfig:
    temp_dir: str = "./temp"


@dataclass
class ExtractorConfig:
    timeout: int = 30
    user_agent: Optional[str] = None


@dataclass
class RelayConfig:
    chunk_size: int = 64 * 1024
    connect_timeout: float = 15
    read_timeout: float = 60


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """All settings, passed explicitly to the components that need them."""

    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def temp_dir(self) -> Path:
        return Path(self.storage.temp_dir)

    @classmethod
    def from_dictconfig(cls, cfg: DictConfig) -> "AppConfig":
        """
        Merge a hydra config onto the defaults.

        Unknown top-level keys (``mode``, ``url``, ...) are ignored.
        """
        schema = OmegaConf.structured(cls)
        known = {key: cfg[key] for key in cfg if key in schema}
        merged = OmegaConf.merge(schema, known)
        return OmegaConf.to_object(merged)
