"""Configuration handling."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import yaml

from .segments import DEFAULT_TITLE
from .session_io import STATE_KEY

DEFAULT_CONFIG_PATH = "studynote_config.yml"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 5173
    asset_dir: str = "Site"


@dataclass
class StorageConfig:
    state_file: str = "state.json"
    key: str = STATE_KEY


@dataclass
class LoggingConfig:
    level: str = "INFO"
    filename: str = "studynote.log"
    max_bytes: int = 2_000_000
    backup_count: int = 3


@dataclass
class NotesConfig:
    default_title: str = DEFAULT_TITLE


@dataclass
class Config:
    base_dir: str = ""
    debug_logging: bool = False
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    notes: NotesConfig = field(default_factory=NotesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def root(self) -> str:
        return self.base_dir or os.getcwd()

    @property
    def state_path(self) -> str:
        return os.path.join(self.root, "Data", self.storage.state_file)

    @property
    def asset_root(self) -> str:
        return os.path.join(self.root, self.server.asset_dir)

    @property
    def log_dir(self) -> str:
        return os.path.join(self.root, "Logs")


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    server = ServerConfig(**(data.get("server") or {}))
    storage = StorageConfig(**(data.get("storage") or {}))
    notes = NotesConfig(**(data.get("notes") or {}))
    logging_cfg = LoggingConfig(**(data.get("logging") or {}))

    return Config(
        base_dir=data.get("base_dir", "") or "",
        debug_logging=bool(data.get("debug_logging", False)),
        server=server,
        storage=storage,
        notes=notes,
        logging=logging_cfg,
    )


def load_config_or_default(path: str) -> Config:
    if path and os.path.exists(path):
        return load_config(path)
    return Config()


def resolve_port(config: Config) -> int:
    value = os.environ.get("PORT")
    if value:
        return int(value)
    return int(config.server.port)


def save_config(path: str, config: Config) -> None:
    data = {
        "base_dir": config.base_dir,
        "debug_logging": config.debug_logging,
        "server": {
            "host": config.server.host,
            "port": config.server.port,
            "asset_dir": config.server.asset_dir,
        },
        "storage": {
            "state_file": config.storage.state_file,
            "key": config.storage.key,
        },
        "notes": {
            "default_title": config.notes.default_title,
        },
        "logging": {
            "level": config.logging.level,
            "filename": config.logging.filename,
            "max_bytes": config.logging.max_bytes,
            "backup_count": config.logging.backup_count,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
