# frontend/config.py

import os
from dataclasses import dataclass, fields
from typing import Optional, Tuple

import yaml


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 4444
    debug: bool = False
    board_file: Optional[str] = None
    size: Optional[Tuple[int, int]] = None
    seed: Optional[int] = None
    bomb_probability: float = 0.25
    web_host: str = "127.0.0.1"
    web_port: Optional[int] = None
    log_level: str = "INFO"


DEFAULT_SIZE = (10, 10)


def load_config(path: Optional[str]) -> ServerConfig:
    """
    Load the `server` section of a YAML config file. Unknown keys are ignored
    and a missing file gives the defaults.
    """
    config = ServerConfig()
    if not path or not os.path.exists(path):
        return config

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    section = raw.get("server", {}) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{path}: the server section must be a mapping")
    known = {field.name for field in fields(ServerConfig)}
    for key, value in section.items():
        if key not in known:
            continue
        if key == "size" and value is not None:
            value = tuple(int(v) for v in value)
        setattr(config, key, value)
    return config
