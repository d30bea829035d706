import logging
import os
from typing import Any, Dict, NamedTuple, Optional

import yaml

from paradox_core import ResolutionStrategy

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "memory_capacity": 100,
    "similarity_threshold": 0.3,
    "memory_path": None,
    "genealogy_path": None,
    "default_strategy": ResolutionStrategy.TRANSCENDENT_LEAP.value,
    "log_level": "INFO",
    "server_port": 8000,
}


class EngineSettings(NamedTuple):
    memory_capacity: int
    similarity_threshold: float
    memory_path: Optional[str]
    genealogy_path: Optional[str]
    default_strategy: ResolutionStrategy
    log_level: str
    server_port: int


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    logger.warning(f"Config file {config_path} not found. Using defaults.")
    return {}


def get_settings() -> EngineSettings:
    """
    Reads engine settings. Precedence: PARADOX_<KEY> environment variable,
    then the YAML file named by PARADOX_CONFIG, then the built-in default.
    """
    file_cfg = load_config_file(os.getenv("PARADOX_CONFIG"))

    def pick(key: str):
        env = os.getenv(f"PARADOX_{key.upper()}")
        if env is not None and env != "":
            return env
        return file_cfg.get(key, DEFAULTS[key])

    capacity = int(pick("memory_capacity"))
    if capacity < 1:
        logger.warning(f"memory_capacity {capacity} is invalid, falling back to {DEFAULTS['memory_capacity']}")
        capacity = DEFAULTS["memory_capacity"]

    memory_path = pick("memory_path")
    genealogy_path = pick("genealogy_path")

    return EngineSettings(
        memory_capacity=capacity,
        similarity_threshold=float(pick("similarity_threshold")),
        memory_path=str(memory_path) if memory_path else None,
        genealogy_path=str(genealogy_path) if genealogy_path else None,
        default_strategy=ResolutionStrategy(pick("default_strategy")),
        log_level=str(pick("log_level")).upper(),
        server_port=int(pick("server_port")),
    )
