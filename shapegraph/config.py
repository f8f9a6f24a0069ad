"""Configuration helpers for graph construction and path selection."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Tunable constants shared by the builder and the selection controller."""

    average_distance_factor: float = 0.6
    node_count_decay: float = 0.1
    min_node_count_factor: float = 0.3
    min_diagonal_ratio: float = 0.3
    max_diagonal_ratio: float = 0.8
    repair_distance_factor: float = 1.5
    node_radius: float = 20.0
    status_reset_delay: float = 3.0
    default_algorithm: str = "dijkstra"


_ENGINE_CONFIG = EngineConfig()


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _ENGINE_CONFIG = copy.deepcopy(config)


__all__ = ["EngineConfig", "get_engine_config", "set_engine_config"]
