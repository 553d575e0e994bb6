"""
Configuration module for TOML-based run parameters.

Provides:
- Schema dataclasses for typed configuration
- TOML loading and saving
- Parameter sweep expansion for parametric exploration
"""

from .schema import Config, SweepConfig

from .loader import load_config, loads_config, save_config, get_constraint_types

from .sweep import expand_sweeps, count_sweep_combinations

__all__ = [
    # Schema classes
    "Config",
    "SweepConfig",
    # Loader functions
    "load_config",
    "loads_config",
    "save_config",
    "get_constraint_types",
    # Sweep functions
    "expand_sweeps",
    "count_sweep_combinations",
]
