"""
Parameter sweep expansion for parametric exploration.

Expands a config with sweep specifications into multiple configs,
one for each parameter combination.
"""

import copy
import itertools
from dataclasses import replace
from typing import Any, Iterator

import numpy as np

from .schema import Config, SweepConfig


def expand_sweeps(config: Config) -> Iterator[Config]:
    """
    Expand a configuration with sweeps into individual configurations.

    If no sweeps are defined, yields the original config once.

    Parameters
    ----------
    config : Config
        Configuration potentially containing sweep specifications.

    Yields
    ------
    Config
        Individual configurations with sweep parameters resolved.
    """
    if not config.sweeps:
        yield replace(config, sweeps=[])
        return

    paths = [sweep.path for sweep in config.sweeps]
    value_lists = [_expand_sweep_values(sweep) for sweep in config.sweeps]

    # Cartesian product of all sweep parameters
    for combo in itertools.product(*value_lists):
        new_config = _apply_values(config, paths, combo)
        yield replace(new_config, sweeps=[])


def _expand_sweep_values(sweep: SweepConfig) -> list[Any]:
    """Convert sweep specification to list of values."""
    if sweep.linspace is not None:
        start, stop, num = sweep.linspace
        return np.linspace(start, stop, int(num)).tolist()
    elif sweep.logspace is not None:
        start, stop, num = sweep.logspace
        return np.logspace(start, stop, int(num)).tolist()
    elif sweep.values is not None:
        return list(sweep.values)
    else:
        raise ValueError(f"Sweep at path '{sweep.path}' has no values specified. "
                         "Use linspace, logspace, or values.")


def _apply_values(config: Config, paths: list[str], values: tuple[Any, ...]) -> Config:
    """Apply sweep values to a deep copy of the config."""
    new_config = copy.deepcopy(config)

    for path, value in zip(paths, values):
        _set_nested_value(new_config, path, value)

    return new_config


def _step(obj: Any, key: str) -> Any:
    """Go one level down: attribute of the config, key of a dict or index of a list."""
    if isinstance(obj, Config):
        return getattr(obj, key)
    if isinstance(obj, list):
        return obj[int(key)]
    return obj[key]


def _set_nested_value(obj: Any, path: str, value: Any) -> None:
    """
    Set a nested value using dot notation.

    Example: path="domain.nb_vertices" sets config.domain["nb_vertices"] = value,
             path="constraints.1.target" sets config.constraints[1]["target"] = value
    """
    parts = path.split(".")
    for part in parts[:-1]:
        obj = _step(obj, part)

    last = parts[-1]
    if isinstance(obj, Config):
        setattr(obj, last, value)
    elif isinstance(obj, list):
        obj[int(last)] = value
    else:
        obj[last] = value


def _get_nested_value(obj: Any, path: str) -> Any:
    """
    Get a nested value using dot notation.

    Example: path="hierarchy.min_vertices" returns config.hierarchy["min_vertices"]
    """
    for part in path.split("."):
        obj = _step(obj, part)
    return obj


def count_sweep_combinations(config: Config) -> int:
    """
    Count the total number of configurations that would be generated.

    Returns 1 if no sweeps are defined.
    """
    total = 1
    for sweep in config.sweeps:
        total *= len(_expand_sweep_values(sweep))
    return total
