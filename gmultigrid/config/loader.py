"""
TOML configuration loading and saving.

Uses tomllib (Python 3.11+) or tomli (backport) for reading,
and tomli_w for writing.
"""

import dataclasses as dc
import sys
from pathlib import Path
from typing import Any

# Import tomllib or backport
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .schema import Config, SweepConfig


def load_config(path: str | Path) -> Config:
    """Load a TOML configuration file and return a Config object."""
    path = Path(path)
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return config_from_dict(data)


def loads_config(text: str) -> Config:
    """Parse TOML text and return a Config object."""
    return config_from_dict(tomllib.loads(text))


def config_from_dict(data: dict[str, Any]) -> Config:
    data = dict(data)
    # Extract sweeps (TOML uses [[sweep]] array syntax)
    sweeps = [SweepConfig(**each) for each in data.pop("sweep", [])]

    return Config(
        domain=data["domain"],
        constraints=data.get("constraints", []),
        hierarchy=data.get("hierarchy", {}),
        solve=data.get("solve", {}),
        sweeps=sweeps,
    )


def save_config(config: Config, path: str | Path) -> None:
    """Save a Config object to a TOML file."""
    path = Path(path)
    data: dict[str, Any] = {"domain": config.domain}

    if config.constraints:
        data["constraints"] = config.constraints
    if config.hierarchy:
        data["hierarchy"] = config.hierarchy
    if config.solve:
        data["solve"] = config.solve
    if config.sweeps:
        # TOML has no null, leave out the unset fields
        data["sweep"] = [{k: v for [k, v] in dc.asdict(sweep).items() if v is not None} for sweep in config.sweeps]

    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def get_constraint_types(config: Config) -> list[str]:
    """
    Get the type names of the configured constraints, in stacking order.

    Parameters
    ----------
    config : Config
        The configuration object.

    Returns
    -------
    list[str]
        The constraint type names.
    """
    return [each["type"] for each in config.constraints]
