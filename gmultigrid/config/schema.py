"""
Configuration schema.

Minimal schema that mirrors how a run is assembled:
- domain: polyline shape and discretization
- constraints: list of constraint families, stacked in the given order
- hierarchy: when to stop coarsening
- solve: right-hand side of the coarsest-level check
- sweeps: parameter sweep specifications

Each section is a raw dict (or a list of raw dicts) - semantic knowledge lives in the consuming
code (run.py), not here.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SweepConfig:
    """
    One swept parameter.

    `path` is a dot path into the sections, e.g. "domain.nb_vertices" or "constraints.0.target".
    Exactly one of `values`, `linspace` ([start, stop, num]) or `logspace` ([start, stop, num])
    is expected.
    """
    path: str
    values: list[Any] | None = None
    linspace: list[float] | None = None
    logspace: list[float] | None = None


@dataclass
class Config:
    """
    Top-level configuration.

    First-level keys match the stages of a run.
    """
    domain: dict[str, Any]
    constraints: list[dict[str, Any]] = field(default_factory=list)
    hierarchy: dict[str, Any] = field(default_factory=dict)
    solve: dict[str, Any] = field(default_factory=dict)
    sweeps: list[SweepConfig] = field(default_factory=list)
