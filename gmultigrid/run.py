"""
Black-box execution of a multigrid setup.

Provides run_from_config() and run_sweep() - config in, summary out.
Helper functions translate config to primitives.
"""

import logging
import pathlib
import timeit
import typing
from typing import Any

import numpy as np
import numpy.random as random

from gmultigrid.config import Config, expand_sweeps, count_sweep_combinations, get_constraint_types
from gmultigrid.multigrid.hierarchy import Hierarchy, build_hierarchy
from gmultigrid.numeric.operator import ProlongationMode
from gmultigrid.numeric.sparse import infinity_norm
from gmultigrid.problem.constraints import (
    LinearConstraints, SumConstraint, BarycenterConstraint, PinConstraint, ConstraintStack)
from gmultigrid.problem.geometry import generate_polyline, arclength, lumped_mass
from gmultigrid.problem.polyline import PolylineDomain
from gmultigrid.runtime.logging import logging_to_file


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers: config -> primitives
# -----------------------------------------------------------------------------

def generate_positions_from_config(config: Config) -> np.ndarray:
    """
    Generate the polyline from the domain section.

    Extracts shape and size and passes the remaining shape parameters to generate_polyline.
    """
    cfg = dict(config.domain)  # copy to avoid mutation
    shape = cfg.pop("shape")
    nb_vertices = cfg.pop("nb_vertices")
    for key in ["regularization", "values", "seed"]:
        cfg.pop(key, None)
    return generate_polyline(shape, nb_vertices, **cfg)


def build_initial_values(config: Config, positions: np.ndarray) -> np.ndarray:
    """The field values the constraints are evaluated on at the start."""
    kind = config.domain.get("values", "zeros")
    nb_vertices = len(positions)

    if kind == "zeros":
        return np.zeros(nb_vertices)
    elif kind == "arclength":
        s = arclength(positions)
        return s / s[-1]
    elif kind == "random":
        rng = random.default_rng(config.domain.get("seed"))
        return rng.standard_normal(nb_vertices)
    else:
        raise ValueError(f"Unknown initial values: {kind}")


def build_constraint(constraint_cfg: dict[str, Any], positions: np.ndarray, values: np.ndarray) -> LinearConstraints:
    """Build one constraint family from its configuration table."""
    cfg = dict(constraint_cfg)
    constraint_type = cfg.pop("type")
    nb_vertices = len(positions)

    # negative indices count from the end, as in Python
    indices = cfg.get("indices")
    if indices is not None:
        indices = np.asarray(indices, dtype=int) % nb_vertices

    if constraint_type == "sum":
        return SumConstraint(nb_vertices, cfg["target"], indices=indices, weights=cfg.get("weights"), values=values)
    elif constraint_type == "barycenter":
        return BarycenterConstraint(lumped_mass(positions), values)
    elif constraint_type == "pin":
        if indices is None:
            raise ValueError("A pin constraint needs the indices of the pinned vertices")
        return PinConstraint(values, indices)
    else:
        raise ValueError(f"Unknown constraint type: {constraint_type}")


def build_constraints_from_config(config: Config, positions: np.ndarray, values: np.ndarray) -> LinearConstraints:
    """Stack all configured constraints; a single one is used as is."""
    if not config.constraints:
        raise ValueError("At least one constraint is needed to form a saddle problem")
    parts = [build_constraint(each, positions, values) for each in config.constraints]
    if len(parts) == 1:
        return parts[0]
    return ConstraintStack(parts)


def build_domain_from_config(config: Config) -> PolylineDomain:
    """Create the finest domain from configuration."""
    positions = generate_positions_from_config(config)
    values = build_initial_values(config, positions)
    constraints = build_constraints_from_config(config, positions, values)
    regularization = config.domain.get("regularization", 1e-2)
    return PolylineDomain(positions, constraints, regularization=regularization)


def build_hierarchy_from_config(config: Config, finest: PolylineDomain) -> Hierarchy:
    hierarchy_cfg = config.hierarchy
    return build_hierarchy(
        finest,
        min_vertices=hierarchy_cfg.get("min_vertices", 8),
        max_levels=hierarchy_cfg.get("max_levels", 20),
    )


# -----------------------------------------------------------------------------
# Checks performed by a run
# -----------------------------------------------------------------------------

def measure_constraint_violation(domain: PolylineDomain) -> float:
    """Infinity norm of the constraint residual at the current values."""
    constraints = domain.constraints
    targets = constraints.update_target_values()
    b = np.zeros(domain.num_rows())
    return constraints.fill_constraint_values(b, targets, domain.num_vertices())


def correct_constraints_on_coarsest(hierarchy: Hierarchy) -> np.ndarray:
    """
    Satisfy the (linear) constraints of the finest level with one coarsest-level correction.

    The constraint residual is restricted to the coarsest level, solved there directly, and the
    correction is prolonged back. Returns the corrected values of the finest level.
    """
    finest = hierarchy.finest
    constraints = finest.constraints
    nb_vertices = finest.num_vertices()

    targets = constraints.update_target_values()
    b = np.zeros(finest.num_rows())
    constraints.fill_constraint_values(b, targets, nb_vertices)

    b_coarse = hierarchy.restrict_to_coarsest(b, ProlongationMode.MATRIX_AND_CONSTRAINTS)
    x_coarse = hierarchy.solve_coarsest(b_coarse)
    x = hierarchy.prolong_to_finest(x_coarse, ProlongationMode.MATRIX_AND_CONSTRAINTS)

    return constraints.values + x[:nb_vertices]


def check_coarsest_direct_solve(hierarchy: Hierarchy, rng: random.Generator) -> float:
    """Solve for a manufactured solution on the coarsest level; returns the error."""
    coarsest = hierarchy.coarsest
    x_true = rng.standard_normal(coarsest.num_rows())
    b = coarsest.get_full_matrix() @ x_true
    x = hierarchy.solve_coarsest(b)
    return infinity_norm(x - x_true)


class RunSummary(typing.NamedTuple):
    level_sizes: list[int]
    constraint_violation: float
    corrected_violation: float
    coarsest_error: float
    time: float

    @property
    def nb_levels(self) -> int:
        return len(self.level_sizes)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def run_from_config(config: Config) -> RunSummary:
    """
    Run a single setup from config.

    This is the black-box interface: config in, summary out. It builds the finest domain and its
    coarsening chain, corrects the finest-level constraints through the coarsest level, and
    checks the coarsest direct solve against a manufactured solution.

    Parameters
    ----------
    config : Config
        Complete run configuration.

    Returns
    -------
    RunSummary
        Sizes of the levels and the measured errors.
    """
    solve_cfg = config.solve
    tol_constraint = solve_cfg.get("tol_constraint", 1e-8)
    rng = random.default_rng(solve_cfg.get("seed"))

    t_exec = -timeit.default_timer()
    finest = build_domain_from_config(config)
    hierarchy = build_hierarchy_from_config(config, finest)
    level_sizes = [domain.num_vertices() for domain in hierarchy.domains]
    logger.info(f"Constraints: {', '.join(get_constraint_types(config))}; levels: {level_sizes}")

    violation = measure_constraint_violation(finest)
    logger.info(f"Constraint violation at start: {violation:.1e}")

    finest.set_values(correct_constraints_on_coarsest(hierarchy))
    corrected_violation = measure_constraint_violation(finest)
    logger.info(f"Constraint violation after coarsest-level correction: {corrected_violation:.1e}")
    if corrected_violation > tol_constraint:
        logger.warning(f"WARNING: constraint violation exceeds the tolerance {tol_constraint:.1e}.")

    coarsest_error = check_coarsest_direct_solve(hierarchy, rng)
    logger.info(f"Coarsest direct solve ({hierarchy.coarsest.num_rows()} rows) error: {coarsest_error:.1e}")
    t_exec += timeit.default_timer()

    logger.info(f"Total time: {t_exec:.1e} seconds.")
    return RunSummary(level_sizes, violation, corrected_violation, coarsest_error, t_exec)


def run_sweep(config: Config, log_dir: str | pathlib.Path | None = None) -> list[RunSummary]:
    """
    Run setup(s) from config, handling sweeps if present.

    If config has no sweeps, runs a single setup. With `log_dir`, each run writes its own log
    file `run-<index>.log` in that folder.

    Parameters
    ----------
    config : Config
        Configuration, possibly with sweep definitions.
    log_dir : str | Path | None
        Folder for per-run log files.

    Returns
    -------
    list[RunSummary]
        One summary per run.
    """
    nb_configs = count_sweep_combinations(config)
    if log_dir is not None:
        log_dir = pathlib.Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

    results = []
    for index, expanded_config in enumerate(expand_sweeps(config)):
        if log_dir is None:
            logger.info(f"Run #{index + 1} of {nb_configs} runs.")
            results.append(run_from_config(expanded_config))
            continue

        with logging_to_file(log_dir / f"run-{index}.log"):
            logger.info(f"Run #{index + 1} of {nb_configs} runs.")
            results.append(run_from_config(expanded_config))

    return results
