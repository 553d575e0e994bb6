"""
The chain of domains walked by a multigrid solver, from the finest level to the coarsest one.
"""

import dataclasses as dc
import logging

import numpy as np

from gmultigrid.errors import CoarseningError
from gmultigrid.multigrid.domain import MultigridDomain
from gmultigrid.numeric.operator import ProlongationMode


logger = logging.getLogger(__name__)


@dc.dataclass
class Hierarchy:
    """Domains ordered from fine to coarse.

    `operators[k]` transfers between `domains[k]` (upper) and `domains[k + 1]` (lower).
    """

    domains: list[MultigridDomain]
    operators: list = dc.field(default_factory=list)

    def __post_init__(self):
        assert len(self.domains) >= 1
        assert len(self.operators) == len(self.domains) - 1

    @property
    def nb_levels(self) -> int:
        return len(self.domains)

    @property
    def finest(self) -> MultigridDomain:
        return self.domains[0]

    @property
    def coarsest(self) -> MultigridDomain:
        return self.domains[-1]

    def restrict_to_coarsest(self, v: np.ndarray, mode: ProlongationMode = ProlongationMode.MATRIX_ONLY):
        for op in self.operators:
            v = op.restrict(v, mode)
        return v

    def prolong_to_finest(self, v: np.ndarray, mode: ProlongationMode = ProlongationMode.MATRIX_ONLY):
        for op in reversed(self.operators):
            v = op.prolong(v, mode)
        return v

    def solve_coarsest(self, b: np.ndarray) -> np.ndarray:
        return self.coarsest.direct_solve(b)


def build_hierarchy(finest: MultigridDomain, min_vertices: int = 8, max_levels: int = 20) -> Hierarchy:
    """Coarsen repeatedly until the coarsest level is small enough for a direct solve.

    It stops when the coarsest level has at most `min_vertices` vertices, when there are
    `max_levels` levels, or when a domain cannot be coarsened any further.
    """
    assert min_vertices >= 1
    assert max_levels >= 1

    domains = [finest]
    operators = []
    logger.info(f"Level #0: {finest.num_vertices()} vertices, {finest.num_rows()} rows")

    while len(domains) < max_levels and domains[-1].num_vertices() > min_vertices:
        fine = domains[-1]
        op = fine.make_new_operator()
        try:
            coarse = fine.coarsen(op)
        except CoarseningError as err:
            logger.info(f"Stop coarsening at level #{len(domains) - 1}: {err}")
            break

        nb_fine = fine.num_vertices()
        nb_coarse = coarse.num_vertices()
        if nb_coarse <= 0:
            raise CoarseningError(f"Coarsening level #{len(domains) - 1} produces {nb_coarse} vertices")
        if nb_coarse > nb_fine:
            raise CoarseningError(
                f"Coarsening level #{len(domains) - 1} increases vertices from {nb_fine} to {nb_coarse}")
        if nb_coarse == nb_fine:
            logger.info(f"Stop coarsening at level #{len(domains) - 1}: no reduction of {nb_fine} vertices")
            break

        domains.append(coarse)
        operators.append(op)
        logger.info(f"Level #{len(domains) - 1}: {nb_coarse} vertices, {coarse.num_rows()} rows")

    return Hierarchy(domains, operators)
