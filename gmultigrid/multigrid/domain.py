"""
One level of a geometric multigrid hierarchy.

A domain knows its kernel operator, its constraints and how to produce the next coarser domain.
Concrete domains vary per geometric representation, hence the abstract base class.
"""

import abc
import typing

import numpy as np

from gmultigrid.numeric.projector import NullSpaceProjector


MultT = typing.TypeVar("MultT")
OperatorT = typing.TypeVar("OperatorT")


class MultigridDomain(abc.ABC, typing.Generic[MultT, OperatorT]):
    """Abstract multigrid level.

    Subclasses must implement:
    - coarsen(prolong_op): fill the given operator with the transfer to a new, strictly coarser
      domain and return that domain. The caller owns the returned domain.
    - get_multiplier(): the weighting object of this level, owned by the domain.
    - get_full_matrix(): the complete saddle matrix, dense, num_rows() x num_rows().
    - direct_solve(b): the solution of the saddle system for a right-hand side of size num_rows().
    - num_vertices(): count of primary unknowns.
    - num_rows(): num_vertices() plus the number of constraint rows.
    - make_new_operator(): an empty transfer operator suitable for coarsen().
    - get_constraint_projector(): the null-space projector of the constraint block, owned by
      the domain.

    Repeated calls of get_full_matrix() and direct_solve() must not change the domain.
    """

    @abc.abstractmethod
    def coarsen(self, prolong_op: OperatorT) -> "MultigridDomain[MultT, OperatorT]": ...

    @abc.abstractmethod
    def get_multiplier(self) -> MultT: ...

    @abc.abstractmethod
    def get_full_matrix(self) -> np.ndarray: ...

    @abc.abstractmethod
    def direct_solve(self, b: np.ndarray) -> np.ndarray: ...

    @abc.abstractmethod
    def num_vertices(self) -> int: ...

    @abc.abstractmethod
    def num_rows(self) -> int: ...

    @abc.abstractmethod
    def make_new_operator(self) -> OperatorT: ...

    @abc.abstractmethod
    def get_constraint_projector(self) -> NullSpaceProjector: ...

    def num_constraint_rows(self) -> int:
        return self.num_rows() - self.num_vertices()
