"""
Constraints that can be part of a saddle problem solved with multigrid.

The saddle matrix looks like

    [ A   B^T ]
    [ B   0   ]

where A is the kernel of the problem being solved and B is the block representing all of the
constraints. Nothing here knows about A or about multigrid; a domain is responsible for placing
the constraint block next to its own kernel.
"""

import abc
import typing

import numpy as np
import scipy.sparse as sparse

from gmultigrid.numeric.sparse import Triplet, assemble_triplets, infinity_norm


class SaddleConstraints(typing.Protocol):
    """What a consumer of a constraint set can rely on.

    g(x) == targets
    """

    def num_constraint_rows(self) -> int: ...

    def num_expected_cols(self) -> int: ...

    def saddle_num_rows(self) -> int: ...

    def fill_constraint_matrix(self) -> sparse.csr_matrix: ...

    def fill_dense_block(self, A: np.ndarray): ...

    def update_target_values(self, targets: np.ndarray | None = None) -> np.ndarray: ...

    def fill_constraint_values(self, b: np.ndarray, targets: np.ndarray, offset: int) -> float: ...


class DomainConstraints(abc.ABC):
    """Generic assembly of a constraint block, shared by all constraint families.

    A concrete family implements five methods:
    - num_constraint_rows(): how many rows the constraints occupy in the matrix.
    - num_expected_cols(): how many columns (i.e. degrees of freedom) the constraints span.
    - add_triplets(triplets): appends the (row, col, val) triplets of the constraint matrix.
    - set_target_values(targets): given a vector with num_constraint_rows() entries, sets each
      entry to the corresponding target value of that constraint function.
    - negative_constraint_values(b, targets): given a vector b with num_constraint_rows()
      entries and the target values, fills b with the negated values of the constraint function
      relative to the targets.

    Triplets are never offset; callers embedding the block apply their own offsets.
    """

    @abc.abstractmethod
    def num_constraint_rows(self) -> int: ...

    @abc.abstractmethod
    def num_expected_cols(self) -> int: ...

    @abc.abstractmethod
    def add_triplets(self, triplets: list[Triplet]): ...

    @abc.abstractmethod
    def set_target_values(self, targets: np.ndarray): ...

    @abc.abstractmethod
    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray): ...

    def saddle_num_rows(self) -> int:
        """Size of the full (square) saddle matrix."""
        return self.num_constraint_rows() + self.num_expected_cols()

    def fill_constraint_matrix(self) -> sparse.csr_matrix:
        """Assemble the constraint block B, shaped num_constraint_rows() x num_expected_cols().

        It is always a fresh block holding only the constraints and nothing more.
        """
        triplets: list[Triplet] = []
        self.add_triplets(triplets)
        return assemble_triplets(triplets, (self.num_constraint_rows(), self.num_expected_cols()))

    def fill_dense_block(self, A: np.ndarray):
        """Write B into the bottom edge and B^T into the right edge of a full saddle matrix.

        A must already be saddle_num_rows() x saddle_num_rows(); other entries are left alone.
        """
        nb_rows = self.saddle_num_rows()
        assert A.shape == (nb_rows, nb_rows), f"Expect a {nb_rows}x{nb_rows} matrix, got {A.shape}"
        offset = self.num_expected_cols()

        block = self.fill_constraint_matrix().tocoo()
        # lower-left block
        A[offset + block.row, block.col] = block.data
        # transpose into upper-right block
        A[block.col, offset + block.row] = block.data

    def update_target_values(self, targets: np.ndarray | None = None) -> np.ndarray:
        """Update each target value with the current target of the constraint.

        A buffer of the wrong length or of a non-floating dtype (or none) is replaced by zeros of
        the right length.
        The populated buffer is returned.
        """
        nb_constrs = self.num_constraint_rows()
        if (targets is None or np.shape(targets) != (nb_constrs,)
                or not np.issubdtype(np.asarray(targets).dtype, np.floating)):
            targets = np.zeros(nb_constrs)
        self.set_target_values(targets)
        return targets

    def fill_constraint_values(self, b: np.ndarray, targets: np.ndarray, offset: int) -> float:
        """Write the negated constraint values into b, starting from index `offset`.

        Returns the infinity norm of the written entries, i.e. the constraint violation.
        """
        nb_constrs = self.num_constraint_rows()
        assert np.shape(targets) == (nb_constrs,), f"Expect {nb_constrs} targets, got {np.shape(targets)}"
        assert 0 <= offset and offset + nb_constrs <= np.size(b), \
            f"Cannot write {nb_constrs} entries at offset {offset} into a vector of size {np.size(b)}"

        b_constrs = np.zeros(nb_constrs)
        self.negative_constraint_values(b_constrs, targets)
        b[offset:offset + nb_constrs] = b_constrs

        return infinity_norm(b_constrs)
