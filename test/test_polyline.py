"""
Tests of the polyline domain as a multigrid level.
"""

import numpy as np
import numpy.random as random
import pytest

from gmultigrid import CoarseningError, SingularSaddleSystemError
from gmultigrid.numeric import MatrixMultiplier, MultigridOperator
from gmultigrid.problem import (
    PolylineDomain, BarycenterConstraint, PinConstraint, SumConstraint, ConstraintStack,
    generate_polyline, lumped_mass, laplacian_kernel, coarse_vertex_indices, polyline_prolongation,
)


rng = random.default_rng(3)


def make_domain(shape="line", nb_vertices=17, pins=(0,), **params):
    positions = generate_polyline(shape, nb_vertices, **params)
    values = rng.standard_normal(nb_vertices)
    constraints = ConstraintStack([BarycenterConstraint(lumped_mass(positions), values), PinConstraint(values, pins)])
    return PolylineDomain(positions, constraints)


def test_sizes():
    domain = make_domain(nb_vertices=17, pins=(0, 16))
    assert domain.num_vertices() == 17
    assert domain.num_rows() == 17 + 3
    assert domain.num_constraint_rows() == 3
    assert domain.num_rows() >= domain.num_vertices()


def test_full_matrix_layout():
    domain = make_domain(nb_vertices=12)
    n = domain.num_vertices()
    M = domain.get_full_matrix()

    assert M.shape == (domain.num_rows(), domain.num_rows())
    assert np.allclose(M, M.T)
    assert np.allclose(M[:n, :n], domain.kernel.toarray())
    assert np.allclose(M[n:, :n], domain.constraints.fill_constraint_matrix().toarray())
    assert np.all(M[n:, n:] == 0.0)


def test_laplacian_kernel():
    positions = generate_polyline("arc", 10)
    K = laplacian_kernel(positions, regularization=0.0)
    # constants are in the null space of the bare graph Laplacian
    assert np.allclose(K @ np.ones(10), 0.0)

    K = laplacian_kernel(positions, regularization=0.1)
    assert np.all(np.linalg.eigvalsh(K.toarray()) > 0)


def test_direct_solve_reproduces_solution():
    domain = make_domain("helix", 33, pins=(0, 32), nb_turns=2.0)
    x_true = rng.standard_normal(domain.num_rows())
    b = domain.get_full_matrix() @ x_true

    x = domain.direct_solve(b)
    assert np.allclose(x, x_true, atol=1e-8)


def test_repeated_calls_do_not_change_domain():
    domain = make_domain(nb_vertices=9)
    b = rng.standard_normal(domain.num_rows())
    b_copy = b.copy()

    M1 = domain.get_full_matrix()
    x1 = domain.direct_solve(b)
    M2 = domain.get_full_matrix()
    x2 = domain.direct_solve(b)

    assert np.array_equal(M1, M2)
    assert np.array_equal(x1, x2)
    assert np.array_equal(b, b_copy)


def test_direct_solve_wrong_size_fails():
    domain = make_domain(nb_vertices=9)
    with pytest.raises(AssertionError):
        domain.direct_solve(np.zeros(domain.num_vertices()))


def test_singular_saddle_is_reported():
    positions = generate_polyline("line", 8)
    # the same vertex pinned twice gives two identical constraint rows
    constraints = PinConstraint(np.zeros(8), [3, 3])
    domain = PolylineDomain(positions, constraints)

    with pytest.raises(SingularSaddleSystemError):
        domain.direct_solve(np.ones(domain.num_rows()))


def test_multiplier_and_projector_are_owned():
    domain = make_domain(nb_vertices=9)
    multiplier = domain.get_multiplier()
    assert isinstance(multiplier, MatrixMultiplier)
    assert multiplier is domain.get_multiplier()
    assert multiplier.nb_rows == domain.num_vertices()

    v = rng.standard_normal(domain.num_vertices())
    assert np.allclose(multiplier.multiply(v), domain.kernel @ v)
    assert np.allclose(multiplier.diagonal(), domain.kernel.diagonal())
    assert np.all(multiplier.diagonal() > 0)
    n = domain.num_vertices()
    assert np.array_equal(multiplier.to_dense(), domain.get_full_matrix()[:n, :n])
    with pytest.raises(AssertionError):
        multiplier.multiply(np.ones(n + 1))

    projector = domain.get_constraint_projector()
    assert projector is domain.get_constraint_projector()
    assert projector.num_constraint_rows() == domain.num_constraint_rows()


def test_coarse_vertex_indices():
    assert np.array_equal(coarse_vertex_indices(3), [0, 2])
    assert np.array_equal(coarse_vertex_indices(4), [0, 2, 3])
    assert np.array_equal(coarse_vertex_indices(9), [0, 2, 4, 6, 8])


def test_prolongation_is_partition_of_unity():
    positions = generate_polyline("helix", 30, nb_turns=1.5)
    P = polyline_prolongation(positions, coarse_vertex_indices(30))
    assert P.shape == (30, 16)
    assert np.allclose(P.sum(axis=1), 1.0)
    assert P.min() >= 0.0


def test_coarsen():
    domain = make_domain(nb_vertices=17, pins=(0, 5))
    op = domain.make_new_operator()
    assert isinstance(op, MultigridOperator)
    assert not op.is_ready

    coarse = domain.coarsen(op)

    assert isinstance(coarse, PolylineDomain)
    assert coarse.num_vertices() == 9
    assert coarse.num_rows() == 9 + domain.num_constraint_rows()
    assert op.is_ready
    assert (op.upper_size, op.lower_size) == (17, 9)
    assert op.nb_constraint_rows == domain.num_constraint_rows()

    P = op.matrix.toarray()
    assert np.allclose(coarse.kernel.toarray(), P.T @ domain.kernel.toarray() @ P)
    B = domain.constraints.fill_constraint_matrix().toarray()
    assert np.allclose(coarse.constraints.fill_constraint_matrix().toarray(), B @ P)

    # the fine domain is left as it was
    assert domain.num_vertices() == 17


def test_too_small_to_coarsen():
    positions = generate_polyline("line", 2)
    domain = PolylineDomain(positions, BarycenterConstraint(lumped_mass(positions), np.zeros(2)))
    with pytest.raises(CoarseningError):
        domain.coarsen(domain.make_new_operator())


def test_constraints_must_match_vertices():
    positions = generate_polyline("line", 5)
    with pytest.raises(AssertionError):
        PolylineDomain(positions, PinConstraint(np.zeros(6), [0]))


def test_coarsen_needs_more_vertices_than_constraint_rows():
    domain = make_domain(nb_vertices=5, pins=(0, 4))
    # 3 coarse vertices for 3 constraint rows
    with pytest.raises(CoarseningError):
        domain.coarsen(domain.make_new_operator())


def test_coarsen_with_dependent_coarse_constraints():
    positions = generate_polyline("line", 7, length=6.0)
    values = np.zeros(7)
    # x_1 and the mean of x_0 and x_2 coincide once x_1 is interpolated
    constraints = ConstraintStack([
        PinConstraint(values, [1]),
        SumConstraint(7, 0.0, indices=[0, 2], weights=[0.5, 0.5], values=values),
    ])
    domain = PolylineDomain(positions, constraints)
    domain.get_constraint_projector()

    op = domain.make_new_operator()
    with pytest.raises(CoarseningError):
        domain.coarsen(op)
    assert not op.is_ready
