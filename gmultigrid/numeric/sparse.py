import typing

import numpy as np
import scipy.sparse as sparse


Triplet: typing.TypeAlias = tuple[int, int, float]


def assemble_triplets(triplets: typing.Sequence[Triplet], shape: tuple[int, int]) -> sparse.csr_matrix:
    """Assemble (row, col, value) triplets into a sparse matrix of the given shape.

    Entries at the same position are summed, as in any sparse assembly.
    """
    [nb_rows, nb_cols] = shape
    if len(triplets):
        [rows, cols, vals] = zip(*triplets)
    else:
        [rows, cols, vals] = [(), (), ()]
    rows = np.asarray(rows, dtype=int)
    cols = np.asarray(cols, dtype=int)
    vals = np.asarray(vals, dtype=float)

    assert np.all((rows >= 0) & (rows < nb_rows)), f"Triplet row out of range [0, {nb_rows})"
    assert np.all((cols >= 0) & (cols < nb_cols)), f"Triplet column out of range [0, {nb_cols})"

    return sparse.coo_matrix((vals, (rows, cols)), shape=shape).tocsr()


def infinity_norm(v: np.ndarray) -> float:
    if np.size(v) == 0:
        return 0.0
    return float(np.max(np.abs(v)))


def path_difference_matrix(nb_vertices: int) -> sparse.csr_matrix:
    """Forward difference along a path graph, `(D x)_i = x_{i+1} - x_i`.

    The matrix has shape (nb_vertices - 1, nb_vertices).
    """
    assert nb_vertices >= 1
    nb_edges = nb_vertices - 1
    i = np.arange(nb_edges)
    rows = np.concatenate([i, i])
    cols = np.concatenate([i, i + 1])
    vals = np.concatenate([-np.ones(nb_edges), np.ones(nb_edges)])
    return sparse.coo_matrix((vals, (rows, cols)), shape=(nb_edges, nb_vertices)).tocsr()
