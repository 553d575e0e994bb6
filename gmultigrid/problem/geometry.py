"""
Geometry of an open polyline: vertex layouts, arclength, lumped mass and the graph Laplacian.
"""

import numpy as np
import scipy.sparse as sparse

from gmultigrid.numeric.sparse import path_difference_matrix


_generators: dict[str, callable] = {}


def _register(shape: str):
    """Decorator to register a polyline generator."""
    def decorator(func):
        _generators[shape] = func
        return func
    return decorator


def generate_polyline(shape: str, nb_vertices: int, **params) -> np.ndarray:
    """
    Generate the vertex positions of a polyline based on shape and parameters.

    Parameters
    ----------
    shape : str
        Polyline type identifier ("line", "arc", "helix").
    nb_vertices : int
        Number of vertices, at least 2.
    **params
        Shape-specific parameters.

    Returns
    -------
    np.ndarray
        Positions with shape (nb_vertices, nb_spatial_dims).

    Examples
    --------
    >>> generate_polyline("line", 65, length=1.0)
    >>> generate_polyline("arc", 65, radius=1.0, angle=np.pi)
    >>> generate_polyline("helix", 129, radius=1.0, pitch=0.5, nb_turns=3)
    """
    if shape not in _generators:
        available = list(_generators.keys())
        raise ValueError(f"Unknown polyline shape: {shape}. Available: {available}")
    if nb_vertices < 2:
        raise ValueError(f"A polyline needs at least 2 vertices, got {nb_vertices}")

    return _generators[shape](nb_vertices, **params)


@_register("line")
def _generate_line(nb_vertices: int, length: float = 1.0) -> np.ndarray:
    """Evenly spaced points on the x axis."""
    x = np.linspace(0.0, length, nb_vertices)
    return x[:, np.newaxis]


@_register("arc")
def _generate_arc(nb_vertices: int, radius: float = 1.0, angle: float = np.pi) -> np.ndarray:
    """Points on a circular arc in the plane."""
    t = np.linspace(0.0, angle, nb_vertices)
    return radius * np.column_stack([np.cos(t), np.sin(t)])


@_register("helix")
def _generate_helix(nb_vertices: int, radius: float = 1.0, pitch: float = 1.0, nb_turns: float = 1.0) -> np.ndarray:
    """Points on a helix around the z axis."""
    t = np.linspace(0.0, 2 * np.pi * nb_turns, nb_vertices)
    return np.column_stack([radius * np.cos(t), radius * np.sin(t), pitch * t / (2 * np.pi)])


def edge_lengths(positions: np.ndarray) -> np.ndarray:
    return np.linalg.norm(np.diff(positions, axis=0), axis=-1)


def arclength(positions: np.ndarray) -> np.ndarray:
    """Distance along the polyline from the first vertex to each vertex."""
    return np.concatenate([[0.0], np.cumsum(edge_lengths(positions))])


def lumped_mass(positions: np.ndarray) -> np.ndarray:
    """Half of the length of the adjacent edges at each vertex."""
    lengths = edge_lengths(positions)
    mass = np.zeros(len(positions))
    mass[:-1] += 0.5 * lengths
    mass[1:] += 0.5 * lengths
    return mass


def laplacian_kernel(positions: np.ndarray, regularization: float = 1e-2) -> sparse.csr_matrix:
    """Graph Laplacian with edge weights 1/length, made definite by a lumped mass term.

    K = D^T W D + regularization * M
    """
    lengths = edge_lengths(positions)
    assert np.all(lengths > 0), "Polyline has coincident consecutive vertices"
    D = path_difference_matrix(len(positions))
    W = sparse.diags(1.0 / lengths)
    M = sparse.diags(lumped_mass(positions))
    return sparse.csr_matrix(D.T @ W @ D + regularization * M)
