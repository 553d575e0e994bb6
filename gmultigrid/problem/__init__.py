"""
Problem module: concrete constraint families and a concrete multigrid domain.

Provides:
- Constraint families: sum, barycenter, pinned values, stacks of them, and their coarse-level
  counterpart
- Polyline geometry: vertex layouts, lumped mass, Laplacian kernel
- PolylineDomain: a scalar field on a polyline as a multigrid level
"""

from .constraints import (
    LinearConstraints,
    SumConstraint,
    BarycenterConstraint,
    PinConstraint,
    ConstraintStack,
    TransferredConstraints,
)
from .geometry import generate_polyline, arclength, edge_lengths, lumped_mass, laplacian_kernel
from .polyline import PolylineDomain, coarse_vertex_indices, polyline_prolongation
