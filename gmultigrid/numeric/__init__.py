"""
Numerics of a saddle problem: constraint assembly, projection, transfer between levels and
dense direct solves. No geometry in this subpackage.
"""

from .sparse import Triplet, assemble_triplets, infinity_norm, path_difference_matrix
from .constraints import DomainConstraints, SaddleConstraints
from .multiplier import MatrixMultiplier
from .projector import NullSpaceProjector
from .operator import MultigridOperator, ProlongationMode
from .direct import solve_dense_saddle
