"""
Geometric multigrid core for saddle-point systems

    [ A   B^T ] [x]   [f]
    [ B   0   ] [λ] = [g]

Subpackages:
- numeric: constraint assembly contract, projector, transfer operator, direct solve
- multigrid: abstract multigrid level and the coarsening chain
- problem: concrete constraint families and a polyline domain
- config / runtime: TOML configuration and logging setup
"""

from gmultigrid.errors import SingularSaddleSystemError, CoarseningError
from gmultigrid.numeric import (
    DomainConstraints,
    SaddleConstraints,
    MatrixMultiplier,
    NullSpaceProjector,
    MultigridOperator,
    ProlongationMode,
)
from gmultigrid.multigrid import MultigridDomain, Hierarchy, build_hierarchy
