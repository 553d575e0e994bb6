"""
Multigrid hierarchy: the abstract level and the coarsening chain.
"""

from .domain import MultigridDomain
from .hierarchy import Hierarchy, build_hierarchy
