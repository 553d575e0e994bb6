"""
Failures of the numerics that are reported to the caller.

Wrong buffer sizes are programming errors and fail an `assert` where they are detected.
"""


class SingularSaddleSystemError(RuntimeError):
    """A direct solve met a (numerically) singular saddle matrix."""


class CoarseningError(RuntimeError):
    """A coarsening step cannot produce a valid coarser level."""
