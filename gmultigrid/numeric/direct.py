import logging
import warnings

import numpy as np
import scipy.linalg

from gmultigrid.errors import SingularSaddleSystemError


logger = logging.getLogger(__name__)


def solve_dense_saddle(matrix: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve a saddle system directly with its full (dense) matrix.

    The saddle matrix is symmetric but indefinite, hence LDL^T rather than Cholesky.
    Ill-conditioning is treated the same as exact singularity.
    """
    nb_rows = matrix.shape[0]
    assert matrix.shape == (nb_rows, nb_rows), f"Expect a square matrix, got {matrix.shape}"
    assert np.shape(b) == (nb_rows,), f"Expect a right-hand side of size {nb_rows}, got {np.shape(b)}"

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", scipy.linalg.LinAlgWarning)
            x = scipy.linalg.solve(matrix, b, assume_a="sym")
    except (scipy.linalg.LinAlgError, scipy.linalg.LinAlgWarning) as err:
        raise SingularSaddleSystemError(f"Direct solve of a {nb_rows}x{nb_rows} saddle system failed: {err}") from err

    if not np.all(np.isfinite(x)):
        raise SingularSaddleSystemError(f"Direct solve of a {nb_rows}x{nb_rows} saddle system gives non-finite values")

    logger.debug(f"Direct solve of size {nb_rows}, residual {np.max(abs(matrix @ x - b)):.1e}")
    return x
