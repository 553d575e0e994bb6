import numpy as np


def central_difference_jacobian(func, x, step):
    """Return the jacobian of `func` at `x`, computed numerically via central difference scheme.

    It is shaped (size of func(x), size of x), i.e. laid out like a constraint block.
    """
    x = np.array(x, dtype=float)
    columns = []
    for i in range(x.size):
        dx = np.zeros_like(x)
        dx[i] = step
        columns.append((func(x + dx) - func(x - dx)) / (2 * step))
    return np.column_stack(columns)


def constraint_function(constraints):
    """Wrap a constraint set as x -> g(x), evaluated through its negated values."""
    targets = constraints.update_target_values()

    def evaluate(x):
        constraints.set_values(x)
        b = np.zeros(constraints.num_constraint_rows())
        constraints.negative_constraint_values(b, targets)
        return targets - b

    return evaluate
