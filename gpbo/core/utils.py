"""Utility functions."""

import torch

from .errors import InputContractError, IllConditionedCovarianceError

DTYPE = torch.float64

TASKS = ('min', 'max')


def as_points(X, dim=None, name='X'):
    """
    Normalize points to a canonical (n x d) float64 tensor.

    A scalar becomes a single 1-D point. A vector is a set of n 1-D points,
    unless `dim` is given and greater than one, in which case it must be a
    single point of length `dim` and becomes a 1 x dim row.

    Args:
        X: Scalar, vector (n,) or matrix (n x d)
        dim: Expected input dimensionality, if known
        name: Argument name used in error messages

    Returns:
        Points (n x d)
    """
    X = torch.as_tensor(X, dtype=DTYPE)

    if X.dim() == 0:
        X = X.reshape(1, 1)
    elif X.dim() == 1:
        if dim is not None and dim > 1:
            if X.shape[0] != dim:
                raise InputContractError(
                    f"'{name}' is a vector of length {X.shape[0]}, expected a single "
                    f"point of dimension {dim}"
                )
            X = X.unsqueeze(0)
        else:
            X = X.unsqueeze(-1)
    elif X.dim() != 2:
        raise InputContractError(
            f"'{name}' must be a point or a 2-D point set, got shape {tuple(X.shape)}"
        )

    if dim is not None and X.shape[1] != dim:
        raise InputContractError(
            f"'{name}' has dimension {X.shape[1]}, expected {dim}"
        )
    return X


def as_point_pair(X1, X2):
    """Normalize two point sets so that they share one dimensionality."""
    t1 = torch.as_tensor(X1, dtype=DTYPE)
    t2 = torch.as_tensor(X2, dtype=DTYPE)

    # A matrix argument fixes d; a bare vector on the other side follows it.
    dim = None
    for t in (t1, t2):
        if t.dim() == 2:
            dim = t.shape[1]
            break

    return as_points(t1, dim, name='X1'), as_points(t2, dim, name='X2')


def as_vector(y, length=None, name='y'):
    """
    Normalize values to a float64 vector.

    Args:
        y: Scalar, vector (n,) or column (n x 1)
        length: Expected length, if known
        name: Argument name used in error messages

    Returns:
        Vector (n,)
    """
    y = torch.as_tensor(y, dtype=DTYPE)
    if y.dim() == 0:
        y = y.reshape(1)
    elif y.dim() == 2 and y.shape[1] == 1:
        y = y[:, 0]
    elif y.dim() != 1:
        raise InputContractError(
            f"'{name}' must be a vector, got shape {tuple(y.shape)}"
        )

    if length is not None and y.shape[0] != length:
        raise InputContractError(
            f"'{name}' has length {y.shape[0]}, expected {length}"
        )
    return y


def check_task(task):
    """Validate an optimisation direction and return it."""
    if task not in TASKS:
        raise InputContractError(f"task must be one of {TASKS}, got {task!r}")
    return task


def make_generator(seed=None):
    """
    Build an explicit random source.

    Args:
        seed: None, an int seed, or an existing torch.Generator

    Returns:
        torch.Generator
    """
    if isinstance(seed, torch.Generator):
        return seed
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(int(seed))
    return generator


def cholesky(K):
    """
    Cholesky factor of a symmetric matrix.

    Raises:
        IllConditionedCovarianceError: If K is not positive definite
    """
    L, info = torch.linalg.cholesky_ex(K)
    if info.item() != 0:
        raise IllConditionedCovarianceError(
            f"Ill-conditioned covariance: Cholesky failed at column {info.item()} "
            f"of a {K.shape[0]} x {K.shape[0]} matrix"
        )
    return L


def check_bounds(points, bounds):
    """
    Filter points within bounds.

    Args:
        points: Tensor (N x D)
        bounds: List of (lower, upper) tuples

    Returns:
        Valid points
    """
    points = as_points(points, len(bounds), name='points')
    lower = torch.tensor([b[0] for b in bounds], dtype=DTYPE)
    upper = torch.tensor([b[1] for b in bounds], dtype=DTYPE)

    valid = torch.all((points >= lower) & (points <= upper), dim=-1)
    return points[valid]


def scale_to_bounds(unit_points, bounds):
    """Map points from the unit cube onto the box given by `bounds`."""
    unit_points = torch.as_tensor(unit_points, dtype=DTYPE)
    lower = torch.tensor([b[0] for b in bounds], dtype=DTYPE)
    upper = torch.tensor([b[1] for b in bounds], dtype=DTYPE)
    return lower + unit_points * (upper - lower)
