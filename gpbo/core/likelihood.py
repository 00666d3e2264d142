"""Marginal likelihood and maximum-likelihood hyperparameter fitting."""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass

import numpy as np
import scipy.optimize
import torch

from .errors import IllConditionedCovarianceError, InputContractError
from .posterior import DEFAULT_JITTER, training_covariance
from .utils import as_points, as_vector, cholesky

logger = logging.getLogger(__name__)

# Objective value for parameter vectors whose covariance cannot be factorised
PENALTY = 1e10

BOUNDED_METHODS = ('nelder-mead', 'l-bfgs-b', 'tnc', 'slsqp', 'powell', 'trust-constr')


@dataclass(frozen=True)
class FitResult:
    """Outcome of a hyperparameter fit."""

    params: OrderedDict
    nll: float
    success: bool
    n_iter: int
    message: str = ''


def negative_log_likelihood(kernel, X, y, noise=0.0, jitter=DEFAULT_JITTER, **kernel_params):
    """
    Negative log marginal likelihood of a zero-mean GP.

    NLL = 0.5 * y^T (K + noise^2 I)^-1 y + Σ log diag(L) + 0.5 * n * log(2π)

    Args:
        kernel: Kernel callable
        X: Training points (N x D)
        y: Observations (N,)
        noise: Observation noise standard deviation
        jitter: Diagonal regulariser
        **kernel_params: Kernel hyperparameters

    Returns:
        NLL as a Python float
    """
    X = as_points(X)
    y = as_vector(y, X.shape[0])
    n = X.shape[0]

    K = training_covariance(kernel, X, noise, jitter, **kernel_params)
    L = cholesky(K)
    alpha = torch.cholesky_solve(y.unsqueeze(-1), L).squeeze(-1)

    nll = (
        0.5 * torch.dot(y, alpha)
        + torch.sum(torch.log(torch.diagonal(L)))
        + 0.5 * n * math.log(2 * math.pi)
    )
    return nll.item()


def fit_hyperparameters(kernel, X, y, noise=0.0, initial_params=None,
                        method='Nelder-Mead', max_iter=2000, jitter=DEFAULT_JITTER):
    """
    Minimize the NLL over the kernel's hyperparameters.

    The search runs over log-parameters, so every parameter stays positive;
    the schema bounds are mapped to log space and passed to the optimizer.
    A local optimum is an accepted outcome.

    Args:
        kernel: Kernel with a parameter schema
        X: Training points (N x D)
        y: Observations (N,)
        noise: Observation noise standard deviation
        initial_params: Mapping naming every kernel parameter, or None for
            the schema defaults
        method: Any scipy.optimize.minimize method
        max_iter: Iteration limit
        jitter: Diagonal regulariser

    Returns:
        FitResult
    """
    X = as_points(X, name='X_train')
    y = as_vector(y, X.shape[0], name='y_train')

    if initial_params is None:
        initial_params = kernel.defaults
    theta0 = kernel.to_vector(initial_params)

    lower = np.array([b[0] for b in kernel.bounds], dtype=float)
    upper = np.array([b[1] for b in kernel.bounds], dtype=float)
    if np.any(lower <= 0):
        raise InputContractError("Parameter bounds must be positive for log-space fitting")
    outside = (theta0 < lower) | (theta0 > upper)
    if np.any(outside):
        names = [name for name, bad in zip(kernel.names, outside) if bad]
        raise InputContractError(f"Initial parameters outside their bounds: {names}")

    def objective(log_theta):
        params = kernel.from_vector(np.exp(log_theta))
        try:
            return negative_log_likelihood(kernel, X, y, noise, jitter, **params)
        except IllConditionedCovarianceError:
            return PENALTY

    logger.debug("Fitting %r from %s with %s", kernel, dict(initial_params), method)

    log_bounds = None
    if method.lower() in BOUNDED_METHODS:
        log_bounds = list(zip(np.log(lower), np.log(upper)))

    result = scipy.optimize.minimize(
        objective,
        np.log(theta0),
        method=method,
        bounds=log_bounds,
        options={'maxiter': max_iter},
    )

    params = kernel.from_vector(np.exp(result.x))
    nll = float(result.fun)
    if not result.success:
        logger.warning(
            "Hyperparameter fit did not converge (%s); using best found %s",
            result.message, dict(params),
        )
    else:
        logger.debug("Fitted %s with NLL %.6g", dict(params), nll)

    return FitResult(
        params=params,
        nll=nll,
        success=bool(result.success),
        n_iter=int(getattr(result, 'nit', 0)),
        message=str(result.message),
    )
