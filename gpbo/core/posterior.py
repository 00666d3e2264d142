"""GP posterior conditioning (Rasmussen & Williams, Algorithm 2.1)."""

from dataclasses import dataclass

import torch

from .utils import DTYPE, as_points, as_vector, cholesky

DEFAULT_JITTER = 1e-8


@dataclass(frozen=True, eq=False)
class Posterior:
    """Posterior mean and covariance at a set of prediction points."""

    mean: torch.Tensor
    covariance: torch.Tensor

    @property
    def variance(self):
        """Marginal variances, with rounding-level negatives clamped to zero."""
        return torch.clamp(torch.diagonal(self.covariance), min=0.0)

    @property
    def std(self):
        return torch.sqrt(self.variance)


def training_covariance(kernel, X_train, noise=0.0, jitter=DEFAULT_JITTER, **kernel_params):
    """K(X, X) + (noise^2 + jitter) I."""
    n = X_train.shape[0]
    K = kernel(X_train, X_train, **kernel_params)
    return K + (noise ** 2 + jitter) * torch.eye(n, dtype=DTYPE)


def posterior(kernel, X_pred, X_train, y_train, noise=0.0, jitter=DEFAULT_JITTER,
              **kernel_params):
    """
    Condition a zero-mean GP on training data.

    Args:
        kernel: Kernel callable, kernel(X1, X2, **kernel_params)
        X_pred: Prediction points (P x D)
        X_train: Training points (N x D)
        y_train: Training observations (N,)
        noise: Observation noise standard deviation
        jitter: Diagonal regulariser for the self-covariance blocks
        **kernel_params: Kernel hyperparameters

    Returns:
        Posterior with mean (P,) and covariance (P x P)

    Raises:
        IllConditionedCovarianceError: If the training covariance is not
            positive definite after adding noise and jitter
    """
    X_train = as_points(X_train, name='X_train')
    dim = X_train.shape[1]
    X_pred = as_points(X_pred, dim, name='X_pred')
    y_train = as_vector(y_train, X_train.shape[0], name='y_train')

    K_tt = training_covariance(kernel, X_train, noise, jitter, **kernel_params)
    K_tp = kernel(X_train, X_pred, **kernel_params)
    K_pp = kernel(X_pred, X_pred, **kernel_params)
    K_pp = K_pp + jitter * torch.eye(X_pred.shape[0], dtype=DTYPE)

    L = cholesky(K_tt)
    alpha = torch.cholesky_solve(y_train.unsqueeze(-1), L)
    mean = (K_tp.T @ alpha).squeeze(-1)

    v = torch.linalg.solve_triangular(L, K_tp, upper=False)
    covariance = K_pp - v.T @ v
    covariance = 0.5 * (covariance + covariance.T)

    return Posterior(mean=mean, covariance=covariance)
