"""Multivariate Gaussian sampling."""

import torch

from .errors import InputContractError, NotPositiveDefiniteError
from .utils import DTYPE, as_vector, make_generator


def _factor(covariance, epsilon, scale):
    """Square-root factor L with L @ L.T ~= covariance."""
    p = covariance.shape[0]
    jitter = max(epsilon, epsilon * scale)
    L, info = torch.linalg.cholesky_ex(covariance + jitter * torch.eye(p, dtype=DTYPE))
    if info.item() == 0:
        return L
    # Eigenvalues on the tolerance boundary can still defeat Cholesky
    eigenvalues, eigenvectors = torch.linalg.eigh(covariance)
    return eigenvectors * torch.sqrt(torch.clamp(eigenvalues, min=0.0))


def sample_multivariate_normal(n_samples, mean, covariance, epsilon=1e-8, seed=None):
    """
    Draw samples from N(mean, covariance) through a Cholesky factor.

    The covariance is accepted if all its eigenvalues are at least
    -epsilon * |largest eigenvalue|. It is then factorised with
    max(epsilon, epsilon * |largest eigenvalue|) added to the diagonal,
    falling back to the eigendecomposition with negative eigenvalues
    clamped to zero.

    Args:
        n_samples: Number of samples
        mean: Mean vector (P,)
        covariance: Covariance matrix (P x P)
        epsilon: Relative eigenvalue tolerance and diagonal jitter
        seed: int seed or torch.Generator

    Returns:
        Samples (n_samples x P)
    """
    mean = as_vector(mean, name='mean')
    covariance = torch.as_tensor(covariance, dtype=DTYPE)
    p = mean.shape[0]

    if covariance.shape != (p, p):
        raise InputContractError(
            f"Covariance must be {p} x {p} to match the mean, got {tuple(covariance.shape)}"
        )
    if n_samples < 1:
        raise InputContractError(f"n_samples must be positive, got {n_samples}")

    eigenvalues = torch.linalg.eigvalsh(covariance)
    scale = eigenvalues.abs().max().item()
    if eigenvalues.min() < -epsilon * scale:
        raise NotPositiveDefiniteError(
            f"Covariance matrix is not positive definite "
            f"(smallest eigenvalue {eigenvalues.min().item():.3g})"
        )

    L = _factor(covariance, epsilon, scale)

    generator = make_generator(seed)
    z = torch.randn(n_samples * p, generator=generator, dtype=DTYPE).reshape(n_samples, p)
    return mean + z @ L.T
