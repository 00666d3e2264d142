import numpy as np
import pytest
import torch
from pytest import approx
from scipy.stats import multivariate_normal

from gpbo.core.errors import InputContractError
from gpbo.core.kernels import RBFKernel, MaternKernel, rbf_kernel
from gpbo.core.likelihood import fit_hyperparameters, negative_log_likelihood

kernel = RBFKernel()
X = torch.tensor([[-1.0], [-0.5], [0.0], [0.5], [1.0]], dtype=torch.float64)
y = torch.sin(3 * X[:, 0])
noise = 0.1


def test_nll_matches_gaussian_log_density():
    nll = negative_log_likelihood(kernel, X, y, noise, length_scale=0.6, sigma_f=1.2)
    K = rbf_kernel(X, X, length_scale=0.6, sigma_f=1.2).numpy()
    K = K + (noise ** 2 + 1e-8) * np.eye(5)
    expected = -multivariate_normal(mean=np.zeros(5), cov=K).logpdf(y.numpy())
    assert nll == approx(expected, rel=1e-9)


def test_fit_improves_likelihood():
    initial = {'length_scale': 1.0, 'sigma_f': 1.0}
    result = fit_hyperparameters(kernel, X, y, noise, initial_params=initial)
    assert result.nll <= negative_log_likelihood(kernel, X, y, noise, **initial)
    assert list(result.params) == ['length_scale', 'sigma_f']
    for (name, value), (lower, upper) in zip(result.params.items(), kernel.bounds):
        assert lower <= value <= upper


def test_fit_defaults_to_schema():
    result = fit_hyperparameters(MaternKernel(nu=1.5), X, y, noise)
    assert result.success
    assert result.nll == approx(
        negative_log_likelihood(MaternKernel(nu=1.5), X, y, noise, **result.params)
    )


def test_gradient_based_method():
    result = fit_hyperparameters(kernel, X, y, noise, method='L-BFGS-B')
    assert result.nll <= negative_log_likelihood(kernel, X, y, noise)


def test_fit_is_deterministic():
    a = fit_hyperparameters(kernel, X, y, noise)
    b = fit_hyperparameters(kernel, X, y, noise)
    assert a.params == b.params
    assert a.nll == b.nll


def test_non_convergence_is_not_fatal():
    result = fit_hyperparameters(kernel, X, y, noise, max_iter=1)
    assert not result.success
    assert list(result.params) == ['length_scale', 'sigma_f']


def test_partial_initial_params():
    with pytest.raises(InputContractError):
        fit_hyperparameters(kernel, X, y, noise, initial_params={'length_scale': 1.0})


def test_initial_params_out_of_bounds():
    with pytest.raises(InputContractError):
        fit_hyperparameters(
            kernel, X, y, noise, initial_params={'length_scale': 1e6, 'sigma_f': 1.0}
        )
