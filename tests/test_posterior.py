import numpy as np
import pytest
import torch
from pytest import approx

from gpbo.core.errors import IllConditionedCovarianceError, InputContractError
from gpbo.core.kernels import RBFKernel, MaternKernel
from gpbo.core.posterior import posterior

kernel = RBFKernel()
X_train = torch.tensor([[-2.0], [-1.0], [0.5], [1.5]], dtype=torch.float64)
y_train = torch.sin(X_train[:, 0])
X_pred = torch.linspace(-3, 3, 13, dtype=torch.float64).reshape(-1, 1)


def test_shapes():
    post = posterior(kernel, X_pred, X_train, y_train, noise=0.1)
    assert post.mean.shape == (13,)
    assert post.covariance.shape == (13, 13)
    assert post.variance.shape == (13,)


def test_covariance_is_symmetric():
    post = posterior(kernel, X_pred, X_train, y_train, noise=0.1, length_scale=0.7)
    assert torch.equal(post.covariance, post.covariance.T)
    assert torch.all(post.variance >= 0)


def test_noise_free_interpolation():
    post = posterior(kernel, X_train, X_train, y_train, noise=0.0)
    assert post.mean.tolist() == approx(y_train.tolist(), abs=1e-4)
    assert post.variance.tolist() == approx([0.0] * 4, abs=1e-4)


def test_noisy_posterior_does_not_interpolate():
    post = posterior(kernel, X_train, X_train, y_train, noise=0.5)
    assert not torch.allclose(post.mean, y_train, atol=1e-3)


def test_variance_shrinks_at_training_points():
    far = torch.tensor([[25.0]], dtype=torch.float64)
    at_train = posterior(MaternKernel(), X_train, X_train, y_train, noise=0.1).variance
    far_away = posterior(MaternKernel(), far, X_train, y_train, noise=0.1).variance
    assert torch.all(at_train <= far_away)
    assert far_away.item() == approx(1.0, abs=1e-6)


def test_matches_explicit_inverse():
    params = {'length_scale': 0.8, 'sigma_f': 1.4}
    noise, jitter = 0.2, 1e-8
    post = posterior(kernel, X_pred, X_train, y_train, noise=noise, jitter=jitter, **params)

    def k(a, b):
        d = a.numpy()[:, None, 0] - b.numpy()[None, :, 0]
        return 1.4 ** 2 * np.exp(-0.5 * d ** 2 / 0.8 ** 2)

    K_inv = np.linalg.inv(k(X_train, X_train) + (noise ** 2 + jitter) * np.eye(4))
    K_s = k(X_train, X_pred)
    mean = K_s.T @ K_inv @ y_train.numpy()
    cov = k(X_pred, X_pred) + jitter * np.eye(13) - K_s.T @ K_inv @ K_s

    assert np.allclose(post.mean.numpy(), mean, atol=1e-10)
    assert np.allclose(post.covariance.numpy(), cov, atol=1e-10)


def test_single_prediction_point():
    post = posterior(kernel, 0.0, X_train, y_train)
    assert post.mean.shape == (1,)


def test_duplicate_points_without_jitter():
    X = torch.tensor([[0.5], [0.5]], dtype=torch.float64)
    y = torch.tensor([1.0, 1.0], dtype=torch.float64)
    with pytest.raises(IllConditionedCovarianceError, match="Ill-conditioned"):
        posterior(kernel, X_pred, X, y, noise=0.0, jitter=0.0)


def test_input_contract():
    with pytest.raises(InputContractError):
        posterior(kernel, X_pred, X_train, y_train[:3])
    with pytest.raises(InputContractError):
        posterior(kernel, torch.zeros(2, 2, dtype=torch.float64), X_train, y_train)
