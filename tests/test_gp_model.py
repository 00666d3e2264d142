import dataclasses

import numpy as np
import pytest
import torch
from pytest import approx

from gpbo.benchmarks import ackley
from gpbo.core.errors import InputContractError
from gpbo.core.gp_model import FittedGP, TrainingSet, fit_gp
from gpbo.core.kernels import RBFKernel, MaternKernel
from gpbo.core.posterior import DEFAULT_JITTER

kernel = RBFKernel()
X_train = torch.tensor([-4.33, -2.1, 2.1], dtype=torch.float64)
y_train = ackley(X_train)


def _reference(params, X, y, x_star, jitter=DEFAULT_JITTER):
    """Noise-free GP prediction with an explicit inverse."""
    l, s = params['length_scale'], params['sigma_f']
    X, y = X.numpy(), y.numpy()

    def k(a, b):
        return s ** 2 * np.exp(-0.5 * (a[:, None] - b[None, :]) ** 2 / l ** 2)

    K_inv = np.linalg.inv(k(X, X) + jitter * np.eye(len(X)))
    k_s = k(X, np.array([x_star]))
    mean = (k_s.T @ K_inv @ y).item()
    var = (k(np.array([x_star]), np.array([x_star])) + jitter - k_s.T @ K_inv @ k_s).item()
    return mean, var


def test_ackley_scenario():
    gp = fit_gp(kernel, X_train, y_train, noise=0.0)
    prediction = gp.predict(0.0)
    mean, var = _reference(gp.params, X_train, y_train, 0.0)
    assert prediction.mean.item() == approx(mean, abs=1e-6)
    assert prediction.variance.item() == approx(var, abs=1e-6)
    assert prediction.fitted_params == gp.params


def test_round_trip_determinism():
    a = fit_gp(kernel, X_train, y_train).predict(torch.linspace(-5, 5, 11))
    b = fit_gp(kernel, X_train, y_train).predict(torch.linspace(-5, 5, 11))
    assert torch.equal(a.mean, b.mean)
    assert torch.equal(a.covariance, b.covariance)


def test_prediction_fields():
    gp = fit_gp(MaternKernel(), X_train, y_train, noise=0.1)
    prediction = gp.predict(torch.linspace(-5, 5, 7))
    assert prediction.mean.shape == (7,)
    assert prediction.variance.shape == (7,)
    assert prediction.covariance.shape == (7, 7)
    assert torch.allclose(prediction.variance, torch.diagonal(prediction.covariance).clamp(min=0))
    assert torch.allclose(prediction.std ** 2, prediction.variance)


def test_log_marginal_likelihood_matches_fit():
    gp = fit_gp(kernel, X_train, y_train, noise=0.1)
    assert gp.log_marginal_likelihood() == approx(-gp.fit.nll, rel=1e-9)


def test_training_set_is_immutable():
    training = TrainingSet([0.0, 1.0], [1.0, 2.0])
    extended = training.append(2.0, 3.0)
    assert training.n == 2
    assert extended.n == 3
    assert extended.y.tolist() == [1.0, 2.0, 3.0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        training.X = torch.zeros(1, 1)


def test_training_set_contract():
    with pytest.raises(InputContractError):
        TrainingSet([[0.0, 1.0], [1.0, 1.0]], [1.0, 2.0, 3.0])
    training = TrainingSet([[0.0, 1.0], [1.0, 1.0]], [1.0, 2.0])
    assert training.dim == 2
    with pytest.raises(InputContractError):
        training.append([0.0, 0.0, 0.0], 1.0)


def test_incumbent():
    training = TrainingSet([0.0, 1.0, 2.0], [3.0, -1.0, 5.0])
    assert training.incumbent('min') == -1.0
    assert training.incumbent('max') == 5.0
    assert training.best_point('min').tolist() == [1.0]
    with pytest.raises(InputContractError):
        training.incumbent('minimise')


def test_two_dimensional_single_point_query():
    X = torch.tensor([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]], dtype=torch.float64)
    y = X.sum(dim=1)
    gp = fit_gp(kernel, X, y, noise=0.01)
    assert gp.predict([0.5, 0.5]).mean.shape == (1,)
    with pytest.raises(InputContractError):
        gp.predict([0.5, 0.5, 0.5])


def test_condition_on_keeps_hyperparameters():
    gp = fit_gp(kernel, X_train, y_train)
    augmented = gp.condition_on(0.0, 1.0)
    assert isinstance(augmented, FittedGP)
    assert augmented.params == gp.params
    assert augmented.training.n == 4
    assert gp.training.n == 3
    assert augmented.predict(0.0).mean.item() == approx(1.0, abs=1e-4)


def test_mean_weights():
    gp = fit_gp(kernel, X_train, y_train, noise=0.05)
    query = torch.linspace(-5, 5, 9, dtype=torch.float64)
    W = gp.mean_weights(query)
    assert torch.allclose(W @ gp.training.y, gp.predict(query).mean, atol=1e-10)

    W_aug = gp.mean_weights(query, x_extra=1.0)
    assert W_aug.shape == (9, 4)
    expected = gp.condition_on(1.0, 0.5).predict(query).mean
    y_aug = torch.cat([gp.training.y, torch.tensor([0.5], dtype=torch.float64)])
    assert torch.allclose(W_aug @ y_aug, expected, atol=1e-10)
