"""Gaussian Process regression facade."""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

import torch

from .likelihood import FitResult, fit_hyperparameters, negative_log_likelihood
from .posterior import DEFAULT_JITTER, posterior, training_covariance
from .utils import as_points, as_vector, check_task, cholesky

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TrainingSet:
    """
    Observed points and values for one optimisation round.

    Immutable: `append` returns a new TrainingSet.

    Args:
        X: Training points (N x D)
        y: Observations (N,)
    """

    X: torch.Tensor
    y: torch.Tensor

    def __post_init__(self):
        X = as_points(self.X, name='X_train')
        y = as_vector(self.y, X.shape[0], name='y_train')
        object.__setattr__(self, 'X', X)
        object.__setattr__(self, 'y', y)

    @property
    def n(self) -> int:
        return self.X.shape[0]

    @property
    def dim(self) -> int:
        return self.X.shape[1]

    def append(self, x, y) -> 'TrainingSet':
        """Training set extended by one or more observations."""
        x = as_points(x, self.dim, name='x')
        y = as_vector(y, x.shape[0], name='y')
        return TrainingSet(torch.cat([self.X, x]), torch.cat([self.y, y]))

    def incumbent(self, task='min') -> float:
        """Best observed value for the given task."""
        check_task(task)
        best = self.y.min() if task == 'min' else self.y.max()
        return best.item()

    def best_point(self, task='min') -> torch.Tensor:
        check_task(task)
        idx = torch.argmin(self.y) if task == 'min' else torch.argmax(self.y)
        return self.X[idx]


@dataclass(frozen=True, eq=False)
class Prediction:
    """GP prediction at a set of query points."""

    mean: torch.Tensor
    variance: torch.Tensor
    covariance: torch.Tensor
    fitted_params: OrderedDict

    @property
    def std(self):
        return torch.sqrt(self.variance)


@dataclass(frozen=True, eq=False)
class FittedGP:
    """
    GP with fixed hyperparameters, conditioned on a training set.

    Args:
        kernel: Kernel with a parameter schema
        training: TrainingSet
        noise: Observation noise standard deviation
        params: Kernel hyperparameters in schema order
        fit: Result of the hyperparameter fit, if one was run
        jitter: Diagonal regulariser
    """

    kernel: object
    training: TrainingSet
    noise: float
    params: OrderedDict
    fit: Optional[FitResult] = None
    jitter: float = DEFAULT_JITTER

    @property
    def dim(self) -> int:
        return self.training.dim

    def predict(self, X_query) -> Prediction:
        """
        Posterior mean, variance and covariance at `X_query`.

        Args:
            X_query: Query points (M x D), or a single point

        Returns:
            Prediction
        """
        X_query = as_points(X_query, self.dim, name='X_query')
        post = posterior(
            self.kernel, X_query, self.training.X, self.training.y,
            noise=self.noise, jitter=self.jitter, **self.params
        )
        return Prediction(
            mean=post.mean,
            variance=post.variance,
            covariance=post.covariance,
            fitted_params=OrderedDict(self.params),
        )

    def condition_on(self, x, y) -> 'FittedGP':
        """Same hyperparameters, training set extended by (x, y); no refit."""
        return FittedGP(
            kernel=self.kernel,
            training=self.training.append(x, y),
            noise=self.noise,
            params=self.params,
            fit=self.fit,
            jitter=self.jitter,
        )

    def mean_weights(self, X_query, x_extra=None):
        """
        Linear map from observations to the posterior mean at `X_query`.

        With `x_extra` the training set is augmented by that point, and the
        returned matrix (M x (N + 1)) has the weight of the extra
        observation in its last column.

        Returns:
            Weights W such that mean = W @ y
        """
        X_query = as_points(X_query, self.dim, name='X_query')
        X_train = self.training.X
        if x_extra is not None:
            X_train = torch.cat([X_train, as_points(x_extra, self.dim, name='x_extra')])

        K_tt = training_covariance(self.kernel, X_train, self.noise, self.jitter, **self.params)
        K_tq = self.kernel(X_train, X_query, **self.params)
        L = cholesky(K_tt)
        return torch.cholesky_solve(K_tq, L).T

    def log_marginal_likelihood(self) -> float:
        """Log marginal likelihood of the training data under the fitted parameters."""
        return -negative_log_likelihood(
            self.kernel, self.training.X, self.training.y,
            self.noise, self.jitter, **self.params
        )


def fit_gp(kernel, X_train, y_train, noise=0.0, initial_params=None,
           method='Nelder-Mead', max_iter=2000, jitter=DEFAULT_JITTER) -> FittedGP:
    """
    Fit kernel hyperparameters once and return a reusable predictor.

    Args:
        kernel: Kernel with a parameter schema
        X_train: Training points (N x D)
        y_train: Observations (N,)
        noise: Observation noise standard deviation
        initial_params: Mapping naming every kernel parameter, or None for
            the schema defaults
        method: scipy.optimize.minimize method
        max_iter: Iteration limit for the optimizer
        jitter: Diagonal regulariser

    Returns:
        FittedGP
    """
    training = TrainingSet(X_train, y_train)
    result = fit_hyperparameters(
        kernel, training.X, training.y, noise=noise,
        initial_params=initial_params, method=method,
        max_iter=max_iter, jitter=jitter,
    )
    logger.debug(
        "Fitted GP on %d points: %s (success=%s)",
        training.n, dict(result.params), result.success,
    )
    return FittedGP(
        kernel=kernel,
        training=training,
        noise=float(noise),
        params=result.params,
        fit=result,
        jitter=jitter,
    )
