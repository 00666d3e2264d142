"""Acquisition functions."""

import logging

import torch
from torch.distributions.normal import Normal

from .errors import InputContractError
from .sampling import sample_multivariate_normal
from .utils import DTYPE, as_points, as_vector, check_task, make_generator

logger = logging.getLogger(__name__)


def _normal():
    return Normal(torch.tensor(0.0, dtype=DTYPE), torch.tensor(1.0, dtype=DTYPE))


def _inputs(mu, sigma):
    mu = as_vector(mu, name='mu')
    sigma = as_vector(sigma, mu.shape[0], name='sigma')
    if torch.any(sigma < 0):
        raise InputContractError("Predictive standard deviations must be non-negative")
    return mu, sigma


def improvement(mu, f_best, task='min', xi=0.01):
    """
    Improvement of the predictive mean over the incumbent, less the margin ξ.

    imp = f_best - μ - ξ (min) or μ - f_best - ξ (max)
    """
    check_task(task)
    if task == 'min':
        return f_best - mu - xi
    return mu - f_best - xi


def expected_improvement(mu, sigma, f_best, task='min', xi=0.01):
    """
    Expected Improvement acquisition function.

    EI = imp * Φ(imp / σ) + σ * φ(imp / σ), and EI = 0 where σ = 0.

    Args:
        mu: Predictive mean (N,)
        sigma: Predictive std (N,)
        f_best: Current best value
        task: 'min' or 'max'
        xi: Exploration parameter, ξ >= 0

    Returns:
        EI values (N,)
    """
    mu, sigma = _inputs(mu, sigma)
    imp = improvement(mu, f_best, task, xi)

    normal = _normal()
    positive = sigma > 0
    safe_sigma = torch.where(positive, sigma, torch.ones_like(sigma))
    z = imp / safe_sigma
    ei = imp * normal.cdf(z) + safe_sigma * torch.exp(normal.log_prob(z))
    # Clamp tiny negatives from cancellation in the tails
    ei = torch.clamp(ei, min=0.0)
    return torch.where(positive, ei, torch.zeros_like(ei))


def probability_of_improvement(mu, sigma, f_best, task='min', xi=0.01):
    """
    Probability of Improvement acquisition function.

    PI = Φ(imp / σ). Where σ = 0 this is the limit: 1 if imp > 0, else 0.

    Args:
        mu: Predictive mean (N,)
        sigma: Predictive std (N,)
        f_best: Current best value
        task: 'min' or 'max'
        xi: Exploration parameter

    Returns:
        PI values (N,)
    """
    mu, sigma = _inputs(mu, sigma)
    imp = improvement(mu, f_best, task, xi)

    positive = sigma > 0
    safe_sigma = torch.where(positive, sigma, torch.ones_like(sigma))
    pi = _normal().cdf(imp / safe_sigma)
    step = (imp > 0).to(DTYPE)
    return torch.where(positive, pi, step)


def lower_confidence_bound(mu, sigma, kappa=2.0):
    """LCB = μ - κσ."""
    mu, sigma = _inputs(mu, sigma)
    return mu - kappa * sigma


def upper_confidence_bound(mu, sigma, kappa=2.0):
    """
    Upper Confidence Bound acquisition function.

    Args:
        mu: Predictive mean (N,)
        sigma: Predictive std (N,)
        kappa: Exploration parameter

    Returns:
        UCB values (N,)
    """
    mu, sigma = _inputs(mu, sigma)
    return mu + kappa * sigma


def confidence_bound(mu, sigma, task='min', kappa=2.0):
    """LCB for minimisation, UCB for maximisation."""
    check_task(task)
    if kappa <= 0:
        raise InputContractError(f"kappa must be positive, got {kappa}")
    if task == 'min':
        return lower_confidence_bound(mu, sigma, kappa)
    return upper_confidence_bound(mu, sigma, kappa)


def thompson_sampling(mu, covariance, task='min', seed=None):
    """
    One function sample from the full posterior N(μ, Σ).

    The next point is the arg-min (min) or arg-max (max) of the sample.

    Args:
        mu: Posterior mean (N,)
        covariance: Posterior covariance (N x N)
        task: 'min' or 'max'
        seed: int seed or torch.Generator

    Returns:
        Sampled function values (N,)
    """
    check_task(task)
    return sample_multivariate_normal(1, mu, covariance, seed=seed)[0]


def knowledge_gradient(gp, candidates, task='min', n_samples=100, seed=None):
    """
    Monte Carlo Knowledge Gradient.

    For each candidate, simulate `n_samples` observations from its posterior,
    condition the GP on each (hyperparameters are kept, not refitted) and
    average the change in the optimum of the posterior mean over all
    candidates.

    The augmented posterior mean is linear in the simulated observation, so
    one Cholesky solve per candidate serves all of its simulations.

    Args:
        gp: FittedGP
        candidates: Candidate points (N x D)
        task: 'min' or 'max'
        n_samples: Simulations per candidate
        seed: int seed or torch.Generator

    Returns:
        KG values (N,)
    """
    check_task(task)
    if n_samples < 1:
        raise InputContractError(f"n_samples must be positive, got {n_samples}")

    candidates = as_points(candidates, gp.dim, name='candidates')
    generator = make_generator(seed)
    prediction = gp.predict(candidates)
    y_train = gp.training.y
    best = torch.min if task == 'min' else torch.max

    current = best(prediction.mean)
    kg = torch.empty(candidates.shape[0], dtype=DTYPE)

    for i in range(candidates.shape[0]):
        z = torch.randn(n_samples, generator=generator, dtype=DTYPE)
        y_sim = prediction.mean[i] + prediction.std[i] * z

        W = gp.mean_weights(candidates, x_extra=candidates[i])
        # (M candidates x S simulations)
        means = (W[:, :-1] @ y_train).unsqueeze(1) + W[:, -1:] * y_sim.unsqueeze(0)
        simulated = best(means, dim=0).values

        if task == 'min':
            kg[i] = torch.mean(current - simulated)
        else:
            kg[i] = torch.mean(simulated - current)

    logger.debug(
        "Knowledge gradient over %d candidates x %d samples", candidates.shape[0], n_samples
    )
    return kg


# name: (higher score is better for 'min', higher score is better for 'max')
ACQUISITIONS = {
    'ei': (True, True),
    'pi': (True, True),
    'cb': (False, True),
    'ts': (False, True),
    'kg': (True, True),
}


def _check_name(name):
    if name not in ACQUISITIONS:
        raise InputContractError(
            f"Unknown acquisition function {name!r}; expected one of {sorted(ACQUISITIONS)}"
        )


def acquisition_scores(name, gp, candidates, task='min', **params):
    """
    Score candidates with the named acquisition function.

    Args:
        name: One of 'ei', 'pi', 'cb', 'ts', 'kg'
        gp: FittedGP
        candidates: Candidate points (N x D)
        task: 'min' or 'max'
        **params: Extra acquisition parameters (xi, kappa, n_samples, seed)

    Returns:
        Scores (N,)
    """
    check_task(task)
    _check_name(name)

    if name == 'kg':
        return knowledge_gradient(gp, candidates, task=task, **params)

    prediction = gp.predict(candidates)
    if name == 'ts':
        return thompson_sampling(prediction.mean, prediction.covariance, task=task, **params)
    if name == 'cb':
        return confidence_bound(prediction.mean, prediction.std, task=task, **params)

    f_best = gp.training.incumbent(task)
    fn = expected_improvement if name == 'ei' else probability_of_improvement
    return fn(prediction.mean, prediction.std, f_best, task=task, **params)


def select_next(name, scores, task='min'):
    """Index of the best-scoring candidate for the named acquisition function."""
    check_task(task)
    _check_name(name)
    higher_is_better = ACQUISITIONS[name][0 if task == 'min' else 1]
    return int(torch.argmax(scores) if higher_is_better else torch.argmin(scores))
