"""Initial experiment designs over a box."""

import numpy as np
import torch
from scipy.spatial.distance import pdist
from scipy.stats import qmc

from .errors import InputContractError
from .utils import scale_to_bounds


def _check(n, bounds, n_trials=1):
    if n < 1:
        raise InputContractError(f"Design size must be positive, got {n}")
    if n_trials < 1:
        raise InputContractError(f"n_trials must be positive, got {n_trials}")
    for lower, upper in bounds:
        if not lower < upper:
            raise InputContractError(f"Invalid bounds ({lower}, {upper})")


def random_design(n, bounds, seed=None):
    """Uniform random points in the box."""
    _check(n, bounds)
    rng = np.random.default_rng(seed)
    return scale_to_bounds(rng.random((n, len(bounds))), bounds)


def latin_hypercube(n, bounds, seed=None):
    """Latin hypercube: one point per stratum along every axis."""
    _check(n, bounds)
    sampler = qmc.LatinHypercube(d=len(bounds), seed=seed)
    return scale_to_bounds(sampler.random(n), bounds)


def sobol_design(n, bounds, seed=None):
    """Scrambled Sobol sequence. Balance properties need n to be a power of two."""
    _check(n, bounds)
    sampler = qmc.Sobol(d=len(bounds), scramble=True, seed=seed)
    return scale_to_bounds(sampler.random(n), bounds)


def maxmin_design(n, bounds, n_trials=50, seed=None):
    """
    Best of `n_trials` Latin hypercubes by minimum pairwise distance.

    Args:
        n: Number of points
        bounds: List of (lower, upper) tuples
        n_trials: Number of candidate designs
        seed: Random seed

    Returns:
        Design (n x D)
    """
    _check(n, bounds, n_trials)
    rng = np.random.default_rng(seed)
    best, best_score = None, -np.inf
    for _ in range(n_trials):
        unit = qmc.LatinHypercube(d=len(bounds), seed=rng).random(n)
        score = pdist(unit).min() if n > 1 else 0.0
        if score > best_score:
            best, best_score = unit, score
    return scale_to_bounds(best, bounds)


DESIGNS = {
    'random': random_design,
    'lhs': latin_hypercube,
    'sobol': sobol_design,
    'maxmin': maxmin_design,
}


def initial_design(name, n, bounds, seed=None) -> torch.Tensor:
    """Dispatch to a design by name ('random', 'lhs', 'sobol', 'maxmin')."""
    if name not in DESIGNS:
        raise InputContractError(
            f"Unknown design {name!r}; expected one of {sorted(DESIGNS)}"
        )
    return DESIGNS[name](n, bounds, seed=seed)
