"""Sequential Bayesian Optimization."""

import logging
from typing import Callable, Dict, List, Optional, Tuple

import torch

from ..core import (
    TrainingSet, fit_gp, acquisition_scores, select_next,
    initial_design, sobol_design, check_bounds, check_task,
)
from ..core.acquisition import ACQUISITIONS
from ..core.errors import InputContractError
from ..core.kernels import Kernel
from ..core.utils import as_vector

logger = logging.getLogger(__name__)


class SequentialBO:
    """
    Sequential single-objective Bayesian Optimization over a box.

    Every round fits a fresh GP to the current training set, scores a fixed
    candidate set with the acquisition function, evaluates the objective at
    the chosen candidate and replaces the training set with the extended one.

    Args:
        kernel: Kernel with a parameter schema
        bounds: List of (lower, upper) bounds per dimension
        task: 'min' or 'max'
        acquisition: 'ei', 'pi', 'cb', 'ts' or 'kg'
        noise: Observation noise standard deviation
        initial_params: Starting kernel hyperparameters, or None for defaults
        n_initial: Size of the initial design
        design: 'random', 'lhs', 'sobol' or 'maxmin'
        n_candidates: Size of the Sobol candidate set
        candidates: Explicit candidate points; overrides `n_candidates`
        acquisition_params: Extra acquisition parameters (xi, kappa, n_samples)
        seed: Random seed
    """

    def __init__(
        self,
        kernel: Kernel,
        bounds: List[Tuple[float, float]],
        task: str = 'min',
        acquisition: str = 'ei',
        noise: float = 0.0,
        initial_params: Optional[Dict[str, float]] = None,
        n_initial: int = 5,
        design: str = 'lhs',
        n_candidates: int = 512,
        candidates=None,
        acquisition_params: Optional[Dict[str, float]] = None,
        seed: Optional[int] = None
    ):
        if acquisition not in ACQUISITIONS:
            raise InputContractError(
                f"Unknown acquisition function {acquisition!r}; "
                f"expected one of {sorted(ACQUISITIONS)}"
            )
        self.kernel = kernel
        self.bounds = list(bounds)
        self.task = check_task(task)
        self.acquisition = acquisition
        self.noise = noise
        self.initial_params = initial_params
        self.n_initial = n_initial
        self.design = design
        self.acquisition_params = dict(acquisition_params or {})
        self.seed = seed

        if candidates is None:
            candidates = sobol_design(n_candidates, self.bounds, seed=seed)
        self.candidates = check_bounds(candidates, self.bounds)
        if self.candidates.shape[0] == 0:
            raise InputContractError("No candidate points inside the bounds")

        # Optimization state
        self.training: Optional[TrainingSet] = None
        self.model = None

    def optimize(
        self,
        n_iterations: int,
        objective_fn: Callable
    ) -> Tuple[torch.Tensor, List[float]]:
        """
        Run optimization.

        Args:
            n_iterations: Number of acquisition rounds after the initial design
            objective_fn: Function mapping points (N x D) to values (N,)

        Returns:
            best_x: Best point found
            incumbents: Best observed value after each round
        """
        X0 = initial_design(self.design, self.n_initial, self.bounds, seed=self.seed)
        self.training = TrainingSet(X0, self._evaluate(objective_fn, X0))
        incumbents = [self.training.incumbent(self.task)]
        params = self.initial_params

        for it in range(n_iterations):
            self.model = fit_gp(
                self.kernel, self.training.X, self.training.y,
                noise=self.noise, initial_params=params
            )
            # Warm start the next fit
            params = self.model.params

            x_next = self._next_point(it)
            y_next = self._evaluate(objective_fn, x_next)
            self.training = self.training.append(x_next, y_next)
            incumbents.append(self.training.incumbent(self.task))

            logger.info(
                "Round %d: x=%s y=%.6g incumbent=%.6g",
                it + 1, x_next.tolist(), y_next.item(), incumbents[-1],
            )

        return self.training.best_point(self.task), incumbents

    def _next_point(self, it):
        """Candidate maximizing (or minimizing) the acquisition score."""
        params = dict(self.acquisition_params)
        if self.acquisition in ('ts', 'kg') and 'seed' not in params and self.seed is not None:
            params['seed'] = self.seed + it

        scores = acquisition_scores(
            self.acquisition, self.model, self.candidates, task=self.task, **params
        )
        idx = select_next(self.acquisition, scores, self.task)
        return self.candidates[idx:idx + 1]

    def _evaluate(self, objective_fn, X):
        return as_vector(objective_fn(X), X.shape[0], name='objective values')
