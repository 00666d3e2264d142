"""Core components for GP-based Bayesian optimization."""

from .errors import (
    GPError, InputContractError, NotPositiveDefiniteError, IllConditionedCovarianceError,
)
from .kernels import Parameter, Kernel, RBFKernel, MaternKernel, rbf_kernel, matern_kernel
from .sampling import sample_multivariate_normal
from .posterior import DEFAULT_JITTER, Posterior, posterior
from .likelihood import FitResult, negative_log_likelihood, fit_hyperparameters
from .gp_model import TrainingSet, Prediction, FittedGP, fit_gp
from .acquisition import (
    expected_improvement,
    probability_of_improvement,
    lower_confidence_bound,
    upper_confidence_bound,
    confidence_bound,
    thompson_sampling,
    knowledge_gradient,
    acquisition_scores,
    select_next,
)
from .design import random_design, latin_hypercube, sobol_design, maxmin_design, initial_design
from .utils import as_points, as_vector, check_bounds, check_task

__all__ = [
    'GPError',
    'InputContractError',
    'NotPositiveDefiniteError',
    'IllConditionedCovarianceError',
    'Parameter',
    'Kernel',
    'RBFKernel',
    'MaternKernel',
    'rbf_kernel',
    'matern_kernel',
    'sample_multivariate_normal',
    'DEFAULT_JITTER',
    'Posterior',
    'posterior',
    'FitResult',
    'negative_log_likelihood',
    'fit_hyperparameters',
    'TrainingSet',
    'Prediction',
    'FittedGP',
    'fit_gp',
    'expected_improvement',
    'probability_of_improvement',
    'lower_confidence_bound',
    'upper_confidence_bound',
    'confidence_bound',
    'thompson_sampling',
    'knowledge_gradient',
    'acquisition_scores',
    'select_next',
    'random_design',
    'latin_hypercube',
    'sobol_design',
    'maxmin_design',
    'initial_design',
    'as_points',
    'as_vector',
    'check_bounds',
    'check_task',
]
