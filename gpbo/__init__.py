"""gpbo: Gaussian Process regression and acquisition functions for Bayesian optimization"""

__version__ = '1.0.0'

from .core import RBFKernel, MaternKernel, TrainingSet, FittedGP, fit_gp, posterior
from .optimizers import SequentialBO

__all__ = ['RBFKernel', 'MaternKernel', 'TrainingSet', 'FittedGP', 'fit_gp', 'posterior',
           'SequentialBO']
