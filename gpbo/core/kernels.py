"""Stationary kernel functions and their parameter schemas."""

import math
from collections import OrderedDict
from typing import NamedTuple, Tuple

import numpy as np
import torch
from scipy import special

from .errors import InputContractError
from .utils import as_point_pair


class Parameter(NamedTuple):
    """One named kernel hyperparameter: default value and (lower, upper) bounds."""

    name: str
    default: float
    bounds: Tuple[float, float]


def squared_distance(X1, X2):
    """
    Pairwise squared Euclidean distances.

    sqdist[i, j] = ||x_i||^2 + ||x_j||^2 - 2 x_i . x_j

    Args:
        X1: Points (N x D)
        X2: Points (M x D)

    Returns:
        Distance matrix (N x M), clamped to be non-negative
    """
    sq1 = torch.sum(X1 ** 2, dim=-1).unsqueeze(1)
    sq2 = torch.sum(X2 ** 2, dim=-1).unsqueeze(0)
    sqdist = sq1 + sq2 - 2.0 * X1 @ X2.T
    # Rounding can leave tiny negative values
    return torch.clamp(sqdist, min=0.0)


def rbf_kernel(X1, X2, length_scale=1.0, sigma_f=1.0):
    """
    Squared exponential (RBF) kernel.

    K(x1, x2) = σ_f^2 * exp(-0.5 * ||x1 - x2||^2 / l^2)

    Args:
        X1: Points (N x D), a single point, or a vector of 1-D points
        X2: Points (M x D)
        length_scale: Length-scale l
        sigma_f: Signal standard deviation σ_f

    Returns:
        Kernel matrix (N x M)
    """
    X1, X2 = as_point_pair(X1, X2)
    if X1.shape[1] != X2.shape[1]:
        raise InputContractError(
            f"Point sets have different dimensions: {X1.shape[1]} and {X2.shape[1]}"
        )
    sqdist = squared_distance(X1, X2)
    return sigma_f ** 2 * torch.exp(-0.5 * sqdist / length_scale ** 2)


def matern_kernel(X1, X2, nu=2.5, length_scale=1.0, sigma_f=1.0):
    """
    Matérn kernel with smoothness ν.

    K(r) = σ_f^2 * 2^(1-ν) / Γ(ν) * (√(2ν) r / l)^ν * K_ν(√(2ν) r / l)

    Closed forms are used for ν in {1/2, 3/2, 5/2}; otherwise the modified
    Bessel function K_ν is evaluated through scipy. K(0) = σ_f^2 exactly.

    Args:
        X1: Points (N x D)
        X2: Points (M x D)
        nu: Smoothness ν > 0
        length_scale: Length-scale l
        sigma_f: Signal standard deviation σ_f

    Returns:
        Kernel matrix (N x M)
    """
    if nu <= 0:
        raise InputContractError(f"Matérn smoothness must be positive, got {nu}")

    X1, X2 = as_point_pair(X1, X2)
    if X1.shape[1] != X2.shape[1]:
        raise InputContractError(
            f"Point sets have different dimensions: {X1.shape[1]} and {X2.shape[1]}"
        )
    dist = torch.sqrt(squared_distance(X1, X2)) / length_scale

    if nu == 0.5:
        corr = torch.exp(-dist)
    elif nu == 1.5:
        sqrt3 = math.sqrt(3)
        corr = (1 + sqrt3 * dist) * torch.exp(-sqrt3 * dist)
    elif nu == 2.5:
        sqrt5 = math.sqrt(5)
        corr = (1 + sqrt5 * dist + 5 * dist ** 2 / 3) * torch.exp(-sqrt5 * dist)
    else:
        scaled = math.sqrt(2 * nu) * dist.numpy()
        zero = scaled == 0.0
        # The Bessel term is singular at r = 0
        safe = np.where(zero, 1.0, scaled)
        values = 2 ** (1 - nu) / special.gamma(nu) * safe ** nu * special.kv(nu, safe)
        corr = torch.as_tensor(np.where(zero, 1.0, values), dtype=dist.dtype)

    return sigma_f ** 2 * corr


class Kernel:
    """
    Stationary kernel with an ordered hyperparameter schema.

    Subclasses declare `parameters`, an ordered tuple of `Parameter`. The
    same order is used for the optimizer's flat parameter vector.
    """

    parameters: Tuple[Parameter, ...] = ()

    def __call__(self, X1, X2, **params):
        return self.evaluate(X1, X2, **self.resolve(params))

    def evaluate(self, X1, X2, **params):
        raise NotImplementedError

    @property
    def names(self):
        return tuple(p.name for p in self.parameters)

    @property
    def defaults(self):
        return OrderedDict((p.name, p.default) for p in self.parameters)

    @property
    def bounds(self):
        return [p.bounds for p in self.parameters]

    def resolve(self, params, partial=True):
        """
        Complete a parameter mapping into schema order.

        Args:
            params: Mapping of parameter name to value
            partial: If False, every declared parameter must be present

        Returns:
            OrderedDict in schema order
        """
        unknown = set(params) - set(self.names)
        if unknown:
            raise InputContractError(
                f"Unknown parameters for {type(self).__name__}: {sorted(unknown)}; "
                f"expected {list(self.names)}"
            )
        if not partial:
            missing = [name for name in self.names if name not in params]
            if missing:
                raise InputContractError(
                    f"Missing parameters for {type(self).__name__}: {missing}"
                )
        return OrderedDict(
            (p.name, float(params.get(p.name, p.default))) for p in self.parameters
        )

    def to_vector(self, params):
        """Flatten a complete parameter mapping into schema order."""
        resolved = self.resolve(params, partial=False)
        return np.array(list(resolved.values()), dtype=float)

    def from_vector(self, vector):
        """Inverse of `to_vector`."""
        vector = np.asarray(vector, dtype=float).ravel()
        if vector.shape[0] != len(self.parameters):
            raise InputContractError(
                f"{type(self).__name__} takes {len(self.parameters)} parameters, "
                f"got a vector of length {vector.shape[0]}"
            )
        return OrderedDict(zip(self.names, (float(v) for v in vector)))

    def __repr__(self):
        return f"{type(self).__name__}()"


_STATIONARY_PARAMETERS = (
    Parameter('length_scale', 1.0, (1e-3, 1e3)),
    Parameter('sigma_f', 1.0, (1e-3, 1e3)),
)


class RBFKernel(Kernel):
    parameters = _STATIONARY_PARAMETERS

    def evaluate(self, X1, X2, length_scale, sigma_f):
        return rbf_kernel(X1, X2, length_scale=length_scale, sigma_f=sigma_f)


class MaternKernel(Kernel):
    """Matérn kernel; `nu` is fixed at construction and not fitted."""

    parameters = _STATIONARY_PARAMETERS

    def __init__(self, nu=2.5):
        if nu <= 0:
            raise InputContractError(f"Matérn smoothness must be positive, got {nu}")
        self.nu = nu

    def evaluate(self, X1, X2, length_scale, sigma_f):
        return matern_kernel(
            X1, X2, nu=self.nu, length_scale=length_scale, sigma_f=sigma_f
        )

    def __repr__(self):
        return f"MaternKernel(nu={self.nu})"
