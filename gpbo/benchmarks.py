"""
Benchmark objective functions.

Each function maps points (N x D) to values (N,). Domains and known global
minima are collected in `BENCHMARKS`.
"""

import math
from typing import Callable, NamedTuple, Optional

import torch

from .core.errors import InputContractError
from .core.utils import DTYPE, as_points


def ackley(X, a=20.0, b=0.2, c=2 * math.pi):
    """Ackley function. Global minimum 0 at the origin."""
    X = as_points(X)
    d = X.shape[1]
    term1 = -a * torch.exp(-b * torch.sqrt(torch.sum(X ** 2, dim=-1) / d))
    term2 = -torch.exp(torch.sum(torch.cos(c * X), dim=-1) / d)
    return term1 + term2 + a + math.e


def rastrigin(X, A=10.0):
    """Rastrigin function. Global minimum 0 at the origin."""
    X = as_points(X)
    d = X.shape[1]
    return A * d + torch.sum(X ** 2 - A * torch.cos(2 * math.pi * X), dim=-1)


def michalewicz(X, m=10):
    """Michalewicz function. In 2-D the minimum is about -1.8013 at (2.20, 1.57)."""
    X = as_points(X)
    i = torch.arange(1, X.shape[1] + 1, dtype=DTYPE)
    return -torch.sum(torch.sin(X) * torch.sin(i * X ** 2 / math.pi) ** (2 * m), dim=-1)


def styblinski_tang(X):
    """Styblinski-Tang function. Minimum about -39.16617 d at x_i = -2.903534."""
    X = as_points(X)
    return 0.5 * torch.sum(X ** 4 - 16 * X ** 2 + 5 * X, dim=-1)


def zakharov(X):
    """Zakharov function. Global minimum 0 at the origin."""
    X = as_points(X)
    i = torch.arange(1, X.shape[1] + 1, dtype=DTYPE)
    s = torch.sum(0.5 * i * X, dim=-1)
    return torch.sum(X ** 2, dim=-1) + s ** 2 + s ** 4


_LANGERMANN_A = [[3.0, 5.0], [5.0, 2.0], [2.0, 1.0], [1.0, 4.0], [7.0, 9.0]]
_LANGERMANN_C = [1.0, 2.0, 5.0, 2.0, 3.0]


def langermann(X):
    """Langermann function in 2-D with the usual constants (m = 5)."""
    X = as_points(X, 2)
    A = torch.tensor(_LANGERMANN_A, dtype=DTYPE)
    c = torch.tensor(_LANGERMANN_C, dtype=DTYPE)
    sq = torch.sum((X.unsqueeze(1) - A.unsqueeze(0)) ** 2, dim=-1)
    return torch.sum(c * torch.exp(-sq / math.pi) * torch.cos(math.pi * sq), dim=-1)


def shubert(X):
    """Shubert function in 2-D. Global minimum about -186.7309 (18 minimizers)."""
    X = as_points(X, 2)
    i = torch.arange(1, 6, dtype=DTYPE)
    terms = torch.sum(
        i * torch.cos((i + 1) * X.unsqueeze(-1) + i), dim=-1
    )
    return terms[:, 0] * terms[:, 1]


def branin(X, a=1.0, b=5.1 / (4 * math.pi ** 2), c=5 / math.pi, r=6.0, s=10.0,
           t=1 / (8 * math.pi)):
    """Branin-Hoo function. Global minimum 0.397887 at three points."""
    X = as_points(X, 2)
    x1, x2 = X[:, 0], X[:, 1]
    return a * (x2 - b * x1 ** 2 + c * x1 - r) ** 2 + s * (1 - t) * torch.cos(x1) + s


class Benchmark(NamedTuple):
    function: Callable
    bounds: Callable[[int], list]
    optimum: Optional[float] = None
    dim: Optional[int] = None

    def domain(self, d=None):
        """Bounds in `d` dimensions; fixed-dimension benchmarks default to their own."""
        if d is None:
            if self.dim is None:
                raise InputContractError("This benchmark needs an explicit dimension")
            d = self.dim
        elif self.dim is not None and d != self.dim:
            raise InputContractError(f"Benchmark is only defined for d = {self.dim}")
        return self.bounds(d)


def _box(lower, upper):
    return lambda d: [(lower, upper)] * d


def _fixed(*bounds):
    def domain(d=len(bounds)):
        if d != len(bounds):
            raise InputContractError(f"Benchmark is only defined for d = {len(bounds)}")
        return list(bounds)
    return domain


BENCHMARKS = {
    'ackley': Benchmark(ackley, _box(-32.768, 32.768), 0.0),
    'rastrigin': Benchmark(rastrigin, _box(-5.12, 5.12), 0.0),
    'michalewicz': Benchmark(michalewicz, _box(0.0, math.pi)),
    'styblinski_tang': Benchmark(styblinski_tang, _box(-5.0, 5.0)),
    'zakharov': Benchmark(zakharov, _box(-5.0, 10.0), 0.0),
    'langermann': Benchmark(langermann, _fixed((0.0, 10.0), (0.0, 10.0)), dim=2),
    'shubert': Benchmark(shubert, _fixed((-10.0, 10.0), (-10.0, 10.0)), -186.7309, dim=2),
    'branin': Benchmark(branin, _fixed((-5.0, 10.0), (0.0, 15.0)), 0.397887, dim=2),
}
