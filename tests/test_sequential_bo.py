import pytest
import torch

from gpbo.core.errors import InputContractError
from gpbo.core.gp_model import FittedGP, TrainingSet
from gpbo.core.kernels import MaternKernel, RBFKernel
from gpbo.optimizers import SequentialBO


def objective(X):
    x = X[:, 0]
    return torch.sin(12 * x) * x + 0.5 * x ** 2


def negative_quadratic(X):
    return -torch.sum((X - 0.3) ** 2, dim=-1)


@pytest.mark.parametrize('acquisition', ['ei', 'pi', 'cb'])
def test_minimisation(acquisition):
    bo = SequentialBO(RBFKernel(), [(0.0, 1.0)], task='min', acquisition=acquisition,
                      n_initial=3, n_candidates=128, seed=0)
    best_x, incumbents = bo.optimize(4, objective)

    assert isinstance(bo.training, TrainingSet)
    assert isinstance(bo.model, FittedGP)
    assert bo.training.n == 7
    assert len(incumbents) == 5
    assert all(b <= a for a, b in zip(incumbents, incumbents[1:]))
    assert best_x.shape == (1,)
    assert 0.0 <= best_x.item() <= 1.0
    assert objective(best_x.reshape(1, 1)).item() == pytest.approx(incumbents[-1])


@pytest.mark.parametrize('acquisition', ['ts', 'kg'])
def test_sampling_acquisitions(acquisition):
    bo = SequentialBO(MaternKernel(), [(0.0, 1.0), (0.0, 1.0)], task='max',
                      acquisition=acquisition, noise=1e-3, n_initial=4, n_candidates=32,
                      acquisition_params={'n_samples': 8} if acquisition == 'kg' else None,
                      seed=1)
    best_x, incumbents = bo.optimize(2, negative_quadratic)

    assert bo.training.n == 6
    assert all(b >= a for a, b in zip(incumbents, incumbents[1:]))
    assert best_x.shape == (2,)


def test_seeded_runs_repeat():
    runs = []
    for _ in range(2):
        bo = SequentialBO(RBFKernel(), [(0.0, 1.0)], n_initial=3, n_candidates=64, seed=5)
        runs.append(bo.optimize(2, objective)[1])
    assert runs[0] == runs[1]


def test_explicit_candidates_are_filtered():
    candidates = torch.tensor([[-0.5], [0.25], [0.5], [1.5]], dtype=torch.float64)
    bo = SequentialBO(RBFKernel(), [(0.0, 1.0)], candidates=candidates, seed=0)
    assert bo.candidates.tolist() == [[0.25], [0.5]]

    with pytest.raises(InputContractError):
        SequentialBO(RBFKernel(), [(0.0, 1.0)], candidates=[[2.0]])


def test_invalid_configuration():
    with pytest.raises(InputContractError):
        SequentialBO(RBFKernel(), [(0.0, 1.0)], acquisition='ucb')
    with pytest.raises(InputContractError):
        SequentialBO(RBFKernel(), [(0.0, 1.0)], task='minimise')
