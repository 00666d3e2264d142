"""Compare acquisition functions on a 1-D GP."""

import torch

from gpbo import RBFKernel, fit_gp
from gpbo.core import acquisition_scores, select_next


def objective(x):
    """sin(12x) x + 0.5 x^2 on [0, 1]."""
    return torch.sin(12 * x) * x + 0.5 * x ** 2


def main():
    X_train = torch.tensor([0.1, 0.2, 0.7, 0.75], dtype=torch.float64)
    y_train = objective(X_train)

    gp = fit_gp(RBFKernel(), X_train, y_train, noise=0.0,
                initial_params={'length_scale': 0.1, 'sigma_f': 1.0})

    print("="*60)
    print("Acquisition Function Comparison")
    print("="*60)
    print(f"Fitted hyperparameters: {dict(gp.params)}")
    print(f"Converged: {gp.fit.success}, NLL: {gp.fit.nll:.4f}")

    grid = torch.linspace(0, 1, 100, dtype=torch.float64)
    settings = {
        'ei': {'xi': 0.01},
        'pi': {'xi': 0.01},
        'cb': {'kappa': 2.0},
        'ts': {'seed': 0},
        'kg': {'n_samples': 50, 'seed': 0},
    }

    print(f"\n{'acquisition':<12} {'next x':>8}")
    for name, params in settings.items():
        scores = acquisition_scores(name, gp, grid, task='min', **params)
        idx = select_next(name, scores, task='min')
        print(f"{name:<12} {grid[idx].item():8.4f}")


if __name__ == "__main__":
    main()
