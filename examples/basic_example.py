"""Basic example of Sequential BO on the Branin-Hoo function."""

import logging

from gpbo import MaternKernel, SequentialBO
from gpbo.benchmarks import BENCHMARKS


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    benchmark = BENCHMARKS['branin']

    print("="*60)
    print("Sequential Bayesian Optimization Example")
    print("="*60)

    # Create optimizer
    optimizer = SequentialBO(
        kernel=MaternKernel(nu=2.5),
        bounds=benchmark.domain(),
        task='min',
        acquisition='ei',
        n_initial=6,
        design='maxmin',
        seed=0
    )

    print("\nMinimizing Branin-Hoo on [-5, 10] x [0, 15]")
    print(f"Known minimum: {benchmark.optimum:.6f}")
    print("\nRunning 15 iterations...")

    best_x, incumbents = optimizer.optimize(
        n_iterations=15,
        objective_fn=benchmark.function
    )

    print("\n" + "="*60)
    print("RESULTS")
    print("="*60)
    print(f"Best point found: ({best_x[0]:.4f}, {best_x[1]:.4f})")
    print(f"Best value:       {incumbents[-1]:.6f}")
    print(f"Final regret:     {incumbents[-1] - benchmark.optimum:.6f}")
    print(f"Fitted kernel:    {dict(optimizer.model.params)}")

    print("\nIncumbent history:")
    for i, value in enumerate(incumbents):
        print(f"  Iteration {i:2d}: {value:.6f}")


if __name__ == "__main__":
    main()
