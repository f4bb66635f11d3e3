"""
Basins of the damped, unforced Duffing oscillator.

    x'' + d x' - x + x^3 = 0

has two stable fixed points at x = -1 and x = +1. This example shows how to:
1. Write a trajectory generator and a featurizer
2. Find the attractors without prior knowledge (density clustering)
3. Match against known attractors (nearest template)
4. Plot the feature space and the basin fractions
"""

import numpy as np
import matplotlib.pyplot as plt

from featurebasins import build_config, FeaturizingMapper, fractions, classify
from featurebasins.visualization import plot_feature_clusters, plot_basins_fractions

DAMPING = 0.3


def duffing_rhs(u):
    x, v = u
    return np.array([v, -DAMPING * v + x - x ** 3])


def duffing_generator(u0, total, transient, dt, substeps=10):
    """RK4 integration recording states every dt after the transient."""
    h = dt / substeps
    u = np.array(u0, dtype=float)

    def step(u):
        k1 = duffing_rhs(u)
        k2 = duffing_rhs(u + 0.5 * h * k1)
        k3 = duffing_rhs(u + 0.5 * h * k2)
        k4 = duffing_rhs(u + h * k3)
        return u + h / 6.0 * (k1 + 2 * k2 + 2 * k3 + k4)

    for _ in range(int(round(transient / dt)) * substeps):
        u = step(u)

    n_records = int(round(total / dt)) + 1
    states = np.empty((n_records, 2))
    for i in range(n_records):
        states[i] = u
        for _ in range(substeps):
            u = step(u)
    return states


def featurizer(states, times):
    """Mean and minimum position over the recorded window."""
    return np.array([states[:, 0].mean(), states[:, 0].min()])


def main():
    rng = np.random.default_rng(42)
    ics = rng.uniform(-2, 2, size=(500, 2))

    # Unsupervised: clusters in feature space are the attractors
    config = build_config(featurizer, min_neighbors=10, rescale_features=False)
    mapper = FeaturizingMapper(duffing_generator, config, total=20, transient=100, dt=0.5,
                               verbose=1)
    fs, labels, attractors = fractions(ics, mapper)

    print("\nUnsupervised basin fractions:")
    for label, fraction in fs.items():
        print(f"  {label:>3}: {fraction:.3f}")
    for label, trajectory in attractors.items():
        print(f"  attractor {label} settles at x = {trajectory.states[-1, 0]:+.3f}")

    # Supervised: one initial condition per known attractor
    supervised = FeaturizingMapper(duffing_generator, build_config(featurizer),
                                   total=20, transient=100, dt=0.5,
                                   attractors_ic=np.array([[-1.0, 0.0], [1.0, 0.0]]))
    sup_labels, sup_errors = classify(ics, supervised)
    print(f"\nSupervised fractions: {dict(zip(*np.unique(sup_labels.numpy(), return_counts=True)))}")
    print(f"Largest template distance: {sup_errors.max().item():.3e}")

    # Visualize
    features = mapper.extract_features(ics, show_progress=False)
    fig, axes = plt.subplots(1, 3, figsize=(16, 5))

    axes[0].scatter(ics[:, 0], ics[:, 1], c=labels.numpy(), cmap='coolwarm', s=15)
    axes[0].set_xlabel('x0')
    axes[0].set_ylabel('v0')
    axes[0].set_title('Basins of attraction')

    plot_feature_clusters(features, labels, ax=axes[1], title='Feature space')
    plot_basins_fractions(fs, ax=axes[2], title='Basin fractions')

    plt.tight_layout()
    plt.savefig('duffing_basins.png', dpi=150)
    plt.show()


if __name__ == "__main__":
    main()
