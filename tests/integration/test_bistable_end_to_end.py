# tests/integration/test_bistable_end_to_end.py
"""
End-to-end basins of a toy system with four attractors.

x' = x - x^3 in each of two coordinates has stable fixed points at
(+-1, +-1); the quadrant of the initial condition decides the attractor.
Both strategies must recover the quadrants from the same initial conditions.
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from featurebasins import build_config, FeaturizingMapper, fractions, classify

import utils
import data_gen


def _quadrant_ics(rng, n=200):
    magnitude = rng.uniform(0.15, 2.0, size=(n, 2))
    signs = rng.choice([-1.0, 1.0], size=(n, 2))
    return magnitude * signs


def _quadrant_ids(ics):
    return (ics[:, 0] > 0).astype(int) * 2 + (ics[:, 1] > 0).astype(int)


def test_unsupervised_recovers_quadrants(rng, torch_device):
    ics = _quadrant_ics(rng)
    config = build_config(data_gen.identity_featurizer, min_neighbors=10)
    mapper = FeaturizingMapper(data_gen.bistable_generator, config, total=5, transient=25,
                               dt=0.5, max_workers=4, device=torch_device)

    with utils.time_block("bistable_unsupervised", {"n": len(ics)}):
        fs, labels, attractors = fractions(ics, mapper, show_progress=False)

    assert set(fs) == {1, 2, 3, 4}
    quadrants = _quadrant_ids(ics)
    for quadrant in range(4):
        in_quadrant = labels[torch.as_tensor(quadrants == quadrant)]
        assert len(set(in_quadrant.tolist())) == 1

    # Fractions are ranked by basin size
    sizes = [fs[label] for label in sorted(fs)]
    assert sizes == sorted(sizes, reverse=True)

    for trajectory in attractors.values():
        assert np.allclose(np.abs(trajectory.states[-1]), 1.0, atol=1e-3)


def test_supervised_matches_quadrant_templates(rng):
    ics = _quadrant_ics(rng, n=80)
    attractors_ic = {q: [(-0.5, 0.5)[q // 2], (-0.5, 0.5)[q % 2]] for q in range(4)}
    mapper = FeaturizingMapper(data_gen.bistable_generator,
                               build_config(data_gen.identity_featurizer, clustering_threshold=0.5),
                               total=5, transient=25, dt=0.5, max_workers=4,
                               attractors_ic=attractors_ic)

    labels, errors = classify(ics, mapper, show_progress=False)

    assert np.array_equal(labels.numpy(), _quadrant_ids(ics))
    assert torch.all(errors < 1e-3)


def test_runs_are_deterministic(rng):
    ics = _quadrant_ics(rng, n=60)
    config = build_config(data_gen.identity_featurizer, min_neighbors=5,
                          optimal_radius_method="silhouettes")
    mapper = FeaturizingMapper(data_gen.bistable_generator, config, total=5, transient=25,
                               dt=0.5, max_workers=3)

    first = classify(ics, mapper, show_progress=False)
    second = classify(ics, mapper, show_progress=False)
    assert torch.equal(first.labels, second.labels)
    assert torch.allclose(first.errors, second.errors)
