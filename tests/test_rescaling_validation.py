# tests/test_rescaling_validation.py
"""
Feature rescaling and feature-matrix validation.

- Every rescaled feature dimension lies in [0, 1] and reaches both ends.
- Constant feature dimensions map to zeros instead of dividing by zero.
- Feature vectors are checked for length agreement and finiteness.
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from featurebasins.utils.validation import (
    validate_data,
    validate_feature_vectors,
    rescale_to_unit_interval,
    rescale_features,
    check_min_neighbors,
)


def test_rescale_features_bounds(rng):
    features = torch.as_tensor(rng.normal(size=(4, 50)) * [[1.0], [100.0], [1e-3], [7.0]])
    scaled = rescale_features(features)

    assert scaled.shape == features.shape
    assert torch.all(scaled >= 0.0)
    assert torch.all(scaled <= 1.0)
    assert torch.allclose(scaled.min(dim=1).values, torch.zeros(4, dtype=scaled.dtype))
    assert torch.allclose(scaled.max(dim=1).values, torch.ones(4, dtype=scaled.dtype))


def test_rescale_constant_feature_maps_to_zeros():
    features = torch.tensor([[3.0, 3.0, 3.0, 3.0],
                             [1.0, 2.0, 3.0, 5.0]], dtype=torch.float64)
    scaled = rescale_features(features)

    assert torch.equal(scaled[0], torch.zeros(4, dtype=torch.float64))
    assert torch.allclose(scaled[1], torch.tensor([0.0, 0.25, 0.5, 1.0], dtype=torch.float64))
    assert torch.isfinite(scaled).all()


def test_rescale_does_not_modify_input():
    features = torch.tensor([[1.0, 5.0, 9.0]], dtype=torch.float64)
    before = features.clone()
    rescale_features(features)
    assert torch.equal(features, before)


def test_rescale_to_unit_interval_vector():
    vec = torch.tensor([-2.0, 0.0, 2.0], dtype=torch.float64)
    assert torch.allclose(rescale_to_unit_interval(vec),
                          torch.tensor([0.0, 0.5, 1.0], dtype=torch.float64))
    assert torch.equal(rescale_to_unit_interval(torch.full((3,), 4.0)), torch.zeros(3))


def test_validate_feature_vectors_stacks_columns():
    features = validate_feature_vectors([np.array([1.0, 2.0]), [3.0, 4.0], torch.tensor([5.0, 6.0])])
    assert features.shape == (2, 3)
    assert features.dtype == torch.float64
    assert torch.equal(features[:, 1], torch.tensor([3.0, 4.0], dtype=torch.float64))


def test_validate_feature_vectors_scalar_features():
    features = validate_feature_vectors([1.0, 2.0, 3.0])
    assert features.shape == (1, 3)


@pytest.mark.parametrize("vectors, match", [
    ([], "No feature vectors"),
    ([[1.0, 2.0], [1.0, 2.0, 3.0]], "length"),
    ([np.ones((2, 2))], "1D"),
    ([[1.0, np.nan]], "NaN"),
    ([[1.0, np.inf]], "infinite"),
])
def test_validate_feature_vectors_rejects(vectors, match):
    with pytest.raises(ValueError, match=match):
        validate_feature_vectors(vectors)


def test_validate_data_layout_and_errors():
    X = validate_data(np.arange(6.0).reshape(2, 3))
    assert X.shape == (2, 3)
    assert validate_data([1.0, 2.0, 3.0]).shape == (1, 3)

    with pytest.raises(ValueError):
        validate_data(np.zeros((2, 2, 2)))
    with pytest.raises(TypeError):
        validate_data("not an array")


def test_check_min_neighbors():
    assert check_min_neighbors(np.int64(4)) == 4
    with pytest.raises(ValueError):
        check_min_neighbors(0)
    with pytest.raises(TypeError):
        check_min_neighbors(2.5)
