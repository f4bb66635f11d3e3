# tests/test_distances.py
"""
Feature-space distance metrics and the metric registry.
"""

from __future__ import annotations

import math

import pytest
import torch

from featurebasins.distances import (
    EuclideanDistance,
    WeightedEuclideanDistance,
    MinkowskiDistance,
    CityblockDistance,
    ChebyshevDistance,
    CosineDistance,
    get_metric,
)


def _points():
    X = torch.tensor([[0.0, 0.0], [3.0, 4.0], [1.0, 1.0]], dtype=torch.float64)
    Y = torch.tensor([[0.0, 0.0], [1.0, 0.0]], dtype=torch.float64)
    return X, Y


def test_euclidean_pairwise_values():
    X, Y = _points()
    D = EuclideanDistance().pairwise(X, Y)

    assert D.shape == (3, 2)
    assert D[1, 0].item() == pytest.approx(5.0)
    assert D[2, 1].item() == pytest.approx(1.0)
    assert D[0, 0].item() == 0.0


def test_euclidean_self_distance_is_exactly_zero(rng):
    X = torch.as_tensor(rng.normal(size=(20, 3)) * 1e3)
    D = EuclideanDistance().pairwise(X, X)
    assert torch.all(torch.diagonal(D) == 0.0)
    assert torch.allclose(D, D.t())


def test_squared_and_weighted_euclidean():
    X, Y = _points()
    assert EuclideanDistance(squared=True).pairwise(X, Y)[1, 0].item() == pytest.approx(25.0)

    weighted = WeightedEuclideanDistance(torch.tensor([4.0, 0.0], dtype=torch.float64))
    assert weighted.pairwise(X, Y)[1, 0].item() == pytest.approx(6.0)


def test_colwise_matches_pairwise():
    X, _ = _points()
    center = torch.tensor([1.0, 2.0], dtype=torch.float64)
    for metric in [EuclideanDistance(), CityblockDistance(), ChebyshevDistance()]:
        expected = metric.pairwise(X, center.unsqueeze(0)).squeeze(1)
        assert torch.allclose(metric.colwise(X, center), expected)


def test_minkowski_family():
    X, Y = _points()
    assert CityblockDistance().pairwise(X, Y)[1, 0].item() == pytest.approx(7.0)
    assert ChebyshevDistance().pairwise(X, Y)[1, 0].item() == pytest.approx(4.0)
    assert MinkowskiDistance(p=2).pairwise(X, Y)[1, 0].item() == pytest.approx(5.0)
    assert MinkowskiDistance(p=3).pairwise(X, Y)[1, 0].item() == pytest.approx((27 + 64) ** (1 / 3))


def test_cosine_distance_range():
    X = torch.tensor([[1.0, 0.0], [0.0, 2.0], [-3.0, 0.0]], dtype=torch.float64)
    D = CosineDistance().pairwise(X, X)
    assert D[0, 1].item() == pytest.approx(1.0)
    assert D[0, 2].item() == pytest.approx(2.0)
    assert D[0, 0].item() == pytest.approx(0.0, abs=1e-12)


def test_get_metric_registry():
    assert isinstance(get_metric(None), EuclideanDistance)
    assert isinstance(get_metric("Euclidean"), EuclideanDistance)
    assert isinstance(get_metric("manhattan"), CityblockDistance)
    assert isinstance(get_metric("chebyshev"), ChebyshevDistance)

    metric = ChebyshevDistance()
    assert get_metric(metric) is metric

    with pytest.raises(ValueError):
        get_metric("hamming")
    with pytest.raises(TypeError):
        get_metric(3)


def test_metric_is_callable():
    X, Y = _points()
    metric = EuclideanDistance()
    assert torch.equal(metric(X, Y), metric.pairwise(X, Y))
    assert math.isclose(metric(X, Y)[1, 1].item(), math.sqrt(20.0))


def test_named_metrics_with_parameters():
    X, Y = _points()

    minkowski = get_metric("minkowski")
    assert isinstance(minkowski, MinkowskiDistance) and minkowski.p == 2.0
    assert get_metric("Minkowski", p=3).pairwise(X, Y)[1, 0].item() == \
        pytest.approx((27 + 64) ** (1 / 3))

    weighted = get_metric("weighted_euclidean", weights=[4.0, 0.0])
    assert isinstance(weighted, WeightedEuclideanDistance)
    assert weighted.pairwise(X, Y)[1, 0].item() == pytest.approx(6.0)

    with pytest.raises(ValueError):
        get_metric(EuclideanDistance(), squared=True)


@pytest.mark.parametrize("metric, p", [
    (EuclideanDistance(), 2.0),
    (CityblockDistance(), 1.0),
    (ChebyshevDistance(), float("inf")),
    (MinkowskiDistance(p=3), 3.0),
])
def test_pairwise_matches_explicit_differences(rng, metric, p):
    X = torch.as_tensor(rng.normal(size=(30, 4)))
    Y = torch.as_tensor(rng.normal(size=(7, 4)))

    expected = torch.linalg.vector_norm(X.unsqueeze(1) - Y.unsqueeze(0), ord=p, dim=2)
    D = metric.pairwise(X, Y)

    assert D.shape == (30, 7)
    assert torch.allclose(D, expected)
    assert torch.all(torch.diagonal(metric.pairwise(X, X)) == 0.0)
