"""Distance metrics for feature-space clustering and template matching."""

from functools import partial
from typing import Union

from ..base.interfaces import DistanceMetric
from .euclidean import EuclideanDistance, WeightedEuclideanDistance
from .minkowski import (
    MinkowskiDistance,
    CityblockDistance,
    ChebyshevDistance,
    CosineDistance
)

_METRICS = {
    'euclidean': EuclideanDistance,
    'sqeuclidean': partial(EuclideanDistance, squared=True),
    'weighted_euclidean': WeightedEuclideanDistance,
    'minkowski': MinkowskiDistance,
    'cityblock': CityblockDistance,
    'manhattan': CityblockDistance,
    'chebyshev': ChebyshevDistance,
    'cosine': CosineDistance,
}


def get_metric(metric: Union[str, DistanceMetric, None] = None, **params) -> DistanceMetric:
    """Resolve a metric name or instance.

    Args:
        metric: DistanceMetric instance, registered name, or None for Euclidean
        **params: Constructor arguments for a named metric, e.g. p for
            'minkowski' (default 2) or weights for 'weighted_euclidean'

    Returns:
        DistanceMetric instance
    """
    if metric is None:
        return EuclideanDistance(**params)
    if isinstance(metric, DistanceMetric):
        if params:
            raise ValueError("Metric parameters only apply to metric names")
        return metric
    if isinstance(metric, str):
        key = metric.lower()
        if key not in _METRICS:
            raise ValueError(f"Unknown metric: {metric}; expected one of {sorted(_METRICS)}")
        return _METRICS[key](**params)
    raise TypeError(f"metric must be str or DistanceMetric, got {type(metric)}")


__all__ = [
    'DistanceMetric',
    'EuclideanDistance',
    'WeightedEuclideanDistance',
    'MinkowskiDistance',
    'CityblockDistance',
    'ChebyshevDistance',
    'CosineDistance',
    'get_metric'
]
