"""Utility functions for featurizing attractor classification."""

from .metrics import (
    pairwise_distances,
    silhouette_samples,
    silhouette_samples_from_distances,
    silhouette_score
)

from .validation import (
    validate_data,
    validate_feature_vectors,
    rescale_to_unit_interval,
    rescale_features,
    check_min_neighbors
)

from .device import (
    get_default_device,
    parse_device,
    estimate_memory_usage
)

__all__ = [
    # Metrics
    'pairwise_distances',
    'silhouette_samples',
    'silhouette_samples_from_distances',
    'silhouette_score',

    # Validation
    'validate_data',
    'validate_feature_vectors',
    'rescale_to_unit_interval',
    'rescale_features',
    'check_min_neighbors',

    # Device management
    'get_default_device',
    'parse_device',
    'estimate_memory_usage'
]
