"""Visualization utilities for classified features."""

from .plot_features import (
    plot_feature_clusters,
    plot_basins_fractions
)

__all__ = [
    'plot_feature_clusters',
    'plot_basins_fractions'
]
