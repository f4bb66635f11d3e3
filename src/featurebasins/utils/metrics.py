"""
Clustering evaluation metrics.

Provides pairwise distances under any feature-space metric and the silhouette
coefficient used to pick the density-clustering radius.
"""

from typing import Optional, Union
import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric
from ..distances import get_metric


def pairwise_distances(X: Tensor, Y: Optional[Tensor] = None,
                      metric: Union[str, DistanceMetric] = 'euclidean') -> Tensor:
    """Compute pairwise distances between points.

    Args:
        X: (n, d) first set of points
        Y: (m, d) second set of points (if None, uses X)
        metric: DistanceMetric instance or registered name

    Returns:
        (n, m) distance matrix
    """
    if Y is None:
        Y = X
    return get_metric(metric).pairwise(X, Y)


def silhouette_samples_from_distances(distances: Tensor, labels: Tensor) -> Tensor:
    """Compute the silhouette coefficient of every sample.

    The coefficient is (b - a) / max(a, b), where a is the mean distance to the
    other members of the sample's group and b the smallest mean distance to any
    other group. Every distinct label is a group, including the outlier label,
    so unclustered points count as one more group. Singleton groups score 0.

    Args:
        distances: (n, n) precomputed distance matrix
        labels: (n,) integer labels

    Returns:
        (n,) tensor of coefficients in [-1, 1]
    """
    n_samples = labels.shape[0]
    unique_labels, inverse = torch.unique(labels, return_inverse=True)
    n_groups = unique_labels.shape[0]

    if n_groups < 2:
        return torch.zeros(n_samples, dtype=distances.dtype, device=distances.device)

    # (n, K) membership and per-group distance sums
    membership = torch.zeros(n_samples, n_groups, dtype=distances.dtype,
                             device=distances.device)
    membership[torch.arange(n_samples, device=distances.device), inverse] = 1.0
    counts = membership.sum(dim=0)
    sums = distances @ membership

    own_counts = counts[inverse]
    own_sums = sums[torch.arange(n_samples, device=distances.device), inverse]
    a = own_sums / (own_counts - 1).clamp(min=1)

    # Mean distance to other groups; own group masked out
    mean_other = sums / counts.unsqueeze(0)
    mean_other[torch.arange(n_samples, device=distances.device), inverse] = float('inf')
    b = mean_other.min(dim=1).values

    denom = torch.maximum(a, b)
    silhouette = torch.where(denom > 0, (b - a) / denom, torch.zeros_like(a))
    silhouette[own_counts <= 1] = 0.0

    return silhouette


def silhouette_samples(X: Tensor, labels: Tensor,
                       metric: Union[str, DistanceMetric] = 'euclidean') -> Tensor:
    """Silhouette coefficient of every sample of an (n, d) point set."""
    return silhouette_samples_from_distances(pairwise_distances(X, metric=metric), labels)


def silhouette_score(X: Tensor, labels: Tensor,
                     metric: Union[str, DistanceMetric] = 'euclidean',
                     sample_size: Optional[int] = None,
                     generator: Optional[torch.Generator] = None) -> float:
    """Compute mean Silhouette Coefficient.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        metric: Distance metric
        sample_size: If provided, subsample for efficiency
        generator: Random generator used for subsampling

    Returns:
        Mean silhouette coefficient in [-1, 1]
    """
    n_samples = len(X)

    # Subsample if requested
    if sample_size is not None and sample_size < n_samples:
        indices = torch.randperm(n_samples, generator=generator)[:sample_size]
        X = X[indices]
        labels = labels[indices]

    return silhouette_samples(X, labels, metric=metric).mean().item()
