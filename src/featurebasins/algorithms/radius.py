"""
Selection of the DBSCAN neighborhood radius.

Two strategies are available:

- silhouettes: scan a grid of candidate radii, cluster with each, and keep the
  radius with the best mean silhouette. Accurate but one DBSCAN pass per candidate.
- elbow: sort the reachability distances of the points (the edges of the
  minimum spanning tree under the mutual reachability distance built from the
  `min_neighbors`-th nearest-point core distances) and take the value just
  before the largest jump of the sorted curve. A single pass.
"""

from typing import Optional, Union
import warnings
import torch
from torch import Tensor

from ..base.data_structures import RadiusMethod
from ..base.interfaces import DistanceMetric
from ..distances import get_metric
from ..utils.metrics import silhouette_samples_from_distances
from .dbscan import DBSCAN, sort_clusters, cluster_assignment


def _feature_range_scale(X: Tensor) -> float:
    """Smallest non-zero per-feature range of an (n, d) point set."""
    ranges = X.max(dim=0)[0] - X.min(dim=0)[0]
    positive = ranges[ranges > 0]
    if positive.numel() == 0:
        return 0.0
    return positive.min().item()


def optimal_radius_silhouette(X: Tensor,
                              min_neighbors: int,
                              metric: Union[str, DistanceMetric] = 'euclidean',
                              num_attempts_radius: int = 50,
                              distances: Optional[Tensor] = None,
                              verbose: int = 0) -> float:
    """Radius maximizing the mean silhouette of the resulting clustering.

    Candidates are `num_attempts_radius` evenly spaced radii from r/num_attempts
    to r, where r is the smallest non-zero feature range. Only clusterings
    with two or more clusters compete, even when every one of them has a
    negative mean silhouette; ties resolve to the smallest radius. Without
    any such clustering the smallest candidate is returned with a warning.

    Args:
        X: (n, d) data tensor
        min_neighbors: DBSCAN density parameter
        metric: Distance metric
        num_attempts_radius: Number of candidate radii
        distances: Optional precomputed (n, n) distance matrix
        verbose: Verbosity level

    Returns:
        Optimal radius
    """
    metric = get_metric(metric)
    if num_attempts_radius < 1:
        raise ValueError(f"num_attempts_radius must be positive, got {num_attempts_radius}")
    if distances is None:
        distances = metric.pairwise(X, X)

    scale = _feature_range_scale(X)
    if scale == 0.0:
        # All points coincide; any positive radius puts them in one cluster
        return 1.0

    n_points = X.shape[0]
    grid = torch.linspace(scale / num_attempts_radius, scale, num_attempts_radius,
                          dtype=torch.float64)
    # Candidates with fewer than two clusters have no silhouette and stay at -inf
    scores = torch.full((num_attempts_radius,), float('-inf'), dtype=torch.float64)

    for i, eps in enumerate(grid.tolist()):
        dbscan = DBSCAN(eps, min_neighbors=min_neighbors, metric=metric).fit(X, distances=distances)
        if len(dbscan.clusters_) < 2:
            continue
        labels = cluster_assignment(sort_clusters(dbscan.clusters_), n_points, device=X.device)
        scores[i] = silhouette_samples_from_distances(distances, labels).mean().item()

    if not torch.isfinite(scores).any():
        warnings.warn("No candidate radius produced two or more clusters; "
                      "using the smallest candidate")
        best = 0
    else:
        best = int(torch.argmax(scores).item())

    if verbose >= 2:
        print(f"Silhouette radius scan: best eps = {grid[best].item():.6g} "
              f"(mean silhouette {scores[best].item():.4f})")

    return grid[best].item()


def optimal_radius_elbow(X: Tensor,
                         min_neighbors: int,
                         metric: Union[str, DistanceMetric] = 'euclidean',
                         distances: Optional[Tensor] = None,
                         verbose: int = 0) -> float:
    """Radius at the knee of the sorted reachability-distance curve.

    The core distance of a point is the distance to its `min_neighbors`-th
    nearest point, itself counted. The mutual reachability distance of two
    points is the largest of their distance and their two core distances.
    Growing a minimum spanning tree under that distance reaches every point
    but the first through one edge; those edges, sorted, form the curve.
    The returned radius is the value just before its largest jump, so every
    point reached below the knee is a core point connected to its
    neighbors, and points beyond the knee stay out of the clusters.

    Args:
        X: (n, d) data tensor
        min_neighbors: DBSCAN density parameter
        metric: Distance metric
        distances: Optional precomputed (n, n) distance matrix
        verbose: Verbosity level

    Returns:
        Optimal radius
    """
    metric = get_metric(metric)
    if distances is None:
        distances = metric.pairwise(X, X)

    n_points = X.shape[0]
    if n_points < 2:
        return 0.0

    reachability = _reachability_distances(distances, min_neighbors)
    sorted_distances = torch.sort(reachability).values

    if sorted_distances.shape[0] < 2:
        return sorted_distances[0].item()

    jumps = sorted_distances[1:] - sorted_distances[:-1]
    knee = int(torch.argmax(jumps).item())
    eps = sorted_distances[knee].item()

    if verbose >= 2:
        print(f"Elbow radius: eps = {eps:.6g} at rank {knee + 1}/{n_points - 1}")

    return eps


def _reachability_distances(distances: Tensor, min_neighbors: int) -> Tensor:
    """Edge weights of the mutual-reachability minimum spanning tree.

    Args:
        distances: (n, n) distance matrix, n >= 2
        min_neighbors: Neighborhood size of the core distance, itself counted

    Returns:
        (n - 1,) tensor, the weight of the edge reaching each point but the first
    """
    n_points = distances.shape[0]
    k = min(max(min_neighbors, 1), n_points)

    # Column 0 of the sorted distances is the point itself
    core_distances = torch.topk(distances, k, dim=1, largest=False).values[:, k - 1]
    mutual = torch.maximum(distances, torch.maximum(core_distances.unsqueeze(0),
                                                    core_distances.unsqueeze(1)))

    # Prim's algorithm on the dense matrix
    reached = torch.zeros(n_points, dtype=torch.bool, device=distances.device)
    reached[0] = True
    best = mutual[0].clone()
    edges = torch.empty(n_points - 1, dtype=distances.dtype, device=distances.device)

    for i in range(n_points - 1):
        candidates = best.masked_fill(reached, float('inf'))
        j = int(torch.argmin(candidates).item())
        edges[i] = candidates[j]
        reached[j] = True
        best = torch.minimum(best, mutual[j])

    return edges


def optimal_radius(X: Tensor,
                   min_neighbors: int,
                   metric: Union[str, DistanceMetric] = 'euclidean',
                   method: Union[str, RadiusMethod] = RadiusMethod.SILHOUETTES,
                   num_attempts_radius: int = 50,
                   distances: Optional[Tensor] = None,
                   verbose: int = 0) -> float:
    """Dispatch to the configured radius-selection strategy."""
    method = RadiusMethod.coerce(method)
    if method is RadiusMethod.SILHOUETTES:
        return optimal_radius_silhouette(X, min_neighbors, metric,
                                         num_attempts_radius=num_attempts_radius,
                                         distances=distances, verbose=verbose)
    if method is RadiusMethod.ELBOW:
        return optimal_radius_elbow(X, min_neighbors, metric,
                                    distances=distances, verbose=verbose)
    raise ValueError(f"Unknown optimal_radius_method: {method}")
