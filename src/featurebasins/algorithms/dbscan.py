"""
DBSCAN density clustering.

Groups points whose neighborhoods of radius eps are dense. A core point has at
least `min_neighbors` points (itself included) within eps. Clusters are the
connected components of core points together with the non-core points they
reach (border points). Everything else is noise.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union
import torch
from torch import Tensor

from ..base.data_structures import UNCLASSIFIED
from ..base.interfaces import DistanceMetric
from ..distances import get_metric
from ..utils.validation import check_min_neighbors


@dataclass
class DensityCluster:
    """One DBSCAN cluster: its core points and the border points it claimed."""

    core_indices: List[int]
    boundary_indices: List[int] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.core_indices) + len(self.boundary_indices)

    @property
    def indices(self) -> List[int]:
        return sorted(self.core_indices + self.boundary_indices)


class DBSCAN:
    """Density-based spatial clustering with noise.

    Parameters
    ----------
    eps : float
        Neighborhood radius (inclusive)
    min_neighbors : int, default=10
        Minimum number of points within eps, the point itself included, for a core point
    metric : str or DistanceMetric, default='euclidean'
        Distance used for neighborhoods
    verbose : int, default=0
        Verbosity level

    Attributes
    ----------
    clusters_ : list of DensityCluster
        Clusters in discovery order (by lowest-index core point)
    labels_ : Tensor of shape (n_samples,)
        0-based cluster index of every point (border points included), -1 for noise
    core_sample_mask_ : Tensor of shape (n_samples,)
        Boolean mask of core points
    """

    def __init__(self,
                 eps: float,
                 min_neighbors: int = 10,
                 metric: Union[str, DistanceMetric] = 'euclidean',
                 verbose: int = 0):
        if eps < 0:
            raise ValueError(f"eps must be non-negative, got {eps}")
        self.eps = float(eps)
        self.min_neighbors = check_min_neighbors(min_neighbors)
        self.metric = get_metric(metric)
        self.verbose = verbose

        self.clusters_: Optional[List[DensityCluster]] = None
        self.labels_: Optional[Tensor] = None
        self.core_sample_mask_: Optional[Tensor] = None
        self.fitted_ = False

    def fit(self, X: Tensor, distances: Optional[Tensor] = None) -> 'DBSCAN':
        """Cluster an (n, d) point set.

        Args:
            X: (n, d) data tensor
            distances: Optional precomputed (n, n) distance matrix under self.metric

        Returns:
            Self
        """
        n_points = X.shape[0]
        if distances is None:
            distances = self.metric.pairwise(X, X)
        elif distances.shape != (n_points, n_points):
            raise ValueError(f"Expected ({n_points}, {n_points}) distances, "
                             f"got {tuple(distances.shape)}")

        neighborhoods = distances <= self.eps
        core_mask = neighborhoods.sum(dim=1) >= self.min_neighbors

        # Python-side adjacency for the expansion loop
        adjacency = [torch.nonzero(row).flatten().tolist() for row in neighborhoods]
        is_core = core_mask.tolist()

        labels = [UNCLASSIFIED] * n_points
        clusters = []

        for seed in range(n_points):
            if not is_core[seed] or labels[seed] != UNCLASSIFIED:
                continue

            cluster_id = len(clusters)
            cluster = DensityCluster(core_indices=[])
            labels[seed] = cluster_id
            stack = [seed]

            while stack:
                point = stack.pop()
                if not is_core[point]:
                    cluster.boundary_indices.append(point)
                    continue
                cluster.core_indices.append(point)
                for neighbor in adjacency[point]:
                    if labels[neighbor] == UNCLASSIFIED:
                        labels[neighbor] = cluster_id
                        stack.append(neighbor)

            cluster.core_indices.sort()
            cluster.boundary_indices.sort()
            clusters.append(cluster)

        self.clusters_ = clusters
        self.labels_ = torch.tensor(labels, dtype=torch.long, device=X.device)
        self.core_sample_mask_ = core_mask
        self.fitted_ = True

        if self.verbose >= 2:
            n_noise = int((self.labels_ == UNCLASSIFIED).sum().item())
            print(f"DBSCAN(eps={self.eps:.6g}): {len(clusters)} clusters, "
                  f"{int(core_mask.sum().item())} core points, {n_noise} noise points")

        return self

    def fit_predict(self, X: Tensor, distances: Optional[Tensor] = None) -> Tensor:
        """Fit and return labels."""
        return self.fit(X, distances=distances).labels_

    @property
    def core_sample_indices_(self) -> Tensor:
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return torch.nonzero(self.core_sample_mask_).flatten()

    @property
    def n_clusters_(self) -> int:
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return len(self.clusters_)


def sort_clusters(clusters: List[DensityCluster]) -> List[DensityCluster]:
    """Order clusters by descending size; equal sizes keep discovery order."""
    return sorted(clusters, key=lambda cluster: -cluster.size)


def cluster_assignment(clusters: List[DensityCluster], n_points: int,
                       include_boundary: bool = False,
                       device: Optional[torch.device] = None) -> Tensor:
    """Label points by the rank of their cluster.

    The i-th cluster of `clusters` gets label i + 1. Points outside every
    cluster, and border points unless `include_boundary`, get -1.

    Args:
        clusters: Clusters in the desired rank order
        n_points: Total number of points
        include_boundary: Whether border points receive their cluster label

    Returns:
        (n_points,) long tensor
    """
    labels = torch.full((n_points,), UNCLASSIFIED, dtype=torch.long, device=device)
    for rank, cluster in enumerate(clusters, start=1):
        members = cluster.indices if include_boundary else cluster.core_indices
        if members:
            labels[torch.tensor(members, dtype=torch.long, device=device)] = rank
    return labels
