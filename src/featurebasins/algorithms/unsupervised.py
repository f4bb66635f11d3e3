"""
Unsupervised classification of feature vectors by density clustering.

Each DBSCAN cluster of the feature space is taken to be one attractor.
"""

from typing import Optional, Union
import time
import torch
from torch import Tensor

from ..base.data_structures import (
    UNCLASSIFIED, ClassificationResult, RadiusMethod
)
from ..base.interfaces import DistanceMetric, FeatureClassifier
from ..distances import get_metric
from ..utils.device import parse_device, estimate_memory_usage
from ..utils.validation import validate_data, rescale_features, check_min_neighbors
from .dbscan import DBSCAN, sort_clusters, cluster_assignment
from .radius import optimal_radius


class DensityClassifier(FeatureClassifier):
    """Label feature vectors by DBSCAN clusters with an automatic radius.

    Clusters are ranked by size, so label 1 is always the largest cluster.
    Only core points carry a cluster label; border and noise points are -1.
    Errors are distances to the cluster centroid for clusters larger than
    `min_neighbors`. Every other point, outliers included, has error 0.

    Parameters
    ----------
    min_neighbors : int, default=10
        DBSCAN density parameter
    metric : str or DistanceMetric, default='euclidean'
        Feature-space distance
    rescale_features : bool, default=True
        Min-max rescale each feature dimension into [0, 1] first
    optimal_radius_method : str or RadiusMethod, default='silhouettes'
        'silhouettes' or 'elbow'
    num_attempts_radius : int, default=50
        Number of candidate radii for the silhouette scan
    include_boundary : bool, default=False
        Give border points their cluster label instead of -1
    device : str or torch.device, optional
        Computation device (CPU by default)
    verbose : int, default=0
        Verbosity level (0=silent, 1=summary, 2=detailed)
    """

    def __init__(self,
                 min_neighbors: int = 10,
                 metric: Union[str, DistanceMetric] = 'euclidean',
                 rescale_features: bool = True,
                 optimal_radius_method: Union[str, RadiusMethod] = RadiusMethod.SILHOUETTES,
                 num_attempts_radius: int = 50,
                 include_boundary: bool = False,
                 device: Optional[Union[str, torch.device]] = None,
                 verbose: int = 0):
        self.min_neighbors = check_min_neighbors(min_neighbors)
        self.metric = get_metric(metric)
        self.rescale_features = rescale_features
        self.optimal_radius_method = RadiusMethod.coerce(optimal_radius_method)
        self.num_attempts_radius = num_attempts_radius
        self.include_boundary = include_boundary
        self.device = parse_device(device)
        self.verbose = verbose

    @property
    def is_supervised(self) -> bool:
        return False

    def classify(self, features: Tensor, **kwargs) -> ClassificationResult:
        """Cluster a feature matrix.

        Args:
            features: (feature_dim, n_samples) feature matrix

        Returns:
            ClassificationResult with 1-based cluster ranks, -1 for outliers
        """
        features = validate_data(features, device=self.device)
        n_features, n_samples = features.shape

        # DBSCAN needs more samples than feature dimensions
        if n_features >= n_samples:
            if self.verbose:
                print(f"Feature dimension {n_features} >= {n_samples} samples; "
                      f"labelling every sample as its own group")
            return ClassificationResult(
                labels=torch.arange(1, n_samples + 1, dtype=torch.long, device=self.device),
                errors=torch.zeros(n_samples, dtype=features.dtype, device=self.device),
                metadata={'degenerate': True}
            )

        if self.rescale_features:
            features = rescale_features(features)

        if self.verbose >= 2:
            memory = estimate_memory_usage(n_samples, n_features, dtype=features.dtype)
            print(f"Estimated memory for density clustering: {memory['total'] / 2**20:.1f} MiB")

        start_time = time.time()
        X = features.t().contiguous()
        distances = self.metric.pairwise(X, X)

        eps = optimal_radius(X, self.min_neighbors, self.metric,
                             method=self.optimal_radius_method,
                             num_attempts_radius=self.num_attempts_radius,
                             distances=distances, verbose=self.verbose)

        dbscan = DBSCAN(eps, min_neighbors=self.min_neighbors, metric=self.metric,
                        verbose=self.verbose).fit(X, distances=distances)
        clusters = sort_clusters(dbscan.clusters_)
        labels = cluster_assignment(clusters, n_samples,
                                    include_boundary=self.include_boundary,
                                    device=self.device)

        # Clusters at or below min_neighbors keep their labels but get no errors
        sizes = [cluster.size for cluster in clusters]
        n_retained = sum(1 for size in sizes if size > self.min_neighbors)

        errors = torch.zeros(n_samples, dtype=features.dtype, device=self.device)
        centers = []
        for rank in range(1, n_retained + 1):
            members = labels == rank
            if not members.any():
                continue
            center = X[members].mean(dim=0)
            errors[members] = self.metric.colwise(X[members], center)
            centers.append(center)

        if self.verbose:
            n_outliers = int((labels == UNCLASSIFIED).sum().item())
            print(f"Density clustering: eps = {eps:.6g}, {len(clusters)} clusters "
                  f"({n_retained} above min_neighbors), {n_outliers} unclassified "
                  f"({time.time() - start_time:.3f}s)")

        return ClassificationResult(
            labels=labels,
            errors=errors,
            metadata={
                'degenerate': False,
                'radius': eps,
                'cluster_sizes': sizes,
                'n_retained': n_retained,
                'centers': torch.stack(centers) if centers else None
            }
        )

    def __repr__(self) -> str:
        return (f"DensityClassifier(min_neighbors={self.min_neighbors}, metric={self.metric!r}, "
                f"rescale_features={self.rescale_features}, "
                f"optimal_radius_method={self.optimal_radius_method.value!r})")
