"""
Euclidean distance metrics for feature space.

The default metric for both density clustering and template matching.
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class EuclideanDistance(DistanceMetric):
    """Euclidean distance metric.

    Computes ||x - y|| from explicit differences so that identical points are
    exactly zero apart.
    """

    name = 'euclidean'

    def __init__(self, squared: bool = False):
        """
        Args:
            squared: If True, return squared distances.
                    If False (default), return actual Euclidean distances.
        """
        self.squared = squared

    def pairwise(self, X: Tensor, Y: Tensor) -> Tensor:
        """Compute Euclidean distances between two point sets.

        Args:
            X: (n, d) tensor of points
            Y: (m, d) tensor of points

        Returns:
            (n, m) tensor of distances
        """
        # Direct differences, not the matrix-product expansion
        distances = torch.cdist(X, Y, p=2.0, compute_mode='donot_use_mm_for_euclid_dist')

        if self.squared:
            return distances * distances
        else:
            return distances

    def colwise(self, points: Tensor, center: Tensor) -> Tensor:
        diff = points - center.unsqueeze(0)
        squared_distances = torch.sum(diff * diff, dim=1)

        if self.squared:
            return squared_distances
        else:
            return torch.sqrt(squared_distances)

    def __repr__(self) -> str:
        return f"EuclideanDistance(squared={self.squared})"


class WeightedEuclideanDistance(DistanceMetric):
    """Weighted Euclidean distance with feature weights.

    Computes sqrt(sum_i w_i * (x_i - y_i)²) where w_i are feature weights.
    Useful when some features should dominate the comparison without rescaling them.
    """

    name = 'weighted_euclidean'

    def __init__(self, weights: Tensor, squared: bool = False):
        """
        Args:
            weights: (d,) tensor of non-negative feature weights
            squared: Whether to return squared distances
        """
        weights = torch.as_tensor(weights, dtype=torch.float64)
        if (weights < 0).any():
            raise ValueError("Feature weights must be non-negative")
        self.weights = weights
        self.squared = squared

    def pairwise(self, X: Tensor, Y: Tensor) -> Tensor:
        """Compute weighted Euclidean distances.

        Args:
            X: (n, d) tensor of points
            Y: (m, d) tensor of points

        Returns:
            (n, m) tensor of distances
        """
        if self.weights.shape[0] != X.shape[1]:
            raise ValueError(f"Expected {self.weights.shape[0]} features, got {X.shape[1]}")

        # Ensure weights are on same device and dtype
        weights = self.weights.to(device=X.device, dtype=X.dtype)
        scale = torch.sqrt(weights)

        distances = torch.cdist(X * scale, Y * scale, p=2.0,
                                compute_mode='donot_use_mm_for_euclid_dist')

        if self.squared:
            return distances * distances
        else:
            return distances
