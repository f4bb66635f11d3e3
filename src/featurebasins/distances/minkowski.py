"""
Minkowski-family and angular distances for feature space.
"""

import math

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class MinkowskiDistance(DistanceMetric):
    """Minkowski distance (sum_i |x_i - y_i|^p)^(1/p).

    p=1 is the cityblock distance, p=2 Euclidean, p=inf Chebyshev.
    """

    name = 'minkowski'

    def __init__(self, p: float = 2.0):
        if p < 1:
            raise ValueError(f"Minkowski order p must be >= 1, got {p}")
        self.p = float(p)

    def pairwise(self, X: Tensor, Y: Tensor) -> Tensor:
        if self.p == 2.0:
            return torch.cdist(X, Y, p=2.0, compute_mode='donot_use_mm_for_euclid_dist')
        return torch.cdist(X, Y, p=self.p)

    def colwise(self, points: Tensor, center: Tensor) -> Tensor:
        abs_diff = (points - center.unsqueeze(0)).abs()
        if math.isinf(self.p):
            return abs_diff.amax(dim=1)
        if self.p == 1.0:
            return abs_diff.sum(dim=1)
        return abs_diff.pow(self.p).sum(dim=1).pow(1.0 / self.p)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(p={self.p})"


class CityblockDistance(MinkowskiDistance):
    """Manhattan / L1 distance."""

    name = 'cityblock'

    def __init__(self):
        super().__init__(p=1.0)

    def __repr__(self) -> str:
        return "CityblockDistance()"


class ChebyshevDistance(MinkowskiDistance):
    """Maximum-coordinate / L-infinity distance."""

    name = 'chebyshev'

    def __init__(self):
        super().__init__(p=float('inf'))

    def __repr__(self) -> str:
        return "ChebyshevDistance()"


class CosineDistance(DistanceMetric):
    """One minus cosine similarity.

    Zero-norm vectors are treated as having norm 1e-8 to keep the result finite.
    """

    name = 'cosine'

    def pairwise(self, X: Tensor, Y: Tensor) -> Tensor:
        # Normalize rows
        X_norm = X / torch.norm(X, dim=1, keepdim=True).clamp(min=1e-8)
        Y_norm = Y / torch.norm(Y, dim=1, keepdim=True).clamp(min=1e-8)
        similarities = torch.matmul(X_norm, Y_norm.t())
        return (1 - similarities).clamp(min=0.0)
