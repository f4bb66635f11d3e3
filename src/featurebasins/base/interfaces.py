"""
Core interfaces for the featurize-then-classify attractor mapping.

This module defines the abstract base classes that all components must implement,
ensuring a consistent API across metrics, initial-condition sources and classifiers.
"""

from abc import ABC, abstractmethod
from typing import Any, Union
import numpy as np
import torch
from torch import Tensor


class DistanceMetric(ABC):
    """Abstract base class for distance computations in feature space.

    Every metric works on row-major point sets: (n, d) against (m, d).
    """

    name: str = 'metric'

    @abstractmethod
    def pairwise(self, X: Tensor, Y: Tensor) -> Tensor:
        """Compute all distances between two point sets.

        Args:
            X: (n, d) tensor of points
            Y: (m, d) tensor of points

        Returns:
            (n, m) tensor of distances
        """
        pass

    def colwise(self, points: Tensor, center: Tensor) -> Tensor:
        """Compute distances from every point to a single center.

        Args:
            points: (n, d) tensor of points
            center: (d,) tensor

        Returns:
            (n,) tensor of distances
        """
        return self.pairwise(points, center.unsqueeze(0)).squeeze(1)

    def __call__(self, X: Tensor, Y: Tensor) -> Tensor:
        return self.pairwise(X, Y)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class InitialConditionSource(ABC):
    """Abstract base class for the two ways of supplying initial conditions.

    A source knows how many samples it provides and how to produce the i-th one.
    """

    @abstractmethod
    def sample(self, index: int) -> np.ndarray:
        """Return the initial condition for sample `index`."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    @property
    def is_indexable(self) -> bool:
        """Whether sample(i) always returns the same state for the same i."""
        return True


class FeatureClassifier(ABC):
    """Abstract base class for strategies that label a feature matrix."""

    @abstractmethod
    def classify(self, features: Tensor, **kwargs: Any) -> Any:
        """Label every column of a feature matrix.

        Args:
            features: (feature_dim, n_samples) tensor
            **kwargs: Strategy-specific inputs

        Returns:
            ClassificationResult with one label and one error per sample
        """
        pass

    @property
    @abstractmethod
    def is_supervised(self) -> bool:
        """Whether this strategy needs attractor templates."""
        pass


ArrayLike = Union[Tensor, np.ndarray, list]
