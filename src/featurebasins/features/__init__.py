"""Feature extraction from trajectories."""

from .extraction import FeatureExtractor, Featurizer

__all__ = [
    'FeatureExtractor',
    'Featurizer'
]
