"""
Feature extraction from trajectories.

A featurizer maps one trajectory, given as (states, times), to a fixed-length
feature vector. Feature vectors are assembled column-wise into a
(feature_dim, n_samples) feature matrix.
"""

from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union
import numpy as np
import torch
from torch import Tensor

from ..base.data_structures import Trajectory
from ..sampling.trajectories import TrajectorySampler
from ..utils.validation import validate_feature_vectors

Featurizer = Callable[[np.ndarray, np.ndarray], Any]

_EMPTY_TIMES = np.zeros(0)


def _as_trajectory(attractor: Any) -> Trajectory:
    if isinstance(attractor, Trajectory):
        return Trajectory(attractor.states, _EMPTY_TIMES)
    if isinstance(attractor, Tensor):
        attractor = attractor.detach().cpu().numpy()
    return Trajectory(np.asarray(attractor, dtype=float), _EMPTY_TIMES)


class FeatureExtractor:
    """Turns trajectories into a feature matrix.

    Parameters
    ----------
    featurizer : callable
        featurizer(states, times) -> 1-D feature vector
    sampler : TrajectorySampler, optional
        Needed to featurize initial conditions; attractor featurization works without it
    dtype : torch.dtype, default=torch.float64
        Data type of the assembled matrix
    device : torch.device, optional
        Device of the assembled matrix
    """

    def __init__(self,
                 featurizer: Featurizer,
                 sampler: Optional[TrajectorySampler] = None,
                 dtype: torch.dtype = torch.float64,
                 device: Optional[torch.device] = None):
        if not callable(featurizer):
            raise TypeError(f"featurizer must be callable, got {type(featurizer)}")
        self.featurizer = featurizer
        self.sampler = sampler
        self.dtype = dtype
        self.device = device

    def featurize(self, trajectory: Trajectory) -> np.ndarray:
        """Feature vector of a single trajectory."""
        return np.atleast_1d(np.asarray(self.featurizer(trajectory.states, trajectory.times),
                                        dtype=float))

    def assemble(self, vectors: Sequence) -> Tensor:
        """Stack feature vectors into a (feature_dim, n_samples) matrix."""
        features = validate_feature_vectors(vectors, dtype=self.dtype)
        if self.device is not None:
            features = features.to(self.device)
        return features

    def extract_features(self, initial_conditions, N: Optional[int] = 1000,
                         show_progress: Optional[bool] = None) -> Tensor:
        """Integrate initial conditions and featurize the trajectories.

        Featurization runs inside the sampling workers, so trajectories are
        not kept in memory.

        Args:
            initial_conditions: Array-like of states, zero-argument callable,
                or InitialConditionSource
            N: Number of draws when initial conditions are a callable
            show_progress: Override the sampler's progress setting

        Returns:
            (feature_dim, n_samples) feature matrix
        """
        if self.sampler is None:
            raise RuntimeError("A TrajectorySampler is required to featurize initial conditions")

        vectors = self.sampler.map(self.featurize, initial_conditions, N=N,
                                   show_progress=show_progress)
        return self.assemble(vectors)

    def extract_attractor_features(
            self, attractors: Union[Mapping[Any, Any], Sequence[Any]]) -> Tuple[Tensor, list]:
        """Featurize already computed trajectories, e.g. attractors.

        The featurizer receives an empty time array.

        Args:
            attractors: Mapping of label to trajectory, or sequence of trajectories

        Returns:
            (feature_dim, n_attractors) feature matrix and the attractor keys
            (mapping keys in iteration order, or 1-based positions for a sequence)
        """
        if isinstance(attractors, Mapping):
            keys = list(attractors.keys())
            items = [attractors[key] for key in keys]
        else:
            items = list(attractors)
            keys = list(range(1, len(items) + 1))

        if len(items) == 0:
            raise ValueError("No attractors to featurize")

        vectors = [self.featurize(_as_trajectory(item)) for item in items]
        return self.assemble(vectors), keys

    def __repr__(self) -> str:
        name = getattr(self.featurizer, '__name__', type(self.featurizer).__name__)
        return f"FeatureExtractor(featurizer={name}, dtype={self.dtype})"
