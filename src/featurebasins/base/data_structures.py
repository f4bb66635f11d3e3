"""
Core data structures for featurizing attractor classification.

This module provides the configuration record shared by both classification
strategies, the trajectory container handed to featurizers, and the result
container returned by every classifier.
"""

from typing import Optional, Callable, Dict, Any, Union, Mapping, Sequence, Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
import numpy as np
import torch
from torch import Tensor

from .interfaces import DistanceMetric


# Label reserved for samples that no cluster or template claims
UNCLASSIFIED = -1


class ClusteringMethod(str, Enum):
    """Supervised matching modes."""

    KNN = 'kNN'
    KNN_THRESHOLDED = 'kNN_thresholded'

    @classmethod
    def coerce(cls, value: Union[str, 'ClusteringMethod']) -> 'ClusteringMethod':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ', '.join(repr(m.value) for m in cls)
            raise ValueError(f"Unknown clust_method {value!r}; expected one of {valid}") from None


class RadiusMethod(str, Enum):
    """Strategies for choosing the DBSCAN neighborhood radius."""

    SILHOUETTES = 'silhouettes'
    ELBOW = 'elbow'

    @classmethod
    def _missing_(cls, value):
        if value == 'silhouette':
            return cls.SILHOUETTES
        return None

    @classmethod
    def coerce(cls, value: Union[str, 'RadiusMethod']) -> 'RadiusMethod':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ', '.join(repr(m.value) for m in cls)
            raise ValueError(f"Unknown optimal_radius_method {value!r}; "
                             f"expected one of {valid}") from None


@dataclass(frozen=True)
class Trajectory:
    """A sampled trajectory as handed to featurizers.

    `states` holds one state vector per row; `times` is aligned with the rows,
    or empty for trajectories that were not produced on a time grid.
    """

    states: np.ndarray   # (n_steps, state_dim)
    times: np.ndarray    # (n_steps,) or (0,)

    def __post_init__(self):
        states = np.asarray(self.states, dtype=float)
        if states.ndim == 1:
            states = states[:, None]
        object.__setattr__(self, 'states', states)
        object.__setattr__(self, 'times', np.asarray(self.times, dtype=float).reshape(-1))

    def __len__(self) -> int:
        return self.states.shape[0]

    @property
    def dimension(self) -> int:
        return self.states.shape[1]


@dataclass
class ClassificationResult:
    """Per-sample labels and classification errors.

    Unpacks like a pair so `labels, errors = result` works.
    """

    labels: Tensor  # (n,) long, UNCLASSIFIED for outliers
    errors: Tensor  # (n,) non-negative distances
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        assert self.labels.shape == self.errors.shape

    def __iter__(self) -> Iterator[Tensor]:
        yield self.labels
        yield self.errors

    def __len__(self) -> int:
        return self.labels.shape[0]

    @property
    def n_unclassified(self) -> int:
        return int((self.labels == UNCLASSIFIED).sum().item())

    @property
    def unique_labels(self) -> list:
        return [int(v) for v in torch.unique(self.labels).tolist()]


Templates = Union[Mapping[Any, Any], Sequence[Any]]


@dataclass(frozen=True)
class ClusteringConfig:
    """Immutable settings for classifying feature vectors.

    A non-empty `attractors_template` switches to the supervised strategy
    regardless of the other settings. Use `with_templates` to derive a copy
    carrying templates instead of mutating a shared instance.

    Attributes
    ----------
    featurizer : callable
        Maps (states, times) to a 1-D feature vector.
    attractors_template : mapping or sequence, optional
        One representative trajectory per known attractor.
    metric : DistanceMetric or str
        Distance in feature space.
    clust_method : ClusteringMethod or str, optional
        Defaults to kNN_thresholded when clustering_threshold > 0, else kNN.
    clustering_threshold : float
        Rejection distance for kNN_thresholded.
    min_neighbors : int
        DBSCAN density parameter.
    rescale_features : bool
        Min-max rescale every feature dimension before density clustering.
    optimal_radius_method : RadiusMethod or str
        'silhouettes' or 'elbow'.
    """

    featurizer: Callable[[np.ndarray, np.ndarray], Any]
    attractors_template: Optional[Templates] = None
    metric: Union[str, DistanceMetric] = 'euclidean'
    clust_method: Optional[Union[str, ClusteringMethod]] = None
    clustering_threshold: float = 0.0
    min_neighbors: int = 10
    rescale_features: bool = True
    optimal_radius_method: Union[str, RadiusMethod] = RadiusMethod.SILHOUETTES

    def __post_init__(self):
        from ..distances import get_metric

        if not callable(self.featurizer):
            raise TypeError(f"featurizer must be callable, got {type(self.featurizer)}")
        if self.clustering_threshold < 0:
            raise ValueError(f"clustering_threshold must be non-negative, "
                             f"got {self.clustering_threshold}")
        if int(self.min_neighbors) < 1:
            raise ValueError(f"min_neighbors must be at least 1, got {self.min_neighbors}")

        method = self.clust_method
        if method is None:
            method = (ClusteringMethod.KNN_THRESHOLDED if self.clustering_threshold > 0
                      else ClusteringMethod.KNN)

        object.__setattr__(self, 'metric', get_metric(self.metric))
        object.__setattr__(self, 'clust_method', ClusteringMethod.coerce(method))
        object.__setattr__(self, 'clustering_threshold', float(self.clustering_threshold))
        object.__setattr__(self, 'min_neighbors', int(self.min_neighbors))
        object.__setattr__(self, 'rescale_features', bool(self.rescale_features))
        object.__setattr__(self, 'optimal_radius_method',
                           RadiusMethod.coerce(self.optimal_radius_method))

    @property
    def is_supervised(self) -> bool:
        """True when templates are present and non-empty."""
        return self.attractors_template is not None and len(self.attractors_template) > 0

    def with_templates(self, templates: Optional[Templates]) -> 'ClusteringConfig':
        """Return a copy of this config carrying the given templates."""
        return replace(self, attractors_template=templates)
