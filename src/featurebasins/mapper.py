"""
Attractor mapping by featurizing and classifying trajectories.

Initial conditions are integrated in parallel, every trajectory is reduced to
a feature vector, and the feature matrix is classified either by density
clustering (no templates known) or by nearest-template matching (one
representative trajectory per attractor known).
"""

from dataclasses import fields
from typing import Any, Dict, Mapping, Optional, Sequence, Union
import numpy as np
import torch
from torch import Tensor

from .base.data_structures import (
    UNCLASSIFIED, ClassificationResult, ClusteringConfig, Trajectory, Templates
)
from .base.initial_conditions import as_initial_conditions
from .base.interfaces import FeatureClassifier
from .algorithms.unsupervised import DensityClassifier
from .algorithms.supervised import TemplateClassifier
from .features.extraction import FeatureExtractor, Featurizer
from .sampling.trajectories import TrajectorySampler, TrajectoryGenerator
from .utils.device import parse_device


_CONFIG_OPTIONS = tuple(f.name for f in fields(ClusteringConfig) if f.name != 'featurizer')


def build_config(featurizer: Featurizer, **options) -> ClusteringConfig:
    """Create a clustering configuration.

    Args:
        featurizer: featurizer(states, times) -> 1-D feature vector
        **options: attractors_template, metric, clust_method,
            clustering_threshold, min_neighbors, rescale_features,
            optimal_radius_method

    Returns:
        ClusteringConfig

    Raises:
        TypeError: On an unknown option name
        ValueError: On an unknown method or metric name, or an invalid value
    """
    unknown = sorted(set(options) - set(_CONFIG_OPTIONS))
    if unknown:
        raise TypeError(f"Unknown clustering option(s): {', '.join(unknown)}; "
                        f"valid options are {', '.join(_CONFIG_OPTIONS)}")
    return ClusteringConfig(featurizer, **options)


def make_classifier(config: ClusteringConfig,
                    device: Optional[Union[str, torch.device]] = None,
                    verbose: int = 0) -> FeatureClassifier:
    """Classifier matching the configuration's mode."""
    if config.is_supervised:
        return TemplateClassifier(
            config.featurizer,
            metric=config.metric,
            clust_method=config.clust_method,
            clustering_threshold=config.clustering_threshold,
            device=device,
            verbose=verbose
        )
    return DensityClassifier(
        min_neighbors=config.min_neighbors,
        metric=config.metric,
        rescale_features=config.rescale_features,
        optimal_radius_method=config.optimal_radius_method,
        device=device,
        verbose=verbose
    )


def classify_features(features: Tensor, config: ClusteringConfig,
                      device: Optional[Union[str, torch.device]] = None,
                      verbose: int = 0) -> ClassificationResult:
    """Classify a (feature_dim, n_samples) feature matrix.

    Templates in the configuration select nearest-template matching;
    otherwise the features are density clustered.
    """
    classifier = make_classifier(config, device=device, verbose=verbose)
    if classifier.is_supervised:
        return classifier.classify(features, templates=config.attractors_template)
    return classifier.classify(features)


def _is_trajectory_collection(dataset: Any) -> bool:
    """Whether `dataset` holds trajectories rather than initial conditions."""
    if isinstance(dataset, Mapping):
        return True
    if isinstance(dataset, (list, tuple)) and len(dataset) > 0:
        return all(isinstance(item, Trajectory)
                   or (isinstance(item, (np.ndarray, Tensor)) and item.ndim == 2)
                   for item in dataset)
    return False


class FeaturizingMapper:
    """Maps initial conditions to attractors by featurizing their trajectories.

    Parameters
    ----------
    generator : callable
        generator(u0, total, transient, dt) -> states or (states, times)
    config : ClusteringConfig
        Classification settings, see build_config
    total : float, default=100
        Recorded integration length
    transient : float, default=100
        Discarded transient length
    dt : float, default=1
        Sampling step
    attractors_ic : array-like or mapping, optional
        One initial condition per known attractor. When given and `config`
        has no templates, their trajectories become the templates of every
        classification call.
    max_workers : int, optional
        Sampling thread pool size (default: number of CPUs)
    device : str or torch.device, optional
        Device for classification (CPU by default)
    verbose : int, default=0
        Verbosity level
    """

    def __init__(self,
                 generator: TrajectoryGenerator,
                 config: ClusteringConfig,
                 total: float = 100.0,
                 transient: float = 100.0,
                 dt: float = 1.0,
                 attractors_ic: Optional[Union[np.ndarray, Mapping[Any, Any]]] = None,
                 max_workers: Optional[int] = None,
                 device: Optional[Union[str, torch.device]] = None,
                 verbose: int = 0):
        if not isinstance(config, ClusteringConfig):
            raise TypeError(f"config must be a ClusteringConfig, got {type(config)}")
        self.config = config
        self.attractors_ic = attractors_ic
        self.device = parse_device(device)
        self.verbose = verbose

        self.sampler = TrajectorySampler(generator, total=total, transient=transient, dt=dt,
                                         max_workers=max_workers, verbose=verbose)
        self.extractor = FeatureExtractor(config.featurizer, sampler=self.sampler,
                                          device=self.device)

    @property
    def total(self) -> float:
        return self.sampler.total

    @property
    def transient(self) -> float:
        return self.sampler.transient

    @property
    def dt(self) -> float:
        return self.sampler.dt

    def attractor_templates(self) -> Optional[Templates]:
        """Trajectories of `attractors_ic`, keyed like `attractors_ic` itself."""
        if self.attractors_ic is None:
            return None
        if isinstance(self.attractors_ic, Mapping):
            keys = list(self.attractors_ic.keys())
            trajectories = self.sampler.sample([self.attractors_ic[key] for key in keys],
                                               show_progress=False)
            return dict(zip(keys, trajectories))
        return self.sampler.sample(self.attractors_ic, show_progress=False)

    def resolve_config(self) -> ClusteringConfig:
        """Configuration for one classification call.

        Templates derived from `attractors_ic` go into a new configuration;
        `self.config` is left untouched.
        """
        if self.config.is_supervised or self.attractors_ic is None:
            return self.config
        return self.config.with_templates(self.attractor_templates())

    def extract_features(self, initial_conditions, N: Optional[int] = 1000,
                         show_progress: bool = True) -> Tensor:
        """Feature matrix of the trajectories started at `initial_conditions`."""
        return self.extractor.extract_features(initial_conditions, N=N,
                                               show_progress=show_progress)

    def classify(self, initial_conditions, N: Optional[int] = 1000,
                 show_progress: bool = True) -> ClassificationResult:
        """Integrate, featurize and classify initial conditions.

        Args:
            initial_conditions: Array of states, one per row, or a zero-argument
                sampler drawn N times
            N: Number of draws for a sampler
            show_progress: Show a progress bar while integrating

        Returns:
            ClassificationResult aligned with the initial conditions
        """
        features = self.extract_features(initial_conditions, N=N, show_progress=show_progress)
        config = self.resolve_config()
        return classify_features(features, config, device=self.device, verbose=self.verbose)

    def classify_trajectories(self, trajectories: Templates) -> ClassificationResult:
        """Classify already integrated trajectories."""
        features, _ = self.extractor.extract_attractor_features(trajectories)
        return classify_features(features, self.resolve_config(),
                                 device=self.device, verbose=self.verbose)

    def extract_attractors(self, labels: Union[Tensor, Sequence[int]],
                           initial_conditions) -> Dict[int, Trajectory]:
        """One representative trajectory per label, see `extract_attractors`."""
        return extract_attractors(self, labels, initial_conditions)

    def __repr__(self) -> str:
        mode = 'supervised' if self.config.is_supervised or self.attractors_ic is not None \
            else 'unsupervised'
        return (f"FeaturizingMapper(total={self.total}, transient={self.transient}, "
                f"dt={self.dt}, mode={mode})")


def cluster_datasets(dataset, mapper_or_config: Union[FeaturizingMapper, ClusteringConfig],
                     N: Optional[int] = 1000,
                     show_progress: bool = True) -> ClassificationResult:
    """Featurize and classify a dataset.

    A mapping of trajectories, or a list of trajectories, is featurized
    directly. Anything else is taken as initial conditions, which requires a
    mapper to integrate them.

    Args:
        dataset: Trajectories, array of initial conditions, or a sampler
        mapper_or_config: FeaturizingMapper, or ClusteringConfig for trajectories
        N: Number of draws for a sampler
        show_progress: Show a progress bar while integrating

    Returns:
        ClassificationResult
    """
    if isinstance(mapper_or_config, FeaturizingMapper):
        if _is_trajectory_collection(dataset):
            return mapper_or_config.classify_trajectories(dataset)
        return mapper_or_config.classify(dataset, N=N, show_progress=show_progress)

    if isinstance(mapper_or_config, ClusteringConfig):
        if not _is_trajectory_collection(dataset):
            raise TypeError("A ClusteringConfig can only classify trajectories; "
                            "use a FeaturizingMapper to classify initial conditions")
        features, _ = FeatureExtractor(mapper_or_config.featurizer).extract_attractor_features(
            dataset)
        return classify_features(features, mapper_or_config)

    raise TypeError(f"Expected FeaturizingMapper or ClusteringConfig, "
                    f"got {type(mapper_or_config)}")


def classify(initial_conditions, mapper_or_config: Union[FeaturizingMapper, ClusteringConfig],
             N: Optional[int] = 1000, show_progress: bool = True) -> ClassificationResult:
    """Labels and errors for every initial condition or trajectory.

    The result unpacks as `labels, errors = classify(...)`.
    """
    return cluster_datasets(initial_conditions, mapper_or_config, N=N,
                            show_progress=show_progress)


def basins_fractions(labels: Union[Tensor, np.ndarray, Sequence[int]]) -> Dict[int, float]:
    """Fraction of samples carrying each label, -1 included.

    Args:
        labels: Per-sample labels

    Returns:
        Dict of label to fraction, in ascending label order
    """
    if isinstance(labels, Tensor):
        labels = labels.detach().cpu().numpy()
    labels = np.asarray(labels).reshape(-1)
    if labels.size == 0:
        raise ValueError("Cannot compute fractions of an empty label set")
    unique, counts = np.unique(labels, return_counts=True)
    return {int(label): count / labels.size for label, count in zip(unique, counts)}


def extract_attractors(mapper: FeaturizingMapper, labels: Union[Tensor, Sequence[int]],
                       initial_conditions) -> Dict[int, Trajectory]:
    """Trajectory of the first sample of every label except -1.

    Args:
        mapper: Mapper used for integration
        labels: Per-sample labels aligned with the initial conditions
        initial_conditions: Indexable initial conditions

    Returns:
        Dict of label to trajectory
    """
    source = as_initial_conditions(initial_conditions)
    if not source.is_indexable:
        raise TypeError("Attractors can only be extracted from indexable initial conditions")

    labels = [int(label) for label in (labels.tolist() if isinstance(labels, Tensor) else labels)]
    if len(labels) != len(source):
        raise ValueError(f"Got {len(labels)} labels for {len(source)} initial conditions")

    first_index = {}
    for i, label in enumerate(labels):
        if label != UNCLASSIFIED and label not in first_index:
            first_index[label] = i

    return {label: mapper.sampler.sample_one(source.sample(i))
            for label, i in first_index.items()}


def fractions(initial_conditions, mapper: FeaturizingMapper, N: Optional[int] = 1000,
              show_progress: bool = True):
    """Basin fractions of the attractors found from the given initial conditions.

    Args:
        initial_conditions: Array of states, one per row, or a zero-argument sampler
        mapper: FeaturizingMapper
        N: Number of draws for a sampler
        show_progress: Show a progress bar while integrating

    Returns:
        fs for a sampler; (fs, labels, attractors) for an array of initial conditions
    """
    if not isinstance(mapper, FeaturizingMapper):
        raise TypeError(f"fractions requires a FeaturizingMapper, got {type(mapper)}")

    source = as_initial_conditions(initial_conditions, N)
    labels = mapper.classify(source, N=N, show_progress=show_progress).labels
    fs = basins_fractions(labels)
    if not source.is_indexable:
        return fs
    attractors = extract_attractors(mapper, labels, source)
    return fs, labels, attractors
