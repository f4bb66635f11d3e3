"""
featurebasins: attractor mapping by featurizing and clustering trajectories.

Initial conditions of a dynamical system are integrated, each trajectory is
reduced to a short feature vector, and the feature vectors are grouped into
attractors, either by:
- Density clustering (DBSCAN with automatic radius selection), or
- Nearest-template matching against known attractors

Example usage:
    >>> import numpy as np
    >>> from featurebasins import build_config, FeaturizingMapper, fractions
    >>>
    >>> def featurizer(states, times):
    ...     return np.array([states[:, 0].mean(), states[:, 0].std()])
    >>>
    >>> # generator(u0, total, transient, dt) returns the recorded states
    >>> config = build_config(featurizer, min_neighbors=5, optimal_radius_method='elbow')
    >>> mapper = FeaturizingMapper(generator, config, total=200, transient=500, dt=0.5)
    >>>
    >>> # Fractions, labels and one trajectory per attractor
    >>> fs, labels, attractors = fractions(initial_conditions, mapper)
"""

__version__ = '0.1.0'

# Orchestration
from .mapper import (
    build_config,
    make_classifier,
    classify_features,
    FeaturizingMapper,
    classify,
    cluster_datasets,
    fractions,
    basins_fractions,
    extract_attractors
)

# Classifiers
from .algorithms import (
    DBSCAN,
    DensityClassifier,
    TemplateClassifier,
    optimal_radius
)

# Sampling and features
from .sampling import TrajectorySampler, SamplingError
from .features import FeatureExtractor

# Core data structures
from .base import (
    UNCLASSIFIED,
    ClusteringMethod,
    RadiusMethod,
    Trajectory,
    ClassificationResult,
    ClusteringConfig,
    ArrayInitialConditions,
    SampledInitialConditions
)

from .distances import get_metric

# Visualization
from .visualization import plot_feature_clusters, plot_basins_fractions

__all__ = [
    # Orchestration
    'build_config',
    'make_classifier',
    'classify_features',
    'FeaturizingMapper',
    'classify',
    'cluster_datasets',
    'fractions',
    'basins_fractions',
    'extract_attractors',

    # Classifiers
    'DBSCAN',
    'DensityClassifier',
    'TemplateClassifier',
    'optimal_radius',

    # Sampling and features
    'TrajectorySampler',
    'SamplingError',
    'FeatureExtractor',

    # Core data structures
    'UNCLASSIFIED',
    'ClusteringMethod',
    'RadiusMethod',
    'Trajectory',
    'ClassificationResult',
    'ClusteringConfig',
    'ArrayInitialConditions',
    'SampledInitialConditions',
    'get_metric',

    # Visualization
    'plot_feature_clusters',
    'plot_basins_fractions',

    # Version
    '__version__'
]
