"""Base classes, interfaces and data structures for featurizing attractor mapping."""

from .interfaces import (
    DistanceMetric,
    InitialConditionSource,
    FeatureClassifier
)

from .data_structures import (
    UNCLASSIFIED,
    ClusteringMethod,
    RadiusMethod,
    Trajectory,
    ClassificationResult,
    ClusteringConfig
)

from .initial_conditions import (
    ArrayInitialConditions,
    SampledInitialConditions,
    as_initial_conditions
)

__all__ = [
    # Interfaces
    'DistanceMetric',
    'InitialConditionSource',
    'FeatureClassifier',

    # Data structures
    'UNCLASSIFIED',
    'ClusteringMethod',
    'RadiusMethod',
    'Trajectory',
    'ClassificationResult',
    'ClusteringConfig',

    # Initial conditions
    'ArrayInitialConditions',
    'SampledInitialConditions',
    'as_initial_conditions'
]
