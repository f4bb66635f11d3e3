"""Classification algorithm implementations."""

from .dbscan import DBSCAN, DensityCluster, sort_clusters, cluster_assignment
from .radius import optimal_radius, optimal_radius_silhouette, optimal_radius_elbow
from .unsupervised import DensityClassifier
from .supervised import TemplateClassifier

__all__ = [
    'DBSCAN',
    'DensityCluster',
    'sort_clusters',
    'cluster_assignment',
    'optimal_radius',
    'optimal_radius_silhouette',
    'optimal_radius_elbow',
    'DensityClassifier',
    'TemplateClassifier'
]
