"""
Feature-space visualization.

Scatter plots of classified feature vectors and bar charts of basin fractions.
"""

from typing import Dict, List, Optional, Tuple
import torch
from torch import Tensor
import matplotlib.pyplot as plt
import numpy as np

from ..base.data_structures import UNCLASSIFIED


def plot_feature_clusters(features: Tensor,
                          labels: Tensor,
                          centers: Optional[Tensor] = None,
                          dims: Tuple[int, int] = (0, 1),
                          ax: Optional[plt.Axes] = None,
                          colors: Optional[List[str]] = None,
                          alpha: float = 0.7,
                          point_size: int = 30,
                          outlier_color: str = 'lightgray',
                          show_legend: bool = True,
                          title: Optional[str] = None) -> plt.Axes:
    """Scatter two feature dimensions colored by label.

    Unclassified samples (-1) are drawn first in a neutral color so clusters
    stay visible on top.

    Args:
        features: (feature_dim, n_samples) feature matrix
        labels: (n_samples,) labels
        centers: Optional (k, feature_dim) cluster centers
        dims: The two feature dimensions to plot
        ax: Matplotlib axes (created if None)
        colors: List of colors for clusters
        alpha: Point transparency
        point_size: Size of data points
        outlier_color: Color of unclassified samples
        show_legend: Whether to show legend
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))

    features_np = features.detach().cpu().numpy()
    if features_np.shape[0] == 1:
        features_np = np.vstack([features_np, np.zeros_like(features_np)])
        dims = (0, 1)
    labels_np = labels.detach().cpu().numpy() if isinstance(labels, Tensor) else np.asarray(labels)

    x = features_np[dims[0]]
    y = features_np[dims[1]]

    outliers = labels_np == UNCLASSIFIED
    if outliers.any():
        ax.scatter(x[outliers], y[outliers],
                   c=outlier_color,
                   marker='.',
                   s=point_size,
                   alpha=alpha,
                   label=f'Unclassified ({int(outliers.sum())})')

    cluster_labels = [label for label in np.unique(labels_np) if label != UNCLASSIFIED]
    n_clusters = len(cluster_labels)

    if colors is None:
        cmap = plt.get_cmap('tab10' if n_clusters <= 10 else 'tab20')
        colors = [cmap(i % cmap.N) for i in range(max(n_clusters, 1))]

    for i, label in enumerate(cluster_labels):
        mask = labels_np == label
        ax.scatter(x[mask], y[mask],
                   c=[colors[i % len(colors)]],
                   s=point_size,
                   alpha=alpha,
                   edgecolors='black',
                   linewidth=0.5,
                   label=f'Attractor {label}')

    if centers is not None:
        centers_np = centers.detach().cpu().numpy()
        ax.scatter(centers_np[:, dims[0]], centers_np[:, dims[1]],
                   c='black',
                   marker='X',
                   s=200,
                   edgecolors='white',
                   linewidth=2,
                   label='Centers',
                   zorder=10)

    ax.set_xlabel(f'Feature {dims[0] + 1}')
    ax.set_ylabel(f'Feature {dims[1] + 1}')

    if title:
        ax.set_title(title)

    if show_legend:
        ax.legend()

    return ax


def plot_basins_fractions(fs: Dict[int, float],
                          ax: Optional[plt.Axes] = None,
                          title: Optional[str] = None) -> plt.Axes:
    """Bar chart of basin fractions.

    Args:
        fs: Dict of label to fraction, as returned by basins_fractions
        ax: Matplotlib axes (created if None)
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    labels = sorted(fs)
    values = [fs[label] for label in labels]
    bar_colors = ['lightgray' if label == UNCLASSIFIED else 'tab:blue' for label in labels]

    ax.bar([str(label) for label in labels], values, color=bar_colors, edgecolor='black')
    ax.set_xlabel('Attractor label')
    ax.set_ylabel('Basin fraction')
    ax.set_ylim(0, 1)

    if title:
        ax.set_title(title)

    return ax
