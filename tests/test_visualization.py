# tests/test_visualization.py
"""
Plotting smoke tests on a non-interactive backend.
"""

from __future__ import annotations

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import torch

from featurebasins.visualization import plot_feature_clusters, plot_basins_fractions


def test_plot_feature_clusters_draws_outliers_separately():
    features = torch.tensor([[0.0, 0.1, 5.0, 5.1, 9.0],
                             [0.0, 0.1, 5.0, 5.1, 0.0]], dtype=torch.float64)
    labels = torch.tensor([1, 1, 2, 2, -1])
    centers = torch.tensor([[0.05, 0.05], [5.05, 5.05]], dtype=torch.float64)

    ax = plot_feature_clusters(features, labels, centers=centers, title="features")

    legend = [text.get_text() for text in ax.get_legend().get_texts()]
    assert legend[0] == "Unclassified (1)"
    assert "Attractor 1" in legend and "Attractor 2" in legend and "Centers" in legend
    assert ax.get_title() == "features"
    plt.close("all")


def test_plot_feature_clusters_single_feature():
    features = torch.tensor([[0.0, 1.0, 2.0]], dtype=torch.float64)
    ax = plot_feature_clusters(features, torch.tensor([1, 1, 2]), show_legend=False)
    assert ax.get_legend() is None
    plt.close("all")


def test_plot_basins_fractions():
    ax = plot_basins_fractions({-1: 0.1, 1: 0.6, 2: 0.3})
    assert len(ax.patches) == 3
    assert [patch.get_height() for patch in ax.patches] == [0.1, 0.6, 0.3]
    plt.close("all")
