"""
Input validation and preprocessing utilities.

Provides functions for validating feature vectors and feature matrices before
classification, including handling of degenerate features and sanity checks.
"""

from typing import Optional, Union, Sequence
import torch
from torch import Tensor
import numpy as np


def validate_data(X: Union[Tensor, np.ndarray, list],
                 dtype: torch.dtype = torch.float64,
                 device: Optional[torch.device] = None,
                 ensure_2d: bool = True,
                 ensure_finite: bool = True,
                 ensure_min_samples: int = 1,
                 ensure_min_features: int = 1) -> Tensor:
    """Validate and convert a feature matrix to tensor.

    Feature matrices are laid out (feature_dim, n_samples): one column per sample.

    Args:
        X: Input data (tensor, numpy array, or list)
        dtype: Target data type
        device: Target device
        ensure_2d: Whether to ensure 2D shape (1D input becomes a single feature row)
        ensure_finite: Whether to check for inf/nan
        ensure_min_samples: Minimum number of samples (columns) required
        ensure_min_features: Minimum number of features (rows) required

    Returns:
        Validated tensor

    Raises:
        ValueError: If validation fails
    """
    # Convert to tensor
    if isinstance(X, Tensor):
        X = X.to(dtype=dtype, device=device)
    elif isinstance(X, np.ndarray):
        X = torch.from_numpy(np.ascontiguousarray(X)).to(dtype=dtype, device=device)
    elif isinstance(X, (list, tuple)):
        X = torch.tensor(np.asarray(X, dtype=float), dtype=dtype, device=device)
    else:
        raise TypeError(f"Cannot convert {type(X)} to tensor")

    # Ensure 2D
    if ensure_2d:
        if X.dim() == 1:
            X = X.unsqueeze(0)
        elif X.dim() != 2:
            raise ValueError(f"Expected 2D array, got {X.dim()}D")

        n_features, n_samples = X.shape

        if n_samples < ensure_min_samples:
            raise ValueError(f"Found {n_samples} samples, but need at least "
                           f"{ensure_min_samples}")

        if n_features < ensure_min_features:
            raise ValueError(f"Found {n_features} features, but need at least "
                           f"{ensure_min_features}")

    # Check for finite values
    if ensure_finite:
        if torch.isnan(X).any():
            raise ValueError("Input contains NaN values")
        if torch.isinf(X).any():
            raise ValueError("Input contains infinite values")

    return X


def validate_feature_vectors(vectors: Sequence, dtype: torch.dtype = torch.float64) -> Tensor:
    """Check that feature vectors agree in length and stack them column-wise.

    Args:
        vectors: Sequence of 1-D feature vectors, one per sample

    Returns:
        (feature_dim, n_samples) tensor

    Raises:
        ValueError: If the sequence is empty, a vector is not 1-D, or lengths differ
    """
    if len(vectors) == 0:
        raise ValueError("No feature vectors to assemble")

    columns = []
    expected = None
    for i, vector in enumerate(vectors):
        if isinstance(vector, Tensor):
            vector = vector.detach().cpu().numpy()
        arr = np.atleast_1d(np.asarray(vector, dtype=float))
        if arr.ndim != 1:
            raise ValueError(f"Feature vector {i} must be 1D, got shape {arr.shape}")
        if expected is None:
            expected = arr.shape[0]
        elif arr.shape[0] != expected:
            raise ValueError(f"Feature vector {i} has length {arr.shape[0]}, "
                             f"expected {expected} like the first sample")
        columns.append(arr)

    return validate_data(np.stack(columns, axis=1), dtype=dtype)


def rescale_to_unit_interval(vec: Tensor) -> Tensor:
    """Min-max rescale a vector so its values span [0, 1].

    A constant vector maps to all zeros.
    """
    shifted = vec - vec.min()
    top = shifted.max()
    if top == 0:
        return torch.zeros_like(vec)
    return shifted / top


def rescale_features(features: Tensor) -> Tensor:
    """Rescale every feature dimension (row) of a feature matrix into [0, 1].

    Args:
        features: (feature_dim, n_samples) tensor

    Returns:
        New tensor of the same shape; rows with zero range become zeros
    """
    min_vals = features.min(dim=1, keepdim=True)[0]
    shifted = features - min_vals
    range_vals = shifted.max(dim=1, keepdim=True)[0]
    safe_range = torch.where(range_vals == 0, torch.ones_like(range_vals), range_vals)
    return torch.where(range_vals == 0, torch.zeros_like(shifted), shifted / safe_range)


def check_min_neighbors(min_neighbors: int) -> int:
    """Validate the density parameter of DBSCAN.

    Raises:
        ValueError: If not a positive integer
    """
    if isinstance(min_neighbors, bool) or not isinstance(min_neighbors, (int, np.integer)):
        raise TypeError(f"min_neighbors must be int, got {type(min_neighbors)}")

    if min_neighbors < 1:
        raise ValueError(f"min_neighbors must be positive, got {min_neighbors}")

    return int(min_neighbors)
