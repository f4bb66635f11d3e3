"""
Device management utilities for classification on CPU or GPU.

Feature-space clustering runs in double precision, so Apple MPS (no float64)
is never selected automatically.
"""

from typing import Optional, Union, Dict
import torch
import warnings


def get_default_device() -> torch.device:
    """Get the best available float64-capable device.

    Returns:
        cuda if available, else cpu
    """
    if torch.cuda.is_available():
        return torch.device('cuda')
    return torch.device('cpu')


def parse_device(device: Optional[Union[str, torch.device]] = None) -> torch.device:
    """Parse device specification.

    Args:
        device: Device specification
            - None: Use CPU
            - 'auto': Use best available
            - 'cpu': Use CPU
            - 'cuda': Use default CUDA device
            - 'cuda:X': Use CUDA device X
            - torch.device: Use as-is

    Returns:
        Parsed device
    """
    if device is None:
        return torch.device('cpu')

    if isinstance(device, torch.device):
        return device

    if isinstance(device, str):
        if device == 'auto':
            return get_default_device()
        elif device == 'cpu':
            return torch.device('cpu')
        elif device.startswith('cuda'):
            if not torch.cuda.is_available():
                warnings.warn("CUDA not available, falling back to CPU")
                return torch.device('cpu')
            return torch.device(device)
        else:
            raise ValueError(f"Unknown device: {device}")
    else:
        raise TypeError(f"Device must be str or torch.device, got {type(device)}")


def estimate_memory_usage(n_samples: int, n_features: int, n_templates: int = 0,
                          dtype: torch.dtype = torch.float64) -> Dict[str, int]:
    """Estimate memory usage of classifying a feature matrix.

    Density clustering holds an (n, n) distance matrix; template matching an
    (n, n_templates) one.

    Args:
        n_samples: Number of samples
        n_features: Number of features
        n_templates: Number of templates (0 for density clustering)
        dtype: Data type

    Returns:
        Dictionary with memory estimates in bytes
    """
    bytes_per_element = torch.finfo(dtype).bits // 8

    estimates = {}
    estimates['features'] = n_samples * n_features * bytes_per_element
    if n_templates > 0:
        estimates['distances'] = n_samples * n_templates * bytes_per_element
    else:
        estimates['distances'] = n_samples * n_samples * bytes_per_element
        # neighborhood mask
        estimates['neighborhoods'] = n_samples * n_samples
    estimates['labels'] = n_samples * 8
    estimates['total'] = sum(estimates.values())

    return estimates
