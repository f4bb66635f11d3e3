"""
Initial-condition sources.

Initial conditions come either as an indexable collection of states or as a
zero-argument function drawn a fixed number of times. Both variants expose
the same `sample(i)` capability so the sampler never branches on input type.
"""

from typing import Callable, Optional, Sequence, Union
import numpy as np
import torch
from torch import Tensor

from .interfaces import InitialConditionSource


class ArrayInitialConditions(InitialConditionSource):
    """Initial conditions given up front, one state per row."""

    def __init__(self, states: Union[np.ndarray, Tensor, Sequence]):
        if isinstance(states, Tensor):
            states = states.detach().cpu().numpy()
        arr = np.asarray(states, dtype=float)
        if arr.ndim == 1:
            arr = arr[:, None]
        if arr.ndim != 2:
            raise ValueError(f"Expected 2D array of initial conditions, got {arr.ndim}D")
        if arr.shape[0] == 0:
            raise ValueError("Initial condition set is empty")
        self.states = arr

    def sample(self, index: int) -> np.ndarray:
        return self.states[index]

    def __len__(self) -> int:
        return self.states.shape[0]

    def __repr__(self) -> str:
        return f"ArrayInitialConditions(n={len(self)}, dimension={self.states.shape[1]})"


class SampledInitialConditions(InitialConditionSource):
    """Initial conditions drawn from a zero-argument sampler.

    The sampler is called once per index and its draws are not cached, so
    repeated `sample(i)` calls return fresh states.
    """

    def __init__(self, sampler: Callable[[], np.ndarray], n_samples: int):
        if not callable(sampler):
            raise TypeError(f"sampler must be callable, got {type(sampler)}")
        if int(n_samples) < 1:
            raise ValueError(f"n_samples must be positive, got {n_samples}")
        self.sampler = sampler
        self.n_samples = int(n_samples)

    def sample(self, index: int) -> np.ndarray:
        if not 0 <= index < self.n_samples:
            raise IndexError(f"sample index {index} out of range for {self.n_samples} samples")
        return np.asarray(self.sampler(), dtype=float).reshape(-1)

    def __len__(self) -> int:
        return self.n_samples

    @property
    def is_indexable(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"SampledInitialConditions(n={self.n_samples})"


def as_initial_conditions(initial_conditions, N: Optional[int] = 1000) -> InitialConditionSource:
    """Coerce user input into an initial-condition source.

    Args:
        initial_conditions: Existing source, array-like of states, or a
            zero-argument callable
        N: Number of draws for the callable form (ignored otherwise)

    Returns:
        InitialConditionSource
    """
    if isinstance(initial_conditions, InitialConditionSource):
        return initial_conditions
    if callable(initial_conditions):
        if N is None:
            raise ValueError("N is required when initial conditions are given as a function")
        return SampledInitialConditions(initial_conditions, N)
    if isinstance(initial_conditions, (np.ndarray, Tensor, list, tuple)):
        return ArrayInitialConditions(initial_conditions)
    raise TypeError(f"Cannot use {type(initial_conditions)} as initial conditions")
