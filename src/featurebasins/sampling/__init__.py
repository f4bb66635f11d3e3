"""Trajectory sampling from initial conditions."""

from .trajectories import (
    TrajectorySampler,
    TrajectoryGenerator,
    ProgressCounter,
    SamplingError
)

__all__ = [
    'TrajectorySampler',
    'TrajectoryGenerator',
    'ProgressCounter',
    'SamplingError'
]
