"""
Parallel trajectory sampling.

Runs an external trajectory generator for many initial conditions on a thread
pool. The generator is called as

    generator(u0, total, transient, dt)

and must return either a (n_steps, state_dim) array of states or a
(states, times) tuple. Generators must tolerate concurrent calls with
different initial conditions.
"""

from typing import Any, Callable, List, Optional, TypeVar
from concurrent.futures import ThreadPoolExecutor
import os
import threading
import time

import numpy as np
from tqdm.auto import tqdm

from ..base.data_structures import Trajectory
from ..base.initial_conditions import as_initial_conditions

T = TypeVar('T')

TrajectoryGenerator = Callable[[np.ndarray, float, float, float], Any]


class SamplingError(RuntimeError):
    """A trajectory generator failed for one initial condition.

    The failing sample's index and initial condition are kept; the generator's
    exception is chained as __cause__.
    """

    def __init__(self, index: int, initial_condition: np.ndarray, error: BaseException):
        self.index = index
        self.initial_condition = initial_condition
        super().__init__(f"Trajectory generation failed for sample {index} "
                         f"(u0={np.array2string(np.asarray(initial_condition), precision=4)}): "
                         f"{type(error).__name__}: {error}")


class ProgressCounter:
    """Race-free progress counter owned by a single sampling call.

    Optionally mirrors its count to a tqdm bar.
    """

    def __init__(self, total: int, show_progress: bool = False,
                 desc: str = "Integrating trajectories"):
        self.total = total
        self._count = 0
        self._lock = threading.Lock()
        self._bar = tqdm(total=total, desc=desc, unit="traj") if show_progress else None

    def increment(self, n: int = 1) -> None:
        with self._lock:
            self._count += n
            if self._bar is not None:
                self._bar.update(n)

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()

    def __enter__(self) -> 'ProgressCounter':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class TrajectorySampler:
    """Samples trajectories from initial conditions in parallel.

    Parameters
    ----------
    generator : callable
        External trajectory generator, see module docstring
    total : float, default=100
        Integration length recorded after the transient
    transient : float, default=100
        Transient length discarded before recording
    dt : float, default=1
        Sampling step
    max_workers : int, optional
        Thread pool size (default: os.cpu_count()); 1 runs sequentially
    show_progress : bool, default=True
        Show a tqdm progress bar while sampling
    verbose : int, default=0
        Verbosity level
    """

    def __init__(self,
                 generator: TrajectoryGenerator,
                 total: float = 100.0,
                 transient: float = 100.0,
                 dt: float = 1.0,
                 max_workers: Optional[int] = None,
                 show_progress: bool = True,
                 verbose: int = 0):
        if not callable(generator):
            raise TypeError(f"generator must be callable, got {type(generator)}")
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")

        self.generator = generator
        self.total = total
        self.transient = transient
        self.dt = dt
        self.max_workers = max_workers or os.cpu_count() or 1
        self.show_progress = show_progress
        self.verbose = verbose

    def time_grid(self, n_steps: int) -> np.ndarray:
        """Time stamps of a trajectory recorded on the sampler's grid."""
        return self.transient + self.dt * np.arange(n_steps)

    def sample_one(self, u0: np.ndarray) -> Trajectory:
        """Run the generator once and wrap its output.

        Args:
            u0: Initial condition

        Returns:
            Trajectory with states and time stamps
        """
        result = self.generator(np.asarray(u0, dtype=float), self.total, self.transient, self.dt)

        if isinstance(result, Trajectory):
            return result
        if isinstance(result, tuple):
            if len(result) != 2:
                raise ValueError(f"Generator must return states or (states, times), "
                                 f"got a tuple of length {len(result)}")
            states, times = result
            return Trajectory(states, times)

        states = np.atleast_1d(np.asarray(result, dtype=float))
        return Trajectory(states, self.time_grid(states.shape[0]))

    def map(self, fn: Callable[[Trajectory], T], initial_conditions,
            N: Optional[int] = 1000, show_progress: Optional[bool] = None) -> List[T]:
        """Sample every initial condition and apply `fn` to each trajectory.

        Initial conditions are drawn on the calling thread, exactly once per
        index, before any work is dispatched. Results are index-aligned with
        the initial conditions. A generator failure aborts the batch with a
        SamplingError; pending samples are cancelled.

        Args:
            fn: Function applied to every trajectory inside the worker
            initial_conditions: Array-like, callable, or InitialConditionSource
            N: Number of draws when initial conditions are a callable
            show_progress: Override the sampler's progress setting

        Returns:
            List of fn results
        """
        source = as_initial_conditions(initial_conditions, N)
        n_samples = len(source)
        states = [source.sample(i) for i in range(n_samples)]

        if show_progress is None:
            show_progress = self.show_progress

        start_time = time.time()

        with ProgressCounter(n_samples, show_progress=show_progress) as progress:

            def _run(index: int) -> T:
                try:
                    trajectory = self.sample_one(states[index])
                except Exception as e:
                    raise SamplingError(index, states[index], e) from e
                value = fn(trajectory)
                progress.increment()
                return value

            if self.max_workers == 1 or n_samples == 1:
                results = [_run(i) for i in range(n_samples)]
            else:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    futures = [executor.submit(_run, i) for i in range(n_samples)]
                    try:
                        results = [future.result() for future in futures]
                    except BaseException:
                        for future in futures:
                            future.cancel()
                        raise

        if self.verbose:
            print(f"Sampled {n_samples} trajectories with {self.max_workers} workers "
                  f"in {time.time() - start_time:.3f}s")

        return results

    def sample(self, initial_conditions, N: Optional[int] = 1000,
               show_progress: Optional[bool] = None) -> List[Trajectory]:
        """Sample a trajectory for every initial condition.

        Returns:
            List of Trajectory, index-aligned with the initial conditions
        """
        return self.map(lambda trajectory: trajectory, initial_conditions, N=N,
                        show_progress=show_progress)

    def __repr__(self) -> str:
        return (f"TrajectorySampler(total={self.total}, transient={self.transient}, "
                f"dt={self.dt}, max_workers={self.max_workers})")
