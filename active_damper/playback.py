"""
Playback Indexing
=================
Maps an externally advancing playback clock onto a precomputed
trajectory so a render loop can show the sample for "now".

The clock itself belongs to the caller. `index_for_time` only clamps;
wrapping the clock back to 0 past t_max is the caller's job, done with
`advance_clock` in the animation code here.
"""

import math
from typing import List

from .damping_model import ConfigurationError
from .integrator import StateSample, Trajectory


# Clock runs at twice real time in the interactive view
DEFAULT_PLAYBACK_SPEED = 2.0


def index_for_time(time: float, t_max: float, length: int) -> int:
    """
    Sample index for a clock value.

    index = clamp(floor(time / t_max * (length - 1)), 0, length - 1)

    A clock transiently past t_max resolves to the last sample; negative
    or NaN clock values resolve to the first. A single-sample trajectory
    always gives 0.
    """
    if length < 1:
        raise ConfigurationError(f"length must be >= 1, got {length}")
    if not t_max > 0:
        raise ConfigurationError(f"t_max must be > 0, got {t_max}")

    last = length - 1
    if last == 0 or not time > 0:
        return 0
    if time >= t_max:
        return last
    return min(math.floor((time / t_max) * last), last)


def sample_at(trajectory: Trajectory, time: float) -> StateSample:
    """The trajectory sample displayed at clock value `time`."""
    return trajectory.samples[index_for_time(time, trajectory.t_max, len(trajectory))]


def advance_clock(time: float, elapsed: float, t_max: float,
                  speed: float = DEFAULT_PLAYBACK_SPEED) -> float:
    """
    Move the playback clock forward by `speed * elapsed` seconds,
    looping back to 0 once it passes t_max.
    """
    nxt = time + elapsed * speed
    return 0.0 if nxt > t_max else nxt


def playback_indices(trajectory: Trajectory, frames: int, fps: float = 20.0,
                     speed: float = DEFAULT_PLAYBACK_SPEED) -> List[int]:
    """
    Indices shown by a render loop ticking `frames` times at `fps`.

    The first frame shows t = 0; each later frame advances the clock by
    one tick and looks the sample up again.
    """
    t_max = trajectory.t_max
    n = len(trajectory)
    tick = 1.0 / fps

    clock = 0.0
    indices = []
    for _ in range(frames):
        indices.append(index_for_time(clock, t_max, n))
        clock = advance_clock(clock, tick, t_max, speed)
    return indices
