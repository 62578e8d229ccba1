"""Timing tools used to profile the stages of the reconstruction chain."""

import time
from dataclasses import dataclass

__all__ = ["Time", "Stopwatch", "StopwatchManager"]


@dataclass
class Time:
    """Simple dataclass to hold time information.

    Attributes
    ----------
    wall : float
         Wall time in seconds
    cpu : float
         CPU time in seconds
    """

    wall: float = 0.0
    cpu: float = 0.0

    def __add__(self, other):
        return Time(wall=self.wall + other.wall, cpu=self.cpu + other.cpu)

    def __sub__(self, other):
        return Time(wall=self.wall - other.wall, cpu=self.cpu - other.cpu)

    @classmethod
    def current(cls):
        """Returns the current time (wall and cpu).

        Returns
        -------
        Time
           Current time
        """
        return cls(time.time(), time.process_time())


class Stopwatch:
    """Holds timing information for a specific process."""

    def __init__(self):
        """Give default values to the underlying class attributes."""
        self._start = None
        self._last = Time()
        self._total = Time()
        self.count = 0

    @property
    def running(self):
        """Whether the stopwatch is currently running."""
        return self._start is not None

    def start(self):
        """Starts the watch."""
        if self.running:
            raise ValueError("Cannot restart a watch that has not been stopped.")

        self._start = Time.current()

    def stop(self):
        """Stops the watch, records the time since the last start."""
        if not self.running:
            raise ValueError("Cannot stop a watch that has not been started.")

        self._last = Time.current() - self._start
        self._total = self._total + self._last
        self._start = None
        self.count += 1

    @property
    def time(self):
        """Time between the last start and the last stop."""
        return self._last

    @property
    def time_sum(self):
        """Sum of times between all watch starts and stops."""
        return self._total

    def merge(self, other):
        """Adds the cumulative time of another watch to this one.

        Parameters
        ----------
        other : Stopwatch
            Watch of the same process run elsewhere (e.g. another worker)
        """
        self._total = self._total + other.time_sum
        self.count += other.count


class StopwatchManager:
    """Simple class to organize various time measurements."""

    def __init__(self):
        """Initalize the basic private stopwatch attributes."""
        self._watch = {}

    def keys(self):
        """List of all initialized stopwatch tags."""
        return self._watch.keys()

    def items(self):
        """List of (key, stopwatch) pairs."""
        return self._watch.items()

    def initialize(self, key):
        """Initialize one or more stopwatches, resetting existing ones.

        Parameters
        ----------
        key : Union[str, List[str]]
            Key or list of keys to initialize a `Stopwatch` for
        """
        keys = [key] if isinstance(key, str) else key
        for k in keys:
            self._watch[k] = Stopwatch()

    def _get(self, key):
        if key not in self._watch:
            raise KeyError(f"No stopwatch initialized under the name: {key}")

        return self._watch[key]

    def start(self, key):
        """Starts the stopwatch of a given key.

        Parameters
        ----------
        key : str
            Key for which to start the clock
        """
        self._get(key).start()

    def stop(self, key):
        """Stops the stopwatch of a given key.

        Parameters
        ----------
        key : str
            Key for which to stop the clock
        """
        self._get(key).stop()

    def time(self, key):
        """Returns the time recorded between the last start and stop."""
        return self._get(key).time

    def time_sum(self, key):
        """Returns the sum of the times recorded for a given key."""
        return self._get(key).time_sum

    def times_sum(self):
        """Returns the cumulative time of each of the stopwatches.

        Returns
        -------
        Dict[str, Time]
            Execution time of all iterations of each process so far
        """
        return {key: watch.time_sum for key, watch in self.items()}

    def merge(self, other):
        """Merges the cumulative times of another manager into this one.

        Parameters
        ----------
        other : StopwatchManager
             Stopwatches of another process (e.g. a worker)
        """
        for key, watch in other.items():
            if key not in self._watch:
                self._watch[key] = Stopwatch()
            self._watch[key].merge(watch)
