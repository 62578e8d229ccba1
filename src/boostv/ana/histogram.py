"""Histogram and counter accumulators filled while processing events.

Each worker owns its own :class:`AccumulationContext`. Contexts of different
workers are combined at the end of a run with :meth:`AccumulationContext.merge`,
which sums histogram contents, counters and stage timings.

Histograms are :class:`hist.Hist` objects with a single regular axis. Values
outside of the axis range land in its underflow and overflow bins.
"""

from collections import Counter

import hist

from boostv.utils.stopwatch import StopwatchManager

__all__ = ["make_histogram", "AccumulationContext", "DEFAULT_HISTOGRAMS"]

# Default binning of the histograms filled by the pipeline, as (bins, low, high)
DEFAULT_HISTOGRAMS = {
    "cand_pt": (100, 0.0, 300.0),
    "cand_eta": (100, -3.0, 3.0),
    "jet_pt": (100, 0.0, 300.0),
    "jet_eta": (100, -3.0, 3.0),
    "tau1": (100, 0.0, 3.0),
    "tau2": (100, 0.0, 3.0),
    "tau3": (100, 0.0, 3.0),
    "tau21": (100, 0.0, 3.0),
    "tau32": (100, 0.0, 3.0),
}


def make_histogram(name, bins=100, low=0.0, high=1.0):
    """Books a one-dimensional histogram with under and overflow bins.

    Parameters
    ----------
    name : str
        Name of the histogram (and of its axis)
    bins : int, default 100
        Number of bins
    low : float, default 0.
        Lower edge of the first bin
    high : float, default 1.
        Upper edge of the last bin

    Returns
    -------
    hist.Hist
        Empty histogram
    """
    if bins < 1:
        raise ValueError(f"Histogram `{name}` must have at least one bin.")
    if high <= low:
        raise ValueError(
            f"Histogram `{name}` upper edge ({high}) must be above its "
            f"lower edge ({low})."
        )

    return hist.Hist(
        hist.axis.Regular(
            int(bins), low, high, name=name, label=name, underflow=True, overflow=True
        )
    )


class AccumulationContext:
    """Holds everything accumulated over the events processed by one worker.

    Attributes
    ----------
    histograms : Dict[str, hist.Hist]
        Histograms, by name
    counters : Counter
        Event counters (e.g. `analyzed`, `records`)
    skips : Counter
        Number of skipped events, by skip reason
    watch : StopwatchManager
        Cumulative timing of the reconstruction stages
    """

    def __init__(self, histograms=None, stages=()):
        """Initialize the accumulators.

        Parameters
        ----------
        histograms : Dict[str, Union[list, dict]], optional
            Binning of each histogram, as `[bins, low, high]` or as a
            dictionary with those keys
        stages : List[str], optional
            Names of the stages to time
        """
        histograms = DEFAULT_HISTOGRAMS if histograms is None else histograms
        self.histograms = {}
        for name, binning in histograms.items():
            if isinstance(binning, dict):
                self.histograms[name] = make_histogram(name, **binning)
            else:
                self.histograms[name] = make_histogram(name, *binning)

        self.counters = Counter()
        self.skips = Counter()
        self.watch = StopwatchManager()
        self.watch.initialize(list(stages))

    def fill(self, name, values, weights=None):
        """Fills a histogram, if it is registered.

        Parameters
        ----------
        name : str
            Name of the histogram
        values : Union[float, np.ndarray]
            Value(s) to fill
        weights : Union[float, np.ndarray], optional
            Weight(s) of the values
        """
        if name in self.histograms:
            self.histograms[name].fill(values, weight=weights)

    def count(self, name, value=1):
        """Increments an event counter."""
        self.counters[name] += value

    def skip(self, reason):
        """Records one skipped event under a reason tag."""
        self.skips[reason] += 1

    def merge(self, other):
        """Adds the content of another context to this one.

        Parameters
        ----------
        other : AccumulationContext
            Context of another worker
        """
        for name, other_hist in other.histograms.items():
            if name not in self.histograms:
                self.histograms[name] = other_hist.copy()
                continue

            if self.histograms[name].axes != other_hist.axes:
                raise ValueError(
                    f"Cannot merge histograms `{name}` with different binnings."
                )
            self.histograms[name] += other_hist

        self.counters.update(other.counters)
        self.skips.update(other.skips)
        self.watch.merge(other.watch)
