"""Accumulation of analysis quantities over many events.

- `histogram`: histograms and per-worker accumulation contexts
"""

from .histogram import DEFAULT_HISTOGRAMS, AccumulationContext, make_histogram
