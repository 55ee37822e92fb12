"""Patient record tracks: time stamps, dates, intervals, binning, sparse tracks, iterators and filters."""

__version__ = "0.1.0"