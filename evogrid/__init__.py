"""Evolutionary art browsers: breed raster images or turtle drawings by picking them."""

__version__ = "0.1.0"
