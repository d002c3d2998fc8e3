"""prmap - heat map of files touched by open pull requests."""

__version__ = "0.1.0"
