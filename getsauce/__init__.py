"""Extract media information from gallery and video sites and download it."""

__version__ = "0.1.0"