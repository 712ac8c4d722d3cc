"""Image containers, sampling, colour maps, image I/O, photometric correction and a k-d tree."""

__version__ = "0.1.0"