"""Version information for the CBR Gateway."""

__version__ = "0.1.0"
