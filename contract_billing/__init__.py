"""Lambda handlers integrating the contract client with WaveApps and GitHub."""

__version__ = "0.1.0"
