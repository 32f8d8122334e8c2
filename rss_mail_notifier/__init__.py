"""Mail a digest of new RSS items whenever the remote feed changes."""

__version__ = "0.1.0"
