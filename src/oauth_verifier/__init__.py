"""Identity token verification and code exchange for third-party identity providers."""

__version__ = "0.1.0"
