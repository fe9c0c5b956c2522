"""SalsaFlow server: identity, sessions and access tokens for SalsaFlow."""

__version__ = "0.1.0"
