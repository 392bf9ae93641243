"""PassFree: passwordless magic-link authentication."""

__version__ = "1.0.0"
