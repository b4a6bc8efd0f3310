"""Battery charge/discharge planning engine."""

__version__ = "0.1.0"
