"""Client for the worklog REST API."""

__version__ = "0.1.0"
