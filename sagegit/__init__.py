"""Git workflow helpers: branch syncing, staging, status, history, statistics, cleanup and conflicts."""

__version__ = "0.1.0"