"""Steam directory client package."""
from .client import DirectoryStats, SteamDirectoryClient
from .retry import FailureClass, RetryPolicy

__all__ = [
    "DirectoryStats",
    "SteamDirectoryClient",
    "FailureClass",
    "RetryPolicy",
]
