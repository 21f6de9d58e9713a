from .client import GitHubRunHistoryClient
from .fakes import FakeRunHistoryProvider

__all__ = [
    "FakeRunHistoryProvider",
    "GitHubRunHistoryClient",
]
