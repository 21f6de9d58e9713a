from .actions_output import ActionsOutputPublisher
from .fakes import FakePublisher

__all__ = [
    "ActionsOutputPublisher",
    "FakePublisher",
]
