"""Repository contract and the helpers backends share.

Concrete backends live in genrepo/infrastructure/persistence/; decorators
live in genrepo/interception/.
"""

from .base import Repository, key_of
from .batch import apply_each
from .streams import ReplayableStream

__all__ = [
    "Repository",
    "ReplayableStream",
    "apply_each",
    "key_of",
]
