"""Opaque identifier types.

Each id kind is its own frozen type, so a ``PhotoId`` never compares equal to
an ``OrderId`` holding the same text.
"""

from dataclasses import dataclass
from typing import Self
from uuid import uuid4


@dataclass(frozen=True)
class _OpaqueId:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise ValueError(f"{type(self).__name__} requires a non-empty string")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def new(cls) -> Self:
        """Return a fresh random identifier."""
        return cls(str(uuid4()))


@dataclass(frozen=True)
class OwnerId(_OpaqueId):
    """Authenticated customer identity."""


@dataclass(frozen=True)
class PhotoId(_OpaqueId):
    """Identifier of an uploaded photo."""


@dataclass(frozen=True)
class OrderId(_OpaqueId):
    """Identifier of a persisted order."""
