from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from .core.settings import DEFAULT_AUTH_TOKEN


class CredentialCheck(Protocol):
    header: str

    def is_authorized(self, value: Optional[str]) -> bool:
        ...


@dataclass(frozen=True)
class StaticTokenCheck:
    """
    Placeholder check: the header must equal a fixed literal.

    This is not credential validation and must not be relied on outside a
    trusted network.
    """

    expected: str = DEFAULT_AUTH_TOKEN
    header: str = "Authorization"

    def is_authorized(self, value: Optional[str]) -> bool:
        return value is not None and value == self.expected
