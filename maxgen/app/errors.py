"""Exceptions shared across the API layers."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import status


@dataclass(eq=False)
class DataLayerError(Exception):
    """A failed database operation whose message is safe to surface verbatim.

    ``caller_fault`` marks failures attributable to request input (constraint
    or type violations), which map to 400 instead of 500.
    """

    message: str
    caller_fault: bool = False

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        if self.caller_fault:
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_500_INTERNAL_SERVER_ERROR
