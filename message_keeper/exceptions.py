"""
Errors surfaced to callers of the remote objects.
"""

from typing import Optional


class RemoteError(Exception):
    """
    The single remote-failure kind.

    Wraps whatever went wrong behind the remote call (data access, transport)
    and keeps the original exception in ``cause``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class RegistryError(Exception):
    """Base class for naming service errors."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class NotBoundError(RegistryError):
    def __str__(self) -> str:
        return f"Name not bound: {self.name}"


class AlreadyBoundError(RegistryError):
    def __str__(self) -> str:
        return f"Name already bound: {self.name}"
