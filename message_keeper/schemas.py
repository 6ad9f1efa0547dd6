"""
Pydantic schemas for command line argument validation.

Both programs take positional arguments only; these models turn the raw
strings into typed values and reject anything malformed.
"""

from typing import Sequence

from pydantic import BaseModel, Field


class PositionalArgs(BaseModel):
    """Base for models filled from positional command line arguments."""

    model_config = {"frozen": True}

    @classmethod
    def from_argv(cls, argv: Sequence[str]):
        """
        Validate positional arguments in field order.

        Extra trailing arguments are ignored.

        Raises:
            ValueError: too few arguments, or one fails validation
                (pydantic's ValidationError is a ValueError).
        """
        names = list(cls.model_fields)
        if len(argv) < len(names):
            raise ValueError(f"expected {len(names)} arguments, got {len(argv)}")
        return cls.model_validate(dict(zip(names, argv)))


class ServerArgs(PositionalArgs):
    """registry-port server-host server-port"""
    registry_port: int = Field(..., ge=0, le=65535)
    server_host: str = Field(..., min_length=1)
    server_port: int = Field(..., ge=0, le=65535)


class ClientArgs(PositionalArgs):
    """registry-host registry-port messages-file-path"""
    registry_host: str = Field(..., min_length=1)
    registry_port: int = Field(..., ge=1, le=65535)
    messages_file_path: str = Field(..., min_length=1)


SERVER_USAGE = "Params: registry-port server-host server-port"
CLIENT_USAGE = "Params: registry-host registry-port messages-file-path"
