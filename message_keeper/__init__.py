"""Message storage behind a remote object, served over XML-RPC."""

__version__ = "1.0.0"
