from __future__ import annotations


class MISPClientError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoURL(MISPClientError):
    pass


class NoKey(MISPClientError):
    pass


class MISPServerError(MISPClientError):
    pass


class MISPTransportError(MISPClientError):
    """Exception raised when the request never got a response from the server"""


class DuplicateAttributeError(MISPClientError):
    """Exception raised when the server refuses an attribute already present in the event"""
