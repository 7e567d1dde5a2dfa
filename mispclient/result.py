from __future__ import annotations

from enum import Enum
from typing import Any

import requests

from .exceptions import DuplicateAttributeError, MISPServerError, MISPTransportError


class ResultStatus(Enum):
    success = 'success'
    duplicate = 'duplicate'
    transport = 'transport'
    unknown = 'unknown'


class MISPResult:
    """Outcome of a single call to the MISP REST API.

    The instance is falsy unless the call succeeded with a non-empty value, so
    code that only checks truthiness treats every failure as "nothing found".

    :param status: classification of the call
    :param value: decoded JSON body on success, the server's error message otherwise
    :param response: the raw response, if the server answered at all
    :param error: the transport exception, if any
    """

    def __init__(self, status: ResultStatus, value: Any = None,
                 response: requests.Response | None = None,
                 error: Exception | None = None) -> None:
        self.status = status
        self.value = value
        self.response = response
        self.error = error

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.success

    @property
    def is_duplicate(self) -> bool:
        return self.status == ResultStatus.duplicate

    @property
    def status_code(self) -> int | None:
        if self.response is None:
            return None
        return self.response.status_code

    def raise_for_error(self) -> Any:
        """Return the value of a successful call, raise the matching exception otherwise"""
        if self.status == ResultStatus.success:
            return self.value
        if self.status == ResultStatus.duplicate:
            raise DuplicateAttributeError(f'Duplicate attribute: {self.value}')
        if self.status == ResultStatus.transport:
            raise MISPTransportError(f'Unable to reach MISP: {self.error}')
        raise MISPServerError(f'Error code {self.status_code}: {self.value}')

    def __bool__(self) -> bool:
        return self.ok and bool(self.value)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}(status={self.status.value}, status_code={self.status_code})>'
