from __future__ import annotations

import logging

import importlib.metadata

logger = logging.getLogger(__name__)

__version__ = importlib.metadata.version("mispclient")


from .exceptions import (MISPClientError, NoURL, NoKey, MISPServerError, MISPTransportError,  # noqa
                         DuplicateAttributeError)
from .mispevent import MISPAttribute, Distribution  # noqa
from .result import MISPResult, ResultStatus  # noqa
from .api import (MISPClient, build_auth_header, invoke_rest, find_event, create_event,  # noqa
                  add_event_tag, add_event_attribute, search_tags)
logger.debug('mispclient loaded properly')


__all__ = ['MISPClient', 'build_auth_header', 'invoke_rest', 'find_event', 'create_event',
           'add_event_tag', 'add_event_attribute', 'search_tags', 'MISPAttribute',
           'Distribution', 'MISPResult', 'ResultStatus', 'MISPClientError', 'NoURL', 'NoKey',
           'MISPServerError', 'MISPTransportError', 'DuplicateAttributeError'
           ]
