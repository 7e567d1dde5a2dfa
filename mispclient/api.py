#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Iterable, Mapping

import requests
import urllib3  # type: ignore

from . import __version__
from .exceptions import NoKey, NoURL
from .mispevent import Distribution, MISPAttribute, misp_json_default
from .result import MISPResult, ResultStatus

logger = logging.getLogger('mispclient')

DUPLICATE_ATTRIBUTE = 'A similar attribute already exists for this event'

HTTP_METHODS = ('GET', 'POST', 'PUT', 'DELETE')


def build_auth_header(key: str) -> dict[str, str]:
    """Headers expected by the MISP REST API. The key is passed as-is."""
    return {'Authorization': key,
            'Accept': 'application/json',
            'Content-Type': 'application/json'}


def brotli_supported() -> bool:
    """
    Returns whether Brotli compression is supported
    """

    # urllib >= 1.25.1 includes brotli support
    version_splitted = urllib3.__version__.split('.')  # noqa: F811
    if len(version_splitted) == 2:
        major, minor = version_splitted
        patch = 0
    else:
        major, minor, patch = version_splitted[:3]
    major, minor, patch = int(major), int(minor), int(patch)
    urllib3_with_brotli = (major == 1 and ((minor == 25 and patch >= 1) or (minor >= 26))) or major >= 2

    if not urllib3_with_brotli:
        return False

    # pybrotli is an extra package required by urllib3 for brotli support
    try:
        import brotli  # type: ignore # noqa
        return True
    except ImportError:
        return False


def _url(uri: str, path: str) -> str:
    return f'{uri.rstrip("/")}/{path}'


def _dumps(data: Mapping[str, Any]) -> str:
    # Remove None values.
    return json.dumps({k: v for k, v in data.items() if v is not None}, default=misp_json_default)


def _failure_reason(error_message: Any) -> str | None:
    '''MISP nests the reason of a refused call in the errors key: {"errors": {"value": ["..."]}}'''
    if not isinstance(error_message, dict):
        return None
    errors = error_message.get('errors')
    if isinstance(errors, dict):
        errors = errors.get('value', next(iter(errors.values()), None))
    if isinstance(errors, (list, tuple)):
        errors = errors[0] if errors else None
    if errors is None:
        return None
    return str(errors)


def _event_id(found: Any) -> int | None:
    '''Get the ID out of an event, a list of events, or {'Event': {'id': ...}}'''
    if isinstance(found, list):
        # No disambiguation, the first match wins
        found = found[0] if found else None
    if isinstance(found, dict) and len(found.keys()) == 1 and 'Event' in found:
        found = found['Event']
    if not isinstance(found, dict) or found.get('id') is None:
        return None
    try:
        return int(found['id'])
    except (TypeError, ValueError):
        return None


def _check_response(response: requests.Response) -> MISPResult:
    """Classify the response from the server"""
    if response.status_code >= 400:
        # The server returns a json message with the error details
        try:
            error_message = response.json()
        except ValueError:
            error_message = response.text

        reason = _failure_reason(error_message)
        if reason is not None and reason.rstrip('.') == DUPLICATE_ATTRIBUTE:
            logger.info(f'Attribute not added, it already exists in the event ({response.status_code}): {reason}')
            return MISPResult(ResultStatus.duplicate, error_message, response)

        logger.error(f'Something went wrong ({response.status_code}): {error_message}')
        return MISPResult(ResultStatus.unknown, error_message, response)

    # At this point, we had no error.

    try:
        response_json = response.json()
    except ValueError:
        if not response.content:
            logger.error('Got an empty response.')
        else:
            logger.error(f'Unexpected response (size: {len(response.text)}) from server: {response.text}')
        return MISPResult(ResultStatus.unknown, response.text, response)

    logger.debug(response_json)
    if isinstance(response_json, dict) and response_json.get('response') is not None:
        # Cleanup.
        response_json = response_json['response']
    return MISPResult(ResultStatus.success, response_json, response)


def invoke_rest(headers: Mapping[str, str], method: str, body: str | None, uri: str, *,
                session: requests.Session | None = None,
                timeout: float | tuple[float, float] | None = None) -> MISPResult:
    """Send one request to MISP. Failures are logged and returned, never raised.

    :param headers: headers of the call, see build_auth_header
    :param method: GET, POST, PUT or DELETE
    :param body: JSON encoded body, if any
    :param uri: absolute URL of the endpoint
    :param session: session to send the request with (default: a one-off request)
    :param timeout: timeout, as described here: https://requests.readthedocs.io/en/master/user/advanced/#timeouts
    """
    method = method.upper()
    if method not in HTTP_METHODS:
        raise ValueError(f'Unsupported HTTP method: {method}')

    logger.debug(f'{method} - {uri}')
    if body is not None:
        logger.debug(body)

    requester = session if session is not None else requests
    try:
        response = requester.request(method, uri, headers=dict(headers), data=body, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f'Unable to reach MISP ({method} {uri}): {e}')
        return MISPResult(ResultStatus.transport, error=e)
    logger.debug(response.request.headers)
    return _check_response(response)


def find_event(uri: str, headers: Mapping[str, str], organization: str | int, event_name: str,
               attribute_filter: str | None = None, *,
               session: requests.Session | None = None,
               timeout: float | tuple[float, float] | None = None) -> MISPResult:
    """Search events by organisation and info (events/index). No pagination.

    :param attribute_filter: only match events with an attribute with this value
    """
    query: dict[str, Any] = {'org': organization, 'eventinfo': event_name}
    if attribute_filter:
        query['attribute'] = attribute_filter
    return invoke_rest(headers, 'POST', _dumps(query), _url(uri, 'events/index'),
                       session=session, timeout=timeout)


def add_event_tag(uri: str, headers: Mapping[str, str], event_id: int | str, tag_id: int | str,
                  local_only: bool = False, *,
                  session: requests.Session | None = None,
                  timeout: float | tuple[float, float] | None = None) -> MISPResult:
    """Attach an existing tag to an event.

    :param local_only: the tag is not synchronised to other MISP instances
    """
    url = _url(uri, f'events/addTag/{event_id}/{tag_id}')
    if local_only:
        # CakePHP params in URL
        url = f'{url}/local:1'
    return invoke_rest(headers, 'POST', None, url, session=session, timeout=timeout)


def add_event_attribute(uri: str, headers: Mapping[str, str], event_id: int | str,
                        value: str, type: str, category: str | None, comment: str = '', *,
                        session: requests.Session | None = None,
                        timeout: float | tuple[float, float] | None = None) -> MISPResult:
    """Add an attribute to an existing event. If the event already has it,
    the result is a duplicate and nothing is raised."""
    attribute = {'value': value, 'type': type, 'category': category, 'comment': comment,
                 'event_id': event_id}
    return invoke_rest(headers, 'POST', _dumps(attribute), _url(uri, f'attributes/add/{event_id}'),
                       session=session, timeout=timeout)


def search_tags(uri: str, headers: Mapping[str, str], tag: str, *,
                session: requests.Session | None = None,
                timeout: float | tuple[float, float] | None = None) -> MISPResult:
    """Search tags by name, use % for substrings matches."""
    return invoke_rest(headers, 'GET', None, _url(uri, f'tags/search/{tag}'),
                       session=session, timeout=timeout)


def create_event(uri: str, headers: Mapping[str, str], publisher_email: str | None,
                 tag_ids: Iterable[int | str], organization: str | int, event_name: str,
                 publish: bool = False,
                 distribution: Distribution | int = Distribution.your_organisation_only,
                 attributes: Iterable[MISPAttribute | Mapping[str, Any]] = (), *,
                 reconcile_existing: bool = False, stop_on_error: bool = False,
                 session: requests.Session | None = None,
                 timeout: float | tuple[float, float] | None = None) -> int | None:
    """Create an event unless one with the same organisation and info already exists,
    then tag it and add the attributes, one call at a time and in the given order.

    An event found on the server is left untouched, unless reconcile_existing is set:
    the tags and attributes are then added to it as well.

    A failed call is logged and the next one is sent anyway. With stop_on_error,
    the first failure stops everything (an attribute already present in the event
    is not a failure).

    :param publisher_email: email of the creator of the event, event_creator_email is left out of
        the new event if None (the server then uses the email of the owner of the API key)
    :param tag_ids: IDs of the tags to attach to the event
    :param organization: organisation owning the event
    :param event_name: info field of the event
    :param publish: publish the new event
    :param distribution: distribution level of the new event
    :param attributes: MISPAttribute or dicts with value, type, category and comment
    :return: the ID of the event, None if it could neither be found nor created
    """
    lookup = find_event(uri, headers, organization, event_name, session=session, timeout=timeout)
    if lookup:
        event_id = _event_id(lookup.value)
        if event_id is None:
            logger.error(f'Unable to get the ID of the existing event "{event_name}": {lookup.value}')
            return None
        logger.info(f'Event "{event_name}" ({organization}) already exists: {event_id}')
        if not reconcile_existing:
            return event_id
    else:
        if not lookup.ok:
            if stop_on_error:
                logger.error(f'Unable to search for event "{event_name}" ({organization}), not creating it.')
                return None
            logger.warning(f'Unable to search for event "{event_name}" ({organization}), assuming it does not exist.')
        new_event = {'info': event_name, 'org_id': organization, 'published': publish,
                     'event_creator_email': publisher_email, 'distribution': distribution}
        created = invoke_rest(headers, 'POST', _dumps(new_event), _url(uri, 'events/add'),
                              session=session, timeout=timeout)
        event_id = _event_id(created.value) if created.ok else None
        if event_id is None:
            logger.error(f'Unable to create event "{event_name}" ({organization}): {created.value}')
            return None
        logger.info(f'Event "{event_name}" ({organization}) created: {event_id}')

    for tag_id in tag_ids:
        tagged = add_event_tag(uri, headers, event_id, tag_id, session=session, timeout=timeout)
        if not tagged.ok and stop_on_error:
            logger.error(f'Unable to tag event {event_id} with tag {tag_id}, stopping.')
            return event_id

    for attribute in attributes:
        a = MISPAttribute.coerce(attribute)
        added = add_event_attribute(uri, headers, event_id, a.value, a.type, a.category, a.comment,
                                    session=session, timeout=timeout)
        if not (added.ok or added.is_duplicate) and stop_on_error:
            logger.error(f'Unable to add attribute {a.value} to event {event_id}, stopping.')
            return event_id

    return event_id


class MISPClient:
    """Connection to one MISP instance

    :param url: URL of the MISP instance you want to connect to
    :param key: API key of the user you want to use
    :param ssl: can be True or False (to check or to not check the validity of the certificate. Or a CA_BUNDLE in case of self signed or other certificate (the concatenation of all the crt of the chain)
    :param debug: Write all the debug information to stderr
    :param proxies: Proxy dict, as described here: http://docs.python-requests.org/en/master/user/advanced/#proxies
    :param cert: Client certificate, as described here: http://docs.python-requests.org/en/master/user/advanced/#client-side-certificates
    :param tool: The software using mispclient (string), used to set a unique user-agent
    :param timeout: Timeout, as described here: https://requests.readthedocs.io/en/master/user/advanced/#timeouts
    """

    def __init__(self, url: str, key: str, ssl: bool | str = True, debug: bool = False,
                 proxies: Mapping[str, str] | None = None, cert: str | tuple[str, str] | None = None,
                 tool: str = '', timeout: float | tuple[float, float] | None = None):
        if not url:
            raise NoURL('Please provide the URL of your MISP instance.')
        if not key:
            raise NoKey('Please provide your authorization key.')

        self.root_url: str = url
        self.key: str = key
        self.ssl: bool | str = ssl
        self.proxies: Mapping[str, str] = proxies or {}
        self.cert: str | tuple[str, str] | None = cert
        self.tool: str = tool
        self.timeout: float | tuple[float, float] | None = timeout

        self.__session = requests.Session()  # use one session to keep connection between requests
        self.__session.verify = ssl
        self.__session.cert = cert
        self.__session.proxies.update(self.proxies)
        if brotli_supported():
            self.__session.headers['Accept-Encoding'] = ', '.join(('br', 'gzip', 'deflate'))
        user_agent = f'mispclient {__version__} - Python {".".join(str(x) for x in sys.version_info[:2])}'
        if self.tool:
            user_agent = f'{user_agent} - {self.tool}'
        self.__session.headers['User-Agent'] = user_agent

        if debug:
            logger.setLevel(logging.DEBUG)
            logger.info('To configure logging in your script, leave it to None and use the following: import logging; logging.getLogger(\'mispclient\').setLevel(logging.DEBUG)')
        if url.startswith('http://'):
            logger.warning('Using HTTP instead of HTTPS for MISP connection. The API key is sent in clear text.')

    @property
    def headers(self) -> dict[str, str]:
        return build_auth_header(self.key)

    def invoke(self, method: str, path: str, body: str | None = None) -> MISPResult:
        """Call any endpoint of the instance, path is relative to the URL of the instance"""
        return invoke_rest(self.headers, method, body, _url(self.root_url, path),
                           session=self.__session, timeout=self.timeout)

    def find_event(self, organization: str | int, event_name: str,
                   attribute_filter: str | None = None) -> MISPResult:
        return find_event(self.root_url, self.headers, organization, event_name, attribute_filter,
                          session=self.__session, timeout=self.timeout)

    def create_event(self, publisher_email: str | None, tag_ids: Iterable[int | str],
                     organization: str | int, event_name: str, publish: bool = False,
                     distribution: Distribution | int = Distribution.your_organisation_only,
                     attributes: Iterable[MISPAttribute | Mapping[str, Any]] = (),
                     reconcile_existing: bool = False, stop_on_error: bool = False) -> int | None:
        return create_event(self.root_url, self.headers, publisher_email, tag_ids, organization,
                            event_name, publish, distribution, attributes,
                            reconcile_existing=reconcile_existing, stop_on_error=stop_on_error,
                            session=self.__session, timeout=self.timeout)

    def add_event_tag(self, event_id: int | str, tag_id: int | str, local_only: bool = False) -> MISPResult:
        return add_event_tag(self.root_url, self.headers, event_id, tag_id, local_only,
                             session=self.__session, timeout=self.timeout)

    def add_event_attribute(self, event_id: int | str, attribute: MISPAttribute | Mapping[str, Any]) -> MISPResult:
        a = MISPAttribute.coerce(attribute)
        return add_event_attribute(self.root_url, self.headers, event_id, a.value, a.type, a.category,
                                   a.comment, session=self.__session, timeout=self.timeout)

    def search_tags(self, tag: str) -> MISPResult:
        return search_tags(self.root_url, self.headers, tag,
                           session=self.__session, timeout=self.timeout)

    def __repr__(self):
        return f'<{self.__class__.__name__}(url={self.root_url})>'
