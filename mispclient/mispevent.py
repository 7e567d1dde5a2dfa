from __future__ import annotations

import json
from enum import Enum
from typing import Any, Mapping


class Distribution(Enum):
    your_organisation_only = 0
    this_community_only = 1
    connected_communities = 2
    all_communities = 3
    sharing_group = 4
    inherit = 5


def misp_json_default(obj: MISPAttribute | Enum) -> dict[str, Any] | str | int:
    if isinstance(obj, MISPAttribute):
        return obj.jsonable()
    elif isinstance(obj, Enum):
        return obj.value
    raise TypeError(f'Object of type {obj.__class__.__name__} is not JSON serializable')


class MISPAttribute:
    """An attribute to add to an event: only the fields sent to ``attributes/add``.

    NOTE: nothing here talks to a MISP instance, see
          :func:`mispclient.api.add_event_attribute`.
    """

    _fields = ('value', 'type', 'category', 'comment')

    def __init__(self, value: str, type: str, category: str | None = None, comment: str = '') -> None:
        self.value = value
        self.type = type
        self.category = category
        self.comment = comment

    @classmethod
    def from_dict(cls, **kwargs: Any) -> MISPAttribute:
        if 'Attribute' in kwargs:
            kwargs = kwargs['Attribute']
        if kwargs.get('value') is None or not kwargs.get('type'):
            raise ValueError(f'An attribute needs at least a value and a type: {kwargs}')
        return cls(kwargs['value'], kwargs['type'], kwargs.get('category'), kwargs.get('comment') or '')

    @classmethod
    def coerce(cls, attribute: MISPAttribute | Mapping[str, Any]) -> MISPAttribute:
        if isinstance(attribute, MISPAttribute):
            return attribute
        return cls.from_dict(**attribute)

    def jsonable(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in self._fields if getattr(self, field) is not None}

    def to_json(self) -> str:
        return json.dumps(self, default=misp_json_default)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MISPAttribute):
            return NotImplemented
        return self.jsonable() == other.jsonable()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}(type={self.type}, value={self.value})>'
