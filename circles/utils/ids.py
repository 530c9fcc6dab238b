import uuid
from typing import Iterable, List, Union

from circles.utils.exceptions import ValidationError


def to_entity_id(value: Union[str, uuid.UUID], field: str = "id") -> uuid.UUID:
    """Convert external text into an entity identifier.

    Raises ValidationError when the text is not a well-formed identifier.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(f"Invalid {field}")


def to_entity_ids(values: Iterable[str]) -> List[uuid.UUID]:
    return [to_entity_id(value) for value in values]


def add_to_set(values: List[str], item: Union[str, uuid.UUID]) -> List[str]:
    """Return a copy of the id list with item appended if absent"""
    item = str(item)
    values = list(values or [])
    if item in values:
        return values
    return [*values, item]


def remove_from_set(values: List[str], item: Union[str, uuid.UUID]) -> List[str]:
    """Return a copy of the id list without item"""
    item = str(item)
    return [value for value in values or [] if value != item]
