from typing import Iterable, Union
import uuid

from sqlalchemy import String, cast, false, or_


def json_list_contains(column, value: Union[str, uuid.UUID]):
    """Membership test on a JSON array of id strings.

    Ids are fixed-width UUID strings, so a substring match on the serialized
    array cannot hit a different id.
    """
    return cast(column, String).contains(f'"{value}"')


def json_list_intersects(column, values: Iterable[Union[str, uuid.UUID]]):
    conditions = [json_list_contains(column, value) for value in values]
    if not conditions:
        return false()
    return or_(*conditions)


def locked(stmt):
    """Row-lock the selected rows and refresh instances already in the session"""
    return stmt.with_for_update().execution_options(populate_existing=True)
