from typing import Any

from sqlalchemy import inspect as sa_inspect


def primary_key_values(entity: Any) -> tuple:
    """
    Return the primary-key attribute values of a mapped instance, in mapper order.
    """
    mapper = sa_inspect(type(entity))
    return tuple(
        getattr(entity, mapper.get_property_by_column(col).key)
        for col in mapper.primary_key
    )


def is_key_set(entity: Any) -> bool:
    """
    True when every primary-key attribute of `entity` has a value.
    """
    return all(value is not None for value in primary_key_values(entity))


def is_missing_key(key: Any) -> bool:
    """
    True when a key argument cannot identify a row: None, or a composite
    (tuple) key with a None part.
    """
    if key is None:
        return True
    if isinstance(key, tuple):
        return any(part is None for part in key)
    return False


def is_blank_key(key: Any) -> bool:
    """
    True when the key is missing or its text form is empty.

    Used by the service layer before delegating, e.g. `""` or `None`.
    """
    return is_missing_key(key) or str(key) == ""


def version_attribute(entity: Any) -> str | None:
    """
    Name of the attribute configured as `version_id_col`, or None when the
    mapper does not use optimistic versioning.
    """
    mapper = sa_inspect(type(entity))
    version_col = mapper.version_id_col
    if version_col is None:
        return None
    return mapper.get_property_by_column(version_col).key


def pending_changes(entity: Any) -> dict[str, Any]:
    """
    Column attributes of a persistent `entity` that were modified since load,
    mapped to their new value. The version counter is left out, it is
    managed by the mapper.
    """
    state = sa_inspect(entity)
    mapper = state.mapper
    skip = version_attribute(entity)
    changes: dict[str, Any] = {}
    for prop in mapper.column_attrs:
        if prop.key == skip:
            continue
        history = state.attrs[prop.key].history
        if history.has_changes() and history.added:
            changes[prop.key] = history.added[0]
    return changes


def loaded_values(entity: Any) -> dict[str, Any]:
    """
    Column values currently held by `entity` (transient or detached), mapped
    by attribute name. Primary-key columns, the version counter and attributes
    that were never loaded are left out.
    """
    state = sa_inspect(entity)
    mapper = state.mapper
    skip = {version_attribute(entity)}
    skip.update(mapper.get_property_by_column(col).key for col in mapper.primary_key)
    return {
        prop.key: state.dict[prop.key]
        for prop in mapper.column_attrs
        if prop.key not in skip and prop.key in state.dict
    }


__all__ = [
    "primary_key_values",
    "is_key_set",
    "is_missing_key",
    "is_blank_key",
    "version_attribute",
    "pending_changes",
    "loaded_values",
]
