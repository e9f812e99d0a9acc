"""
Resolution of caller-supplied name filters into dictionary id sets.

A filter request is either unset (``None``, an empty string or an empty
collection, meaning "everything"), a single name, or a collection of names.
"""

from typing import Iterable, List, Mapping, Optional, Union

from relts.storage.interfaces import NotFoundError
from relts.types import Entry, EntryKind

NameFilter = Union[None, str, Iterable[str]]


def normalize_request(requested: NameFilter) -> Optional[List[str]]:
    """
    Turn a filter request into a list of names, or None when unset.

    >>> normalize_request("here")
    ['here']
    >>> normalize_request([]) is None
    True
    """
    if requested is None:
        return None
    if isinstance(requested, str):
        return [requested] if requested else None

    names = list(requested)
    return names or None


def resolve_set(
    requested: NameFilter,
    entries: Mapping[str, Entry],
    kind: EntryKind,
    fail_silently: bool = True,
) -> List[int]:
    """
    Resolve a filter request against a dictionary snapshot.

    Args:
        requested: Unset, a single name or a collection of names
        entries: Name -> entry mapping of the dictionary
        kind: Dimension of the dictionary (used in errors)
        fail_silently: Skip unknown names instead of raising

    Returns:
        Ids of the requested entries (every entry when unset), without
        duplicates, in request order. May be empty.

    Raises:
        NotFoundError: On the first unknown name when not failing silently
    """
    names = normalize_request(requested)
    if names is None:
        return [entry.id for entry in entries.values()]

    ids: List[int] = []
    for name in names:
        entry = entries.get(name)
        if entry is None:
            if not fail_silently:
                raise NotFoundError(kind, name)
            continue
        if entry.id not in ids:
            ids.append(entry.id)

    return ids
