"""Path-prefix hierarchy helpers.

Pullnote addresses notes by slash-delimited paths, so every tree
relationship can be recovered from a flat listing:

- ``/a/b`` is a *direct child* of ``/a`` because it starts with ``/a/``
  and the remainder (``b``) has no further ``/``.
- ``/a/b/c`` is a *descendant* of ``/a`` but not a child.
- Siblings share the same immediate parent prefix.

These helpers are **pure** (no network or cache access). The client
feeds them the cached ``get_all`` listing.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from ..models import Listing, NoteSummary

ROOT = "/"
DEFAULT_SORT_KEY = "modified"
DEFAULT_SORT_DIRECTION = -1

_MISSING = object()


def normalize_path(path: Optional[str]) -> str:
    """Return ``path`` with exactly one leading slash and no trailing slash.

    ``""``, ``None`` and ``"/"`` all normalize to the root ``"/"``.
    """
    if not path:
        return ROOT
    stripped = path.strip().strip("/")
    return ROOT + stripped if stripped else ROOT


def scope_prefix(path: Optional[str]) -> str:
    """Normalize a scope path so it ends with ``/`` (``/a`` -> ``/a/``)."""
    norm = normalize_path(path)
    return norm if norm == ROOT else norm + "/"


def is_descendant(path: Optional[str], scope: Optional[str]) -> bool:
    """True if ``path`` lies anywhere beneath ``scope`` (not ``scope`` itself)."""
    norm = normalize_path(path)
    prefix = scope_prefix(scope)
    return norm != ROOT and norm.startswith(prefix) and len(norm) > len(prefix)


def is_direct_child(path: Optional[str], scope: Optional[str]) -> bool:
    """True if ``path`` is exactly one level beneath ``scope``."""
    if not is_descendant(path, scope):
        return False
    remainder = normalize_path(path)[len(scope_prefix(scope)):]
    return "/" not in remainder


def parent_path(path: Optional[str]) -> Optional[str]:
    """``/blog/cats/tabby`` -> ``/blog/cats``; the root has no parent."""
    norm = normalize_path(path)
    if norm == ROOT:
        return None
    head, _, _ = norm.rpartition("/")
    return head or ROOT


def ancestor_paths(path: Optional[str]) -> List[str]:
    """Ancestors from the top level down to the immediate parent, root excluded."""
    ancestors: List[str] = []
    current = parent_path(path)
    while current and current != ROOT:
        ancestors.append(current)
        current = parent_path(current)
    ancestors.reverse()
    return ancestors


def _lookup(note: NoteSummary, key: str) -> Any:
    """Resolve a (possibly dotted) sort key such as ``title`` or ``data.city``."""
    value: Any = note.model_dump(by_alias=True)
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return _MISSING if value is None else value


def _sortable(value: Any) -> tuple:
    # Numbers before strings so mixed columns never raise TypeError
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))


def sort_notes(
    notes: Iterable[NoteSummary],
    sort: str = "",
    sort_direction: int = 0,
) -> List[NoteSummary]:
    """Stable sort; entries missing the key go last in either direction.

    Defaults to ``modified`` descending when ``sort``/``sort_direction``
    are not given.
    """
    key = sort or DEFAULT_SORT_KEY
    descending = (sort_direction or DEFAULT_SORT_DIRECTION) < 0

    present: List[tuple[Any, NoteSummary]] = []
    missing: List[NoteSummary] = []
    for note in notes:
        value = _lookup(note, key)
        if value is _MISSING:
            missing.append(note)
        else:
            present.append((_sortable(value), note))

    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [note for _, note in present] + missing


def find_note(notes: Iterable[NoteSummary], path: Optional[str]) -> Optional[NoteSummary]:
    target = normalize_path(path)
    for note in notes:
        if normalize_path(note.path) == target:
            return note
    return None


def direct_children(notes: Iterable[NoteSummary], path: Optional[str]) -> List[NoteSummary]:
    return [n for n in notes if is_direct_child(n.path, path)]


def descendants(notes: Iterable[NoteSummary], path: Optional[str]) -> List[NoteSummary]:
    return [n for n in notes if is_descendant(n.path, path)]


def siblings(notes: Sequence[NoteSummary], path: Optional[str]) -> List[NoteSummary]:
    """Notes sharing ``path``'s immediate parent, ``path`` itself included."""
    parent = parent_path(path)
    if parent is None:
        return []
    return direct_children(notes, parent)


def derive_listing(
    notes: Sequence[NoteSummary],
    path: Optional[str],
    sort: str = "",
    sort_direction: int = 0,
) -> Listing:
    """Build the same relationship view the list endpoint returns, client-side.

    ``index`` is the note's own ``index`` when set, otherwise its position
    among its (sorted) siblings.
    """
    norm = normalize_path(path)
    parent_key = parent_path(norm)
    parent = find_note(notes, parent_key) if parent_key else None

    breadcrumbs = [crumb for crumb in (find_note(notes, p) for p in ancestor_paths(norm)) if crumb]
    kids = sort_notes(direct_children(notes, norm), sort, sort_direction)
    sibs = sort_notes(siblings(notes, norm), sort, sort_direction)

    index = 0
    me = find_note(notes, norm)
    if me is not None and me.index is not None:
        index = me.index
    else:
        for pos, sib in enumerate(sibs):
            if normalize_path(sib.path) == norm:
                index = pos
                break

    return Listing(parent=parent, parents=breadcrumbs, children=kids, siblings=sibs, index=index)
