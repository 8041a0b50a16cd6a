"""Identity differ for child collections of an aggregate.

Given the children currently persisted for an aggregate and the children a
caller sent, classify every element exactly once:

- surrogate identity (``diff_by_id``): incoming ids ``<= 0`` or absent are new,
  positive ids match existing rows, existing rows nobody matched are removed;
- natural identity (``diff_by_natural_key``): incoming keys match existing rows,
  unknown keys are new, existing rows nobody matched stay untouched.

Field updates for matched pairs go through ``assign_changed`` so that only
differing values are written.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Mapping

log = getLogger(__name__)


@dataclass(slots=True)
class ChildDiff[TExisting, TIncoming]:
    """Disjoint classification of an existing and an incoming child collection."""

    to_remove: list[TExisting] = field(default_factory=list)
    to_update: list[tuple[TExisting, TIncoming]] = field(default_factory=list)
    to_insert: list[TIncoming] = field(default_factory=list)
    # natural-key reconciliation only
    untouched: list[TExisting] = field(default_factory=list)
    skipped: list[TIncoming] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_remove or self.to_update or self.to_insert)


def diff_by_id[TExisting, TIncoming](
    existing: Iterable[TExisting],
    incoming: Iterable[TIncoming],
    *,
    existing_id: Callable[[TExisting], int | None],
    incoming_id: Callable[[TIncoming], int | None],
    kind: str = "child",
    warn_unknown: bool = True,
) -> ChildDiff[TExisting, TIncoming]:
    """Classify children by surrogate id.

    A positive incoming id that matches nothing is inserted as new; with
    ``warn_unknown`` that is logged as a client inconsistency. When several
    existing rows share an id (possible for association keys) each incoming
    element consumes at most one of them, and an incoming id repeated after all
    its matches are used up becomes an insert.
    """

    existing_list = list(existing)
    pending: defaultdict[int, deque[TExisting]] = defaultdict(deque)
    for element in existing_list:
        key = existing_id(element)
        if key is None:
            raise ValueError(f"Existing {kind} has no id and cannot be reconciled")
        pending[key].append(element)
    known = frozenset(pending)

    diff: ChildDiff[TExisting, TIncoming] = ChildDiff()
    for item in incoming:
        key = incoming_id(item)
        if key is None or key <= 0:
            diff.to_insert.append(item)
            continue
        candidates = pending.get(key)
        if candidates:
            diff.to_update.append((candidates.popleft(), item))
            continue
        if key in known:
            log.debug(f"Repeated {kind} id {key} in request; inserting another row")
        elif warn_unknown:
            log.warning(f"Incoming {kind} references unknown id {key}; inserting it as new")
        diff.to_insert.append(item)

    unmatched = {id(element) for queue in pending.values() for element in queue}
    diff.to_remove = [element for element in existing_list if id(element) in unmatched]
    return diff


def diff_by_natural_key[TExisting, TIncoming, TKey: Hashable](
    existing: Iterable[TExisting],
    incoming: Iterable[TIncoming],
    *,
    existing_key: Callable[[TExisting], TKey],
    incoming_key: Callable[[TIncoming], TKey],
    kind: str = "record",
) -> ChildDiff[TExisting, TIncoming]:
    """Classify records by a business key; existing rows are never removed.

    The first incoming record for a key wins, later ones land in ``skipped``.
    """

    by_key: dict[TKey, TExisting] = {}
    existing_list = list(existing)
    for element in existing_list:
        by_key.setdefault(existing_key(element), element)

    diff: ChildDiff[TExisting, TIncoming] = ChildDiff()
    seen: set[TKey] = set()
    matched: set[int] = set()
    for item in incoming:
        key = incoming_key(item)
        if key in seen:
            log.warning(f"Duplicate {kind} key {key!r} in incoming data; keeping the first one")
            diff.skipped.append(item)
            continue
        seen.add(key)
        current = by_key.get(key)
        if current is None:
            diff.to_insert.append(item)
        else:
            matched.add(id(current))
            diff.to_update.append((current, item))

    diff.untouched = [element for element in existing_list if id(element) not in matched]
    return diff


def assign_changed(target: object, values: Mapping[str, object]) -> tuple[str, ...]:
    """Write only the attributes whose value differs; return the names written."""

    changed: list[str] = []
    for name, value in values.items():
        if getattr(target, name) != value:
            setattr(target, name, value)
            changed.append(name)
    return tuple(changed)
