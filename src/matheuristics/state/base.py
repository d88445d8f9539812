"""
Model State Diffing

A `ModelState` identifies a node of a search tree relative to the root
formulation of a backend. It holds, for each change kind, a forward diff
(root -> node) and a backward diff (node -> root). Moving from one node to
another only replays the two diffs, so the cost of a transition is
proportional to the number of changes on both root paths instead of the size
of the model.

Composition rules:
- forward diffs: the child overwrites the parent (later changes dominate).
- backward diffs: the parent overwrites the child (undoing must reach back to
  the earliest recorded value of a touched entity).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import ClassVar, Dict, Iterable, Iterator, List, Mapping, Protocol, Union

logger = logging.getLogger(__name__)


# Forward application order across change kinds; backward uses the reverse.
KIND_ORDER = ("integrality", "domain", "fix", "cut_rhs")


class BackendProtocol(Protocol):
    """Primitives the trackers need from a mathematical program."""

    def add_constraint(self, kind, target, constraint_set): ...

    def delete(self, handle) -> None: ...

    def set_constraint_set(self, handle, new_set) -> None: ...

    def get_constraint_set(self, handle): ...

    def get_constraint_function(self, handle): ...

    def list_constraints(self, kind) -> list: ...

    def list_entities(self, kind) -> list: ...


class AtomicChange(ABC):
    """Smallest describable edit of a backend."""

    @property
    @abstractmethod
    def key(self):
        """Identifier of the entity the change touches inside its diff."""

    @abstractmethod
    def apply(self, backend, helper) -> None:
        ...


def overlay(base: Mapping, top: Mapping) -> Dict:
    """Return `base` overwritten by `top`, copying the larger operand."""
    if len(base) >= len(top):
        merged = dict(base)
        merged.update(top)
    else:
        merged = dict(top)
        for key, value in base.items():
            merged.setdefault(key, value)
    return merged


class Diff(ABC):
    """Per-kind mapping from entity identifier to its latest atomic change.

    Concrete diffs are frozen dataclasses whose mapping fields are exposed as
    read-only views; merging always builds a new diff.
    """

    kind: ClassVar[str]

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, MappingProxyType(dict(getattr(self, f.name))))

    def _maps(self) -> List[Mapping]:
        return [getattr(self, f.name) for f in fields(self)]

    def changes(self) -> Iterator[AtomicChange]:
        """Changes in application order (field by field)."""
        for mapping in self._maps():
            yield from mapping.values()

    def apply(self, backend, helper) -> None:
        for change in self.changes():
            change.apply(backend, helper)

    def __len__(self) -> int:
        return sum(len(mapping) for mapping in self._maps())

    def is_empty(self) -> bool:
        return len(self) == 0

    def merge_forward(self, local: Diff) -> Diff:
        """Merge a child's local forward diff into this (parent) diff."""
        self._check_kind(local)
        return type(self)(
            *(overlay(mine, theirs) for mine, theirs in zip(self._maps(), local._maps()))
        )

    def merge_backward(self, local: Diff) -> Diff:
        """Merge this (parent) backward diff into a child's local backward diff."""
        self._check_kind(local)
        return type(self)(
            *(overlay(theirs, mine) for mine, theirs in zip(self._maps(), local._maps()))
        )

    def _check_kind(self, other: Diff) -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot merge a {type(other).__name__} into a {type(self).__name__}"
            )

    @staticmethod
    def _keyed(changes: Iterable[AtomicChange]) -> Dict:
        return {change.key: change for change in changes}


def apply_change(backend, change: Union[AtomicChange, Diff], helper) -> None:
    """Apply one atomic change or every change of a diff to `backend`."""
    change.apply(backend, helper)


def merge_forward(parent: Diff, local: Diff) -> Diff:
    return parent.merge_forward(local)


def merge_backward(parent: Diff, local: Diff) -> Diff:
    return parent.merge_backward(local)


def _by_kind(diffs: Union[Diff, Iterable[Diff], Mapping[str, Diff]]) -> Dict[str, Diff]:
    if isinstance(diffs, Diff):
        diffs = [diffs]
    elif isinstance(diffs, Mapping):
        diffs = list(diffs.values())
    keyed: Dict[str, Diff] = {}
    for diff in diffs:
        if diff.kind in keyed:
            raise ValueError(f"More than one '{diff.kind}' diff given")
        keyed[diff.kind] = diff
    return keyed


def _ordered(diffs: Mapping[str, Diff]) -> List[Diff]:
    known = [diffs[kind] for kind in KIND_ORDER if kind in diffs]
    extra = [diffs[kind] for kind in sorted(diffs) if kind not in KIND_ORDER]
    return known + extra


@dataclass(frozen=True)
class ModelState:
    """A position in the search tree, relative to the root formulation."""

    forward: Mapping[str, Diff]
    backward: Mapping[str, Diff]

    def __post_init__(self):
        object.__setattr__(self, "forward", MappingProxyType(_by_kind(self.forward)))
        object.__setattr__(self, "backward", MappingProxyType(_by_kind(self.backward)))

    @property
    def kinds(self) -> frozenset:
        return frozenset(self.forward) | frozenset(self.backward)

    def forward_diffs(self) -> List[Diff]:
        return _ordered(self.forward)

    def backward_diffs(self) -> List[Diff]:
        return list(reversed(_ordered(self.backward)))

    def child(self, local_forward, local_backward) -> ModelState:
        """Derive the state of a child from the local diffs that lead to it."""
        forward = dict(self.forward)
        for kind, diff in _by_kind(local_forward).items():
            parent = forward.get(kind)
            forward[kind] = diff if parent is None else parent.merge_forward(diff)

        backward = dict(self.backward)
        for kind, diff in _by_kind(local_backward).items():
            parent = backward.get(kind)
            backward[kind] = diff if parent is None else parent.merge_backward(diff)

        return ModelState(forward, backward)

    def combine(self, other: ModelState) -> ModelState:
        """Join two states that track disjoint change kinds."""
        overlap = self.kinds & other.kinds
        if overlap:
            raise ValueError(f"States both track {sorted(overlap)}")
        return ModelState(
            {**self.forward, **other.forward},
            {**self.backward, **other.backward},
        )


def recover_state(backend, prev_state: ModelState, next_state: ModelState, helper) -> None:
    """Move `backend` from the formulation of `prev_state` to that of `next_state`.

    First every backward change of `prev_state` is applied, which restores the
    root value of every entity touched on its path; then every forward change
    of `next_state` is applied.
    """
    n_backward = 0
    for diff in prev_state.backward_diffs():
        diff.apply(backend, helper)
        n_backward += len(diff)

    n_forward = 0
    for diff in next_state.forward_diffs():
        diff.apply(backend, helper)
        n_forward += len(diff)

    logger.debug(f"Recovered state: {n_backward} backward, {n_forward} forward changes")


class StateTracker(ABC):
    """Binds one change kind to its diff type and builds root states and helpers."""

    diff_type: ClassVar[type]

    def root_state(self, backend) -> ModelState:
        return ModelState(self.diff_type(), self.diff_type())

    def new_state(self, forward: Diff, backward: Diff) -> ModelState:
        for diff in (forward, backward):
            if not isinstance(diff, self.diff_type):
                raise TypeError(
                    f"{type(self).__name__} tracks {self.diff_type.__name__}, "
                    f"got {type(diff).__name__}"
                )
        return ModelState(forward, backward)

    def transform_model(self, backend):
        """Introspect `backend` once and return the handle cache used by apply."""
        from .helper import DomainChangeTrackerHelper

        return DomainChangeTrackerHelper.from_backend(backend)
