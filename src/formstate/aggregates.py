"""
Form-wide aggregates over mounted, visible fields.

Each aggregate is a membership set keyed by the contributing field's key;
its boolean value is "at least one member". Membership (rather than a
bare flag) is what lets a field retract its contribution when it hides or
unmounts without having to know what the other fields contributed.

Mutation is only legal inside FormAggregates.commit_phase(). The render
phase must stay free of side effects, so a register/retract made outside
a commit phase is a programming error and raises RuntimeError.
"""
from contextlib import contextmanager
import logging
from typing import Callable, Generator, Hashable, Iterable, List, Set

logger = logging.getLogger(__name__)


class Aggregate:
    """One named boolean aggregate backed by a membership set."""

    def __init__(self, name: str, owner: 'FormAggregates'):
        self.name = name
        self._owner = owner
        self._members: Set[Hashable] = set()
        self._on_changed_callbacks: List[Callable[[bool], None]] = []

    @property
    def value(self) -> bool:
        return bool(self._members)

    def __bool__(self) -> bool:
        return self.value

    def __contains__(self, key: Hashable) -> bool:
        return key in self._members

    @property
    def members(self) -> Set[Hashable]:
        return set(self._members)

    def register(self, key: Hashable) -> None:
        """Add key's contribution."""
        self._owner._check_committing(self.name)
        if key in self._members:
            return
        before = self.value
        self._members.add(key)
        logger.debug(f"{self.name}: registered {key!r}")
        self._fire_if_changed(before)

    def retract(self, key: Hashable) -> None:
        """Remove key's contribution (no-op if it had none)."""
        self._owner._check_committing(self.name)
        if key not in self._members:
            return
        before = self.value
        self._members.discard(key)
        logger.debug(f"{self.name}: retracted {key!r}")
        self._fire_if_changed(before)

    def reconcile(self, keys: Iterable[Hashable]) -> None:
        """Replace membership with exactly keys."""
        self._owner._check_committing(self.name)
        before = self.value
        self._members = set(keys)
        self._fire_if_changed(before)

    def on_changed(self, callback: Callable[[bool], None]) -> None:
        """Subscribe to boolean transitions (receives the new value)."""
        if callback not in self._on_changed_callbacks:
            self._on_changed_callbacks.append(callback)

    def off_changed(self, callback: Callable[[bool], None]) -> None:
        if callback in self._on_changed_callbacks:
            self._on_changed_callbacks.remove(callback)

    def _fire_if_changed(self, before: bool) -> None:
        after = self.value
        if after == before:
            return
        for callback in list(self._on_changed_callbacks):
            try:
                callback(after)
            except Exception as e:
                logger.warning(f"Error in {self.name} changed callback: {e}")

    def __repr__(self) -> str:
        return f"Aggregate({self.name!r}, value={self.value}, members={len(self._members)})"


class FormAggregates:
    """The three aggregates of one form session.

    Attributes:
        has_inputs: At least one visible field is mounted
        has_value: At least one visible field holds a non-empty value
        has_validation_error: At least one visible field has an error
    """

    def __init__(self):
        self._commit_depth = 0
        self.inputs = Aggregate('has_inputs', self)
        self.values = Aggregate('has_value', self)
        self.validation_errors = Aggregate('has_validation_error', self)

    @property
    def has_inputs(self) -> bool:
        return self.inputs.value

    @property
    def has_value(self) -> bool:
        return self.values.value

    @property
    def has_validation_error(self) -> bool:
        return self.validation_errors.value

    @property
    def committing(self) -> bool:
        return self._commit_depth > 0

    @contextmanager
    def commit_phase(self) -> Generator[None, None, None]:
        """Open a window in which aggregates may be mutated. Re-entrant."""
        self._commit_depth += 1
        try:
            yield
        finally:
            self._commit_depth -= 1

    def _check_committing(self, name: str) -> None:
        if self._commit_depth == 0:
            raise RuntimeError(f"{name} mutated outside the commit phase")

    def retract_all(self, key: Hashable) -> None:
        """Withdraw every contribution made by key."""
        self.inputs.retract(key)
        self.values.retract(key)
        self.validation_errors.retract(key)

    def as_dict(self):
        return {
            'has_inputs': self.has_inputs,
            'has_value': self.has_value,
            'has_validation_error': self.has_validation_error,
        }
