"""
Field orchestrator.

A Field composes value binding, visibility, validation and disabled
resolution for one mounted control, and drives that control's
contributions to the form aggregates.

Each update cycle has two strictly ordered phases:

1. render(): pure. Derives a FieldDescriptor from the current item and the
   session flags. Memoized on the session's render token, so calling it
   again within a cycle is free and side-effect free.
2. commit(descriptor): the only place aggregates change. Runs five steps
   in a fixed order, each gated on its dependencies having changed since
   the previous commit (the first commit after mount always runs):

   1. (hidden)              visible -> register in has_inputs
   2. (hidden)              hidden  -> retract from has_inputs
   3. (hidden, error)       visible with error -> register in has_validation_error
   4. (value, hidden, error) request a form-wide validation recompute
   5. (value, hidden)       visible and non-empty -> register in has_value,
                            otherwise retract

Step 4 exists because a field's value or visibility can hide a whole group
of other fields (a checkbox guarding dependent inputs); only a recompute
over every field clears errors contributed by fields that just became
hidden.
"""
from dataclasses import dataclass
import copy
import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Optional, Tuple, TYPE_CHECKING

from formstate.binding import InputToPath, PathToInput, ValueBinding, ValueChangeCallback
from formstate.modes import DisplayMode, EditMode
from formstate.paths import PATH_SEPARATOR, is_empty
from formstate.token_cache import SingleValueTokenCache
from formstate.validation import Validator, compute_error, resolve_validated
from formstate.visibility import HiddenFn, resolve_hidden

if TYPE_CHECKING:
    from formstate.session import FormSession

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(frozen=True)
class FieldConfig:
    """Declarative configuration of one field, supplied by the widget layer.

    Attributes:
        path: Dot-separated location of the value in the item
        id: Explicit widget id (derived from path when omitted)
        hidden: Predicate over the item; hidden fields never contribute
                to aggregates
        validation: Custom validator (value, item) -> message or None
        required: Empty values produce the session's required message
        disabled: Base disabled state
        disabled_in_edit_mode: Replaces disabled while editing an existing item
        default_value: Value used when nothing is stored at path
        input_value_to_path_value: (display, prior stored) -> stored
        path_value_to_input_value: stored -> display
        on_value_change: Called with (stored value, item) after each write
    """
    path: str
    id: Optional[str] = None
    hidden: Optional[HiddenFn] = None
    validation: Optional[Validator] = None
    required: bool = False
    disabled: bool = False
    disabled_in_edit_mode: bool = False
    default_value: Any = ''
    input_value_to_path_value: Optional[InputToPath] = None
    path_value_to_input_value: Optional[PathToInput] = None
    on_value_change: Optional[ValueChangeCallback] = None


@dataclass(frozen=True)
class FieldDescriptor:
    """Everything a widget renderer needs for one render of one field."""
    id: str
    path: str
    display_mode: DisplayMode
    value: Any
    set_value: Callable[[Any], Any]
    validated: Optional[str]
    error: Optional[str]
    hidden: bool
    disabled: bool


def field_id(config: FieldConfig) -> str:
    """Explicit id, else the path lowercased with dots replaced by hyphens."""
    if config.id:
        return config.id
    return '-'.join(config.path.lower().split(PATH_SEPARATOR))


def resolve_disabled(config: FieldConfig, edit_mode: EditMode) -> bool:
    disabled = config.disabled
    if edit_mode == EditMode.EDIT and config.disabled_in_edit_mode:
        disabled = config.disabled_in_edit_mode
    return bool(disabled)


class Field:
    """One mounted field of a FormSession.

    Created by FormSession.mount(); never construct directly.
    """

    _key_counter = itertools.count(1)

    def __init__(self, config: FieldConfig, session: 'FormSession'):
        self.config = config
        self.id = field_id(config)
        # Aggregate membership key; unique even when two fields share an id
        self.key: Hashable = next(Field._key_counter)
        self.binding = ValueBinding(
            session.store,
            config.path,
            default_value=config.default_value,
            path_value_to_input_value=config.path_value_to_input_value,
            input_value_to_path_value=config.input_value_to_path_value,
            on_value_change=config.on_value_change,
        )
        self._session = session
        self._render_cache: SingleValueTokenCache[FieldDescriptor] = SingleValueTokenCache(session.render_token)
        self._committed: Optional[FieldDescriptor] = None
        self._effect_deps: Dict[str, Tuple[Any, ...]] = {}
        self.mounted = True

    @property
    def descriptor(self) -> Optional[FieldDescriptor]:
        """Descriptor from the last commit (None before the first commit)."""
        return self._committed

    # ========== RENDER PHASE ==========

    def render(self) -> FieldDescriptor:
        """Derive this field's descriptor. Pure; memoized per render token."""
        return self._render_cache.get_or_compute(self._compute_descriptor)

    def _compute_descriptor(self) -> FieldDescriptor:
        session = self._session
        config = self.config
        item = session.store.item

        value = self.binding.display_value()
        hidden = resolve_hidden(config.hidden, item)
        error = compute_error(value, item, config.required, config.validation, session.required_message)

        return FieldDescriptor(
            id=self.id,
            path=config.path,
            display_mode=session.display_mode,
            value=value,
            set_value=self.binding.set_value,
            validated=resolve_validated(error, session.show_validation),
            error=error,
            hidden=hidden,
            disabled=resolve_disabled(config, session.edit_mode),
        )

    # ========== COMMIT PHASE ==========

    def _deps_changed(self, effect: str, deps: Tuple[Any, ...]) -> bool:
        """Record deps for effect; True on first run or when they differ.

        Deps are stored as deep copies: values may be containers of the item
        that later writes mutate in place.
        """
        previous = self._effect_deps.get(effect, _UNSET)
        if previous is not _UNSET and previous == deps:
            return False
        self._effect_deps[effect] = copy.deepcopy(deps)
        return True

    def commit(self, descriptor: FieldDescriptor) -> None:
        """Apply this render's contributions to the form aggregates.

        Must run inside FormAggregates.commit_phase().
        """
        aggregates = self._session.aggregates
        if not aggregates.committing:
            raise RuntimeError(f"Field {self.id!r} committed outside the commit phase")
        value, hidden, error = descriptor.value, descriptor.hidden, descriptor.error

        if self._deps_changed('register_input', (hidden,)):
            if not hidden:
                aggregates.inputs.register(self.key)

        if self._deps_changed('update_inputs', (hidden,)):
            if hidden:
                aggregates.inputs.retract(self.key)

        if self._deps_changed('register_error', (hidden, error)):
            if not hidden and error:
                aggregates.validation_errors.register(self.key)

        if self._deps_changed('validate', (value, hidden, error)):
            self._session.request_validation()

        if self._deps_changed('register_value', (value, hidden)):
            if not hidden and not is_empty(value):
                aggregates.values.register(self.key)
            else:
                aggregates.values.retract(self.key)

        self._committed = descriptor

    def contributes_error(self) -> bool:
        """True if the last committed render is visible and has an error."""
        committed = self._committed
        return committed is not None and not committed.hidden and bool(committed.error)

    def retract(self) -> None:
        """Withdraw every contribution (unmount). Must run in a commit phase."""
        self._session.aggregates.retract_all(self.key)
        self._committed = None
        self._effect_deps.clear()
        self._render_cache.invalidate()
        self.mounted = False
        logger.debug(f"Field {self.id!r} retracted")

    def __repr__(self) -> str:
        return f"Field(id={self.id!r}, path={self.config.path!r}, key={self.key})"
