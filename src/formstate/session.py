"""
FormSession: the explicit context shared by every field of one form.

Replaces ambient providers with one object passed to every field: the item
store, the show-validation flag, edit/display modes, the required message
and the aggregates. The session also owns the update cycle:

    render every mounted field (pure)
        -> commit every field in mount order (aggregates open)
        -> coalesced validation recompute
        -> committed listeners

A cycle is scheduled by item changes, mount/unmount and flag changes.
Changes that arrive while a cycle runs (e.g. a committed listener calling
set_value) are folded into another pass of the same cycle.

Thread safety: Not thread-safe (all operations expected on one thread).
"""
from contextlib import contextmanager
import dataclasses
import logging
from typing import Any, Callable, Dict, Generator, List, Optional, Union

from formstate.aggregates import FormAggregates
from formstate.config import get_form_config
from formstate.field import Field, FieldConfig, FieldDescriptor
from formstate.item_store import ItemStore
from formstate.modes import DisplayMode, EditMode
from formstate.token_cache import CacheKey

logger = logging.getLogger(__name__)


class FormSession:
    """One form instance: item, flags, aggregates and mounted fields.

    Args:
        item: Root item to bind (a new empty dict when omitted)
        store: Existing ItemStore to share instead of item
        show_validation: Initial show-validation flag
        edit_mode: Initial EditMode
        display_mode: Initial DisplayMode
        required_message: Message for empty required fields
        max_passes: Passes per cycle before a feedback loop is assumed

    Omitted arguments come from get_form_config().
    """

    def __init__(
        self,
        item: Optional[Any] = None,
        *,
        store: Optional[ItemStore] = None,
        show_validation: Optional[bool] = None,
        edit_mode: Optional[EditMode] = None,
        display_mode: Optional[DisplayMode] = None,
        required_message: Optional[str] = None,
        max_passes: Optional[int] = None,
    ):
        if store is not None and item is not None:
            raise ValueError("Pass either item or store, not both")
        config = get_form_config()

        self.store = store if store is not None else ItemStore(item)
        self.aggregates = FormAggregates()

        self._show_validation = config.show_validation if show_validation is None else show_validation
        self._edit_mode = config.edit_mode if edit_mode is None else edit_mode
        self._display_mode = config.display_mode if display_mode is None else display_mode
        self.required_message = config.required_message if required_message is None else required_message
        self._max_passes = config.max_passes if max_passes is None else max_passes

        self._fields: List[Field] = []

        # === Cycle scheduling ===
        self._batch_depth = 0
        self._cycle_running = False
        self._cycle_pending = False
        self._validation_requested = False

        # === Callbacks ===
        self._on_mount_callbacks: List[Callable[[Field], None]] = []
        self._on_unmount_callbacks: List[Callable[[Field], None]] = []
        self._committed_callbacks: List[Callable[['FormSession'], None]] = []

        self.store.connect_listener(self._on_item_changed, critical=True)

    # ========== FLAGS ==========

    @property
    def item(self) -> Any:
        return self.store.item

    @property
    def show_validation(self) -> bool:
        return self._show_validation

    @show_validation.setter
    def show_validation(self, value: bool) -> None:
        value = bool(value)
        if value != self._show_validation:
            self._show_validation = value
            self.schedule()

    @property
    def edit_mode(self) -> EditMode:
        return self._edit_mode

    @edit_mode.setter
    def edit_mode(self, value: EditMode) -> None:
        if value != self._edit_mode:
            self._edit_mode = value
            self.schedule()

    @property
    def display_mode(self) -> DisplayMode:
        return self._display_mode

    @display_mode.setter
    def display_mode(self, value: DisplayMode) -> None:
        if value != self._display_mode:
            self._display_mode = value
            self.schedule()

    def render_token(self) -> CacheKey:
        """Everything a field render depends on besides its own config."""
        return CacheKey.from_args(
            self.store.token,
            self._show_validation,
            self._edit_mode,
            self._display_mode,
            self.required_message,
        )

    # ========== AGGREGATES ==========

    @property
    def has_inputs(self) -> bool:
        return self.aggregates.has_inputs

    @property
    def has_value(self) -> bool:
        return self.aggregates.has_value

    @property
    def has_validation_error(self) -> bool:
        return self.aggregates.has_validation_error

    def request_validation(self) -> None:
        """Ask for a validation recompute.

        Inside a commit phase the request is deferred until every field has
        committed, so the recompute never sees a half-committed form.
        """
        if self.aggregates.committing:
            self._validation_requested = True
        else:
            self.validate()

    def validate(self) -> bool:
        """Recompute has_validation_error from every field's last commit.

        Returns:
            The new has_validation_error value
        """
        with self.aggregates.commit_phase():
            self._run_validation()
        return self.has_validation_error

    def _run_validation(self) -> None:
        self._validation_requested = False
        self.aggregates.validation_errors.reconcile(
            f.key for f in self._fields if f.contributes_error()
        )

    # ========== FIELDS ==========

    @property
    def fields(self) -> List[Field]:
        return list(self._fields)

    def mount(self, config: Union[FieldConfig, str, None] = None, **kwargs) -> Field:
        """Mount a field and schedule an update cycle.

        Args:
            config: FieldConfig, or a dotted path (remaining options as kwargs)
            **kwargs: FieldConfig fields (override config's when both given)

        Returns:
            The mounted Field
        """
        if config is None:
            config = FieldConfig(**kwargs)
        elif isinstance(config, str):
            config = FieldConfig(path=config, **kwargs)
        elif kwargs:
            config = dataclasses.replace(config, **kwargs)

        field = Field(config, self)
        if any(f.id == field.id for f in self._fields):
            logger.warning(f"Mounting a second field with id {field.id!r}")
        self._fields.append(field)
        logger.debug(f"Mounted {field!r}")

        self._fire_callbacks(self._on_mount_callbacks, field, 'mount')
        self.schedule()
        return field

    def unmount(self, field: Field) -> None:
        """Unmount a field, retracting its contributions immediately."""
        if field not in self._fields:
            logger.debug(f"unmount() for unknown field {field!r}")
            return
        self._fields.remove(field)
        with self.aggregates.commit_phase():
            field.retract()
        logger.debug(f"Unmounted {field!r}")

        self._fire_callbacks(self._on_unmount_callbacks, field, 'unmount')
        self.schedule()

    def get_field(self, field_id: str) -> Optional[Field]:
        for f in self._fields:
            if f.id == field_id:
                return f
        return None

    def descriptor(self, field: Union[Field, str]) -> Optional[FieldDescriptor]:
        """Last committed descriptor of a field (by Field or id)."""
        if isinstance(field, str):
            field = self.get_field(field)
        return field.descriptor if field is not None else None

    def descriptors(self) -> List[FieldDescriptor]:
        """Committed descriptors of all mounted fields, in mount order."""
        return [f.descriptor for f in self._fields if f.descriptor is not None]

    def errors(self) -> Dict[str, str]:
        """Errors of visible fields, keyed by field id."""
        return {f.id: f.descriptor.error for f in self._fields if f.contributes_error()}

    def close(self) -> None:
        """Unmount every field and detach from the store."""
        with self.aggregates.commit_phase():
            for f in self._fields:
                f.retract()
        self._fields.clear()
        self.store.disconnect_listener(self._on_item_changed)

    # ========== UPDATE CYCLE ==========

    def _on_item_changed(self) -> None:
        self.schedule()

    def schedule(self) -> None:
        """Run an update cycle now, or after the current batch/cycle."""
        if self._batch_depth > 0 or self._cycle_running:
            self._cycle_pending = True
            return
        self.refresh()

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Defer update cycles (and item notifications) to the end of the block.

        Example:
            with session.batch():
                session.mount("user.first", required=True)
                session.mount("user.last", required=True)
            # one update cycle here
        """
        self._batch_depth += 1
        try:
            with self.store.atomic():
                yield
        finally:
            self._batch_depth -= 1
            # Writes made before an exception still reach descriptors
            if self._batch_depth == 0 and self._cycle_pending:
                self.refresh()

    def refresh(self) -> None:
        """Run a full update cycle.

        Raises:
            RuntimeError: If passes keep scheduling further passes beyond
                          max_passes (feedback loop between listeners and
                          set_value)
        """
        if self._cycle_running:
            self._cycle_pending = True
            return

        self._cycle_running = True
        try:
            passes = 0
            while True:
                self._cycle_pending = False
                passes += 1
                if passes > self._max_passes:
                    raise RuntimeError(
                        f"Update cycle did not settle after {self._max_passes} passes"
                    )
                self._run_pass()
                self._fire_committed()
                if not self._cycle_pending:
                    break
        finally:
            self._cycle_running = False
            self._cycle_pending = False
        logger.debug(f"Update cycle settled after {passes} pass(es): {self.aggregates.as_dict()}")

    def _run_pass(self) -> None:
        fields = list(self._fields)

        # Render phase: pure, no aggregate access
        rendered = [(f, f.render()) for f in fields]

        # Commit phase: ordered side effects
        with self.aggregates.commit_phase():
            for f, descriptor in rendered:
                f.commit(descriptor)
            if self._validation_requested:
                self._run_validation()

    # ========== CALLBACKS ==========

    def on_mount(self, callback: Callable[[Field], None]) -> None:
        """Subscribe to field mount events."""
        if callback not in self._on_mount_callbacks:
            self._on_mount_callbacks.append(callback)

    def off_mount(self, callback: Callable[[Field], None]) -> None:
        if callback in self._on_mount_callbacks:
            self._on_mount_callbacks.remove(callback)

    def on_unmount(self, callback: Callable[[Field], None]) -> None:
        """Subscribe to field unmount events."""
        if callback not in self._on_unmount_callbacks:
            self._on_unmount_callbacks.append(callback)

    def off_unmount(self, callback: Callable[[Field], None]) -> None:
        if callback in self._on_unmount_callbacks:
            self._on_unmount_callbacks.remove(callback)

    def connect_listener(self, callback: Callable[['FormSession'], None]) -> None:
        """Connect a listener called after every committed pass.

        Aggregates and descriptors are consistent when it runs.
        """
        if callback not in self._committed_callbacks:
            self._committed_callbacks.append(callback)

    def disconnect_listener(self, callback: Callable[['FormSession'], None]) -> None:
        if callback in self._committed_callbacks:
            self._committed_callbacks.remove(callback)

    def _fire_committed(self) -> None:
        self._fire_callbacks(self._committed_callbacks, self, 'committed')

    @staticmethod
    def _fire_callbacks(callbacks: List[Callable[[Any], None]], arg: Any, label: str) -> None:
        for callback in list(callbacks):
            try:
                callback(arg)
            except Exception as e:
                logger.warning(f"Error in {label} callback: {e}")
