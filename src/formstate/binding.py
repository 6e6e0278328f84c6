"""
Value binding between one field and its location in the item.

Resolves the stored value, maps it to the value a widget displays, and maps
widget edits back into a single store write.
"""
import copy
import logging
from typing import Any, Callable, Optional, Union

from formstate.item_store import ItemStore
from formstate.paths import Path

logger = logging.getLogger(__name__)

_MISSING = object()

# stored value -> display value
PathToInput = Callable[[Any], Any]
# (display value, prior stored value) -> stored value
InputToPath = Callable[[Any, Any], Any]
# (new stored value, item) -> None
ValueChangeCallback = Callable[[Any, Any], None]


class ValueBinding:
    """Binds one path of an ItemStore to a widget value.

    Args:
        store: Store holding the item
        path: Location of the value inside the item
        default_value: Used when nothing (or None) is stored at path
        path_value_to_input_value: Optional stored -> display transform
        input_value_to_path_value: Optional (display, prior stored) -> stored transform
        on_value_change: Optional callback invoked after each write with
                         (new stored value, item)
    """

    def __init__(
        self,
        store: ItemStore,
        path: Union[Path, str],
        default_value: Any = '',
        path_value_to_input_value: Optional[PathToInput] = None,
        input_value_to_path_value: Optional[InputToPath] = None,
        on_value_change: Optional[ValueChangeCallback] = None,
    ):
        self.store = store
        self.path = Path.coerce(path)
        self.default_value = default_value
        self.path_value_to_input_value = path_value_to_input_value
        self.input_value_to_path_value = input_value_to_path_value
        self.on_value_change = on_value_change

    def stored_value(self) -> Any:
        """Value in the item at path, or a fresh copy of the default."""
        value = self.store.get(self.path, _MISSING)
        if value is _MISSING:
            return copy.deepcopy(self.default_value)
        return value

    def display_value(self, stored_value: Any = None) -> Any:
        """Value handed to the widget."""
        if stored_value is None:
            stored_value = self.stored_value()
        if self.path_value_to_input_value is not None:
            return self.path_value_to_input_value(stored_value)
        return stored_value

    def set_value(self, new_value: Any) -> Any:
        """Write a widget value back into the item.

        Exactly one store write happens; listeners are notified once, after
        on_value_change has run (writes made by the callback are folded
        into the same notification).

        Args:
            new_value: Value coming from the widget (display form)

        Returns:
            The stored value that was written
        """
        if self.input_value_to_path_value is not None:
            input_value = new_value
            new_value = self.input_value_to_path_value(input_value, self.stored_value())
            logger.debug(f"Transformed input {input_value!r} -> {new_value!r} for {str(self.path)!r}")

        with self.store.atomic():
            self.store.set(self.path, new_value)
            if self.on_value_change is not None:
                self.on_value_change(new_value, self.store.item)
        return new_value
