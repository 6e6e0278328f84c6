"""Hidden predicate evaluation."""
from typing import Any, Callable, Optional

# item -> True when the field should be hidden
HiddenFn = Callable[[Any], bool]


def resolve_hidden(hidden: Optional[HiddenFn], item: Any) -> bool:
    """Evaluate a field's hidden predicate against the current item.

    Evaluated on every render, since sibling fields may have changed the
    item since the previous one.
    """
    if hidden is None:
        return False
    return bool(hidden(item))
