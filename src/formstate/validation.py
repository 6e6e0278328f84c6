"""
Per-field validation.

Errors are always computed; the show-validation flag only decides whether
they are displayed. The required rule takes precedence over a custom
validator, so a custom validator never sees an empty required value.
"""
from typing import Any, Callable, Optional

from formstate.paths import is_empty

# (value, item) -> error message or None
Validator = Callable[[Any, Any], Optional[str]]

VALIDATED_ERROR = 'error'


def compute_error(
    value: Any,
    item: Any,
    required: bool,
    validation: Optional[Validator],
    required_message: str,
) -> Optional[str]:
    """Compute a field's error message.

    Args:
        value: Current field value
        item: The whole form item (for cross-field rules)
        required: Whether an empty value is an error
        validation: Optional custom validator
        required_message: Message used for empty required values

    Returns:
        Error message, or None when the value is valid
    """
    if required and is_empty(value):
        return required_message
    if validation is not None:
        # Validators commonly return "" for success
        return validation(value, item) or None
    return None


def resolve_validated(error: Optional[str], show_validation: bool) -> Optional[str]:
    """Displayed validation state: 'error' only when shown and an error exists."""
    if show_validation and error:
        return VALIDATED_ERROR
    return None
