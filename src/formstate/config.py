"""
Process-wide defaults for form sessions.

Sessions receive their collaborators explicitly; this module only supplies
the values used when a session is constructed without them. Storage is a
module-level slot, set once at application startup (or per test).
"""
from dataclasses import dataclass
from typing import Optional

from formstate.modes import DisplayMode, EditMode

DEFAULT_REQUIRED_MESSAGE = "Required"


@dataclass
class FormStateConfig:
    """Defaults applied by FormSession when an argument is omitted.

    Attributes:
        required_message: Error shown for empty required fields
        edit_mode: Initial edit mode
        display_mode: Initial display mode
        show_validation: Initial show-validation flag
        max_passes: Update-cycle passes allowed before the session assumes
                    a feedback loop between value callbacks and renders
    """
    required_message: str = DEFAULT_REQUIRED_MESSAGE
    edit_mode: EditMode = EditMode.CREATE
    display_mode: DisplayMode = DisplayMode.EDIT
    show_validation: bool = False
    max_passes: int = 10


_form_config: Optional[FormStateConfig] = None


def set_form_config(config: FormStateConfig) -> None:
    """Install process-wide defaults."""
    global _form_config
    _form_config = config


def get_form_config() -> FormStateConfig:
    """Get the current defaults (a fresh default instance if none installed)."""
    if _form_config is None:
        return FormStateConfig()
    return _form_config


def reset_form_config() -> None:
    """Drop installed defaults."""
    global _form_config
    _form_config = None
