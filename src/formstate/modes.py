"""Form-wide mode enumerations read by the field orchestrator."""
from enum import Enum


class EditMode(Enum):
    """Whether the form creates a new item or edits an existing one."""
    CREATE = "create"
    EDIT = "edit"


class DisplayMode(Enum):
    """How widgets render values: editable inputs or read-only text."""
    EDIT = "edit"
    VIEW = "view"
