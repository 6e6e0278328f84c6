"""
Reactive path-based data binding and validation aggregation for forms.

Fields bind to locations inside one shared, untyped item via dotted paths.
The framework keeps each field's value, visibility and validation state in
sync with the item, and maintains three form-wide aggregates over the
mounted, visible fields: has_inputs, has_value and has_validation_error.

Key Features:
- Total path reads, container-creating path writes
- Bidirectional value transforms per field
- Required/custom validation with display gated by a show-validation flag
- Hidden predicates that withdraw a field from every aggregate
- Two-phase update cycle: pure render, then ordered commit

Quick Start:
    >>> from formstate import FormSession
    >>>
    >>> session = FormSession({'subscribe': False})
    >>> subscribe = session.mount('subscribe')
    >>> email = session.mount('email', required=True,
    ...                       hidden=lambda item: not item.get('subscribe'))
    >>> session.has_validation_error
    False
    >>> _ = subscribe.descriptor.set_value(True)
    >>> session.has_validation_error
    True

Architecture:
    ItemStore -> paths -> ValueBinding -> {validation, aggregates} -> Field
    -> widget renderer. Widget edits flow back through
    FieldDescriptor.set_value -> ItemStore -> FormSession update cycle.

Modules:
    - paths: Path parsing and get/set over item trees
    - item_store: Owned item, change token and listeners
    - binding: Per-field value binding and transforms
    - validation: Required/custom validation rules
    - visibility: Hidden predicate evaluation
    - aggregates: Form-wide membership aggregates
    - field: Field orchestrator (render + commit)
    - session: Form session and update cycle
    - token_cache: Render-phase memoization
    - config: Process-wide defaults
"""

# Paths
from formstate.paths import (
    Path,
    PathError,
    get_path,
    set_path,
    is_empty,
)

# Store
from formstate.item_store import ItemStore

# Binding
from formstate.binding import ValueBinding

# Validation / visibility
from formstate.validation import (
    VALIDATED_ERROR,
    compute_error,
    resolve_validated,
)
from formstate.visibility import resolve_hidden

# Aggregates
from formstate.aggregates import Aggregate, FormAggregates

# Fields and sessions
from formstate.field import (
    Field,
    FieldConfig,
    FieldDescriptor,
    field_id,
    resolve_disabled,
)
from formstate.session import FormSession

# Modes
from formstate.modes import EditMode, DisplayMode

# Configuration
from formstate.config import (
    FormStateConfig,
    set_form_config,
    get_form_config,
    reset_form_config,
)

# Token cache
from formstate.token_cache import SingleValueTokenCache, CacheKey

__all__ = [
    # Paths
    'Path',
    'PathError',
    'get_path',
    'set_path',
    'is_empty',
    # Store
    'ItemStore',
    # Binding
    'ValueBinding',
    # Validation / visibility
    'VALIDATED_ERROR',
    'compute_error',
    'resolve_validated',
    'resolve_hidden',
    # Aggregates
    'Aggregate',
    'FormAggregates',
    # Fields and sessions
    'Field',
    'FieldConfig',
    'FieldDescriptor',
    'field_id',
    'resolve_disabled',
    'FormSession',
    # Modes
    'EditMode',
    'DisplayMode',
    # Configuration
    'FormStateConfig',
    'set_form_config',
    'get_form_config',
    'reset_form_config',
    # Token cache
    'SingleValueTokenCache',
    'CacheKey',
]

__version__ = '1.0.0'
__description__ = 'Reactive path-based data binding and validation aggregation for forms'
