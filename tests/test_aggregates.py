"""Tests for membership aggregates and the commit-phase guard."""
import pytest

from formstate import FormAggregates


def test_aggregates_start_false():
    """No members, no aggregate."""
    aggregates = FormAggregates()
    assert aggregates.as_dict() == {
        'has_inputs': False,
        'has_value': False,
        'has_validation_error': False,
    }


def test_register_and_retract():
    """An aggregate is true while any member remains."""
    aggregates = FormAggregates()
    with aggregates.commit_phase():
        aggregates.values.register(1)
        aggregates.values.register(2)
        aggregates.values.retract(1)
        assert aggregates.has_value
        aggregates.values.retract(2)
    assert not aggregates.has_value


def test_retract_unknown_key_is_noop():
    """Retracting without a contribution changes nothing."""
    aggregates = FormAggregates()
    with aggregates.commit_phase():
        aggregates.inputs.retract(99)
    assert not aggregates.has_inputs


def test_mutation_outside_commit_phase_raises():
    """Aggregates cannot change during the render phase."""
    aggregates = FormAggregates()
    with pytest.raises(RuntimeError):
        aggregates.inputs.register(1)
    with pytest.raises(RuntimeError):
        aggregates.validation_errors.reconcile([1])


def test_commit_phase_is_reentrant():
    """Nested commit phases keep the window open until the outermost exits."""
    aggregates = FormAggregates()
    with aggregates.commit_phase():
        with aggregates.commit_phase():
            aggregates.inputs.register(1)
        aggregates.inputs.register(2)
        assert aggregates.committing
    assert not aggregates.committing
    assert aggregates.inputs.members == {1, 2}


def test_reconcile_replaces_membership():
    """Reconcile sets exactly the given members."""
    aggregates = FormAggregates()
    with aggregates.commit_phase():
        aggregates.validation_errors.register(1)
        aggregates.validation_errors.reconcile([2, 3])
    assert 1 not in aggregates.validation_errors
    assert aggregates.validation_errors.members == {2, 3}


def test_retract_all():
    """A key can be withdrawn from every aggregate at once."""
    aggregates = FormAggregates()
    with aggregates.commit_phase():
        aggregates.inputs.register('a')
        aggregates.values.register('a')
        aggregates.validation_errors.register('a')
        aggregates.retract_all('a')
    assert not any(aggregates.as_dict().values())


def test_changed_callbacks_fire_on_transitions_only():
    """Callbacks receive the new boolean only when it flips."""
    aggregates = FormAggregates()
    seen = []
    aggregates.values.on_changed(seen.append)
    with aggregates.commit_phase():
        aggregates.values.register(1)
        aggregates.values.register(2)
        aggregates.values.retract(1)
        aggregates.values.retract(2)
    assert seen == [True, False]

    aggregates.values.off_changed(seen.append)
    with aggregates.commit_phase():
        aggregates.values.register(1)
    assert seen == [True, False]


def test_failing_changed_callback_is_logged():
    """Callback failures do not interrupt aggregate updates."""
    aggregates = FormAggregates()

    def broken(value):
        raise RuntimeError("boom")

    aggregates.inputs.on_changed(broken)
    with aggregates.commit_phase():
        aggregates.inputs.register(1)
    assert aggregates.has_inputs
