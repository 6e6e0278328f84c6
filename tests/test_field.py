"""Tests for the field orchestrator: descriptors, render purity, commit order."""
import pytest

from formstate import (
    DisplayMode,
    EditMode,
    FieldConfig,
    FormSession,
    VALIDATED_ERROR,
    field_id,
    resolve_disabled,
)


def test_field_id_derived_from_path():
    """Path is lowercased and dots become hyphens."""
    assert field_id(FieldConfig(path="User.FirstName")) == "user-firstname"
    assert field_id(FieldConfig(path="user.tags.0")) == "user-tags-0"


def test_explicit_field_id_wins():
    """An explicit id is used as-is."""
    assert field_id(FieldConfig(path="user.name", id="nameInput")) == "nameInput"


def test_disabled_in_edit_mode_overrides_in_edit_mode_only():
    """The edit-mode override applies only when editing and set."""
    config = FieldConfig(path="code", disabled=False, disabled_in_edit_mode=True)
    assert resolve_disabled(config, EditMode.EDIT) is True
    assert resolve_disabled(config, EditMode.CREATE) is False
    plain = FieldConfig(path="code", disabled=True)
    assert resolve_disabled(plain, EditMode.EDIT) is True


def test_descriptor_contents():
    """A descriptor carries everything a widget renderer needs."""
    session = FormSession({"user": {"name": "Ada"}}, display_mode=DisplayMode.VIEW)
    field = session.mount("user.name", required=True)
    descriptor = field.descriptor

    assert descriptor.id == "user-name"
    assert descriptor.path == "user.name"
    assert descriptor.display_mode is DisplayMode.VIEW
    assert descriptor.value == "Ada"
    assert descriptor.error is None
    assert descriptor.validated is None
    assert descriptor.hidden is False
    assert descriptor.disabled is False
    assert callable(descriptor.set_value)


def test_default_value_used_when_missing():
    """Fields without a stored value show their default."""
    session = FormSession()
    field = session.mount("count", default_value=0)
    assert field.descriptor.value == 0
    assert session.item == {}


def test_render_is_pure_and_memoized():
    """Rendering twice neither touches aggregates nor recomputes."""
    calls = []

    def hidden(item):
        calls.append(1)
        return False

    session = FormSession({"name": "Ada"})
    field = session.mount("name", hidden=hidden)
    assert calls == [1]

    before = session.aggregates.as_dict()
    first = field.render()
    second = field.render()
    assert first is second
    assert calls == [1]
    assert session.aggregates.as_dict() == before


def test_render_recomputes_after_item_change():
    """A new store token invalidates the memoized render."""
    session = FormSession({"name": "Ada"})
    field = session.mount("name")
    first = field.render()
    session.store.set("name", "Grace")
    assert field.render() is not first
    assert field.descriptor.value == "Grace"


def test_commit_outside_commit_phase_raises():
    """Committing a render outside the session cycle is a programming error."""
    session = FormSession()
    field = session.mount("name", required=True)
    session.store.replace({})
    with pytest.raises(RuntimeError):
        field.commit(field.render())


def test_validation_uses_display_value():
    """Validation and has_value see the transformed value."""
    session = FormSession({"tags": ["a"]})
    field = session.mount(
        "tags",
        required=True,
        path_value_to_input_value=lambda tags: ",".join(tags or []),
        input_value_to_path_value=lambda text, prior: [t for t in text.split(",") if t],
    )
    assert field.descriptor.value == "a"
    assert session.has_value

    field.descriptor.set_value("")
    assert session.item["tags"] == []
    assert field.descriptor.error == session.required_message
    assert not session.has_value


def test_show_validation_toggles_validated_in_any_order():
    """validated follows show_validation and the error, whichever changes first."""
    session = FormSession()
    field = session.mount("name", required=True)

    session.show_validation = True
    assert field.descriptor.validated == VALIDATED_ERROR

    field.descriptor.set_value("Ada")
    assert field.descriptor.validated is None

    session.show_validation = False
    field.descriptor.set_value("")
    assert field.descriptor.validated is None
    assert field.descriptor.error == session.required_message

    session.show_validation = True
    assert field.descriptor.validated == VALIDATED_ERROR


def test_edit_mode_change_rerenders_disabled():
    """Switching edit mode re-resolves disabled."""
    session = FormSession(edit_mode=EditMode.CREATE)
    field = session.mount("code", disabled_in_edit_mode=True)
    assert field.descriptor.disabled is False
    session.edit_mode = EditMode.EDIT
    assert field.descriptor.disabled is True
