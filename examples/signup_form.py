"""
Signup form walkthrough.

A newsletter checkbox guards two dependent fields. The script drives the
form the way a widget layer would (through FieldDescriptor.set_value) and
prints the form-wide aggregates after each edit, the way a submit button
would read them.
"""

import logging
from typing import Any, Dict, Optional

from formstate import (
    EditMode,
    FieldConfig,
    FormSession,
    FormStateConfig,
    set_form_config,
)


def validate_email(value: Any, item: Dict[str, Any]) -> Optional[str]:
    if '@' not in value:
        return "Enter a valid email address"
    return None


def newsletter_off(item: Dict[str, Any]) -> bool:
    return not item.get('newsletter', {}).get('subscribe')


# ============================================================================
# Field configuration (what a widget layer would declare)
# ============================================================================

SIGNUP_FIELDS = [
    FieldConfig(path='account.username', required=True, disabled_in_edit_mode=True),
    FieldConfig(path='account.email', required=True, validation=validate_email),
    FieldConfig(
        path='account.tags',
        default_value=[],
        path_value_to_input_value=lambda tags: ', '.join(tags),
        input_value_to_path_value=lambda text, prior: [t.strip() for t in text.split(',') if t.strip()],
    ),
    FieldConfig(path='newsletter.subscribe', default_value=False),
    FieldConfig(path='newsletter.frequency', required=True, hidden=newsletter_off),
    FieldConfig(path='newsletter.topics', required=True, default_value=[], hidden=newsletter_off),
]


def build_session(item: Optional[Dict[str, Any]] = None) -> FormSession:
    session = FormSession(item)
    with session.batch():
        for config in SIGNUP_FIELDS:
            session.mount(config)
    return session


def report(session: FormSession, label: str) -> Dict[str, Any]:
    state = {
        'label': label,
        **session.aggregates.as_dict(),
        'errors': session.errors(),
    }
    print(f"{label}: {state}")
    return state


def main() -> list:
    set_form_config(FormStateConfig(required_message="This field is required"))
    session = build_session()
    history = [report(session, "empty form")]

    descriptors = {d.path: d for d in session.descriptors()}
    descriptors['account.username'].set_value('ada')
    descriptors['account.email'].set_value('ada.example.com')
    descriptors['account.tags'].set_value('math, engines')
    history.append(report(session, "account filled"))

    session.descriptor('newsletter-subscribe').set_value(True)
    history.append(report(session, "newsletter on"))

    session.descriptor('newsletter-subscribe').set_value(False)
    session.descriptor('account-email').set_value('ada@example.com')
    session.show_validation = True
    history.append(report(session, "newsletter off, email fixed"))

    session.edit_mode = EditMode.EDIT
    print(f"username disabled while editing: {session.descriptor('account-username').disabled}")
    print(f"item: {session.item}")
    return history


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
