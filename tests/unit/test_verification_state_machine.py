"""
Transition table of the verification workflow.
"""

import itertools

import pytest

from core_config.exceptions import WorkflowValidationError
from verification.models import VerificationSubmission as Submission
from verification.state_machine import TRANSITIONS, can_transition, validate_transition

ALL_STATUSES = [status for status, _ in Submission.STATUS_CHOICES]

LEGAL = {
    ('pending_marketer_forms', 'pending_admin_review'),
    ('pending_marketer_forms', 'cancelled'),
    ('pending_admin_review', 'pending_superadmin_review'),
    ('pending_admin_review', 'rejected'),
    ('pending_admin_review', 'cancelled'),
    ('pending_superadmin_review', 'pending_masteradmin_approval'),
    ('pending_superadmin_review', 'rejected'),
    ('pending_superadmin_review', 'cancelled'),
    ('pending_masteradmin_approval', 'approved'),
    ('pending_masteradmin_approval', 'rejected'),
    ('pending_masteradmin_approval', 'cancelled'),
    ('approved', 'cancelled'),
    ('rejected', 'pending_marketer_forms'),
    ('cancelled', 'pending_marketer_forms'),
}


def test_every_status_has_an_entry():
    assert set(TRANSITIONS) == set(ALL_STATUSES)


@pytest.mark.parametrize('current,new', sorted(itertools.product(ALL_STATUSES, repeat=2)))
def test_transition_legality_matches_table(current, new):
    assert can_transition(current, new) == ((current, new) in LEGAL)


def test_illegal_transition_names_current_status():
    with pytest.raises(WorkflowValidationError) as excinfo:
        validate_transition('approved', 'pending_admin_review')
    assert "'approved'" in str(excinfo.value.detail)


def test_no_status_transitions_to_itself():
    for status in ALL_STATUSES:
        assert not can_transition(status, status)


def test_unknown_status_has_no_transitions():
    assert not can_transition('archived', 'pending_marketer_forms')
