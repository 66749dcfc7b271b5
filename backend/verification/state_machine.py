"""
Legal transitions of a verification submission.
"""

from core_config.exceptions import WorkflowValidationError
from .models import VerificationSubmission as Submission

TRANSITIONS = {
    Submission.STATUS_PENDING_MARKETER_FORMS: {
        Submission.STATUS_PENDING_ADMIN_REVIEW,
        Submission.STATUS_CANCELLED,
    },
    Submission.STATUS_PENDING_ADMIN_REVIEW: {
        Submission.STATUS_PENDING_SUPERADMIN_REVIEW,
        Submission.STATUS_REJECTED,
        Submission.STATUS_CANCELLED,
    },
    Submission.STATUS_PENDING_SUPERADMIN_REVIEW: {
        Submission.STATUS_PENDING_MASTERADMIN_APPROVAL,
        Submission.STATUS_REJECTED,
        Submission.STATUS_CANCELLED,
    },
    Submission.STATUS_PENDING_MASTERADMIN_APPROVAL: {
        Submission.STATUS_APPROVED,
        Submission.STATUS_REJECTED,
        Submission.STATUS_CANCELLED,
    },
    Submission.STATUS_APPROVED: {Submission.STATUS_CANCELLED},
    Submission.STATUS_REJECTED: {Submission.STATUS_PENDING_MARKETER_FORMS},
    Submission.STATUS_CANCELLED: {Submission.STATUS_PENDING_MARKETER_FORMS},
}


def can_transition(current, new):
    return new in TRANSITIONS.get(current, set())


def validate_transition(current, new):
    if not can_transition(current, new):
        raise WorkflowValidationError(
            f"Cannot move submission from '{current}' to '{new}'.",
            code='invalid_transition',
        )
