"""
Verification workflow operations.

Each operation runs in one database transaction, locks the submission row,
writes the submission, the marketer and a WorkflowLog row, and returns a
TransitionResult whose outbox the caller delivers after commit.
"""

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from authentication.models import User
from authentication.permissions import is_in_hierarchy, users_in_hierarchy
from core_config.exceptions import WorkflowValidationError, ResourceNotFound, ActionForbidden
from notifications.outbox import Outbox
from . import uploads
from .models import (
    VerificationSubmission as Submission, Biodata, Guarantor, Commitment,
    AdminVerificationDetails, WorkflowLog,
)
from .state_machine import validate_transition

logger = logging.getLogger(__name__)

FORM_BIODATA = 'biodata'
FORM_GUARANTOR = 'guarantor'
FORM_COMMITMENT = 'commitment'

# form_type -> (model, flag on the marketer, uploaded file fields)
FORM_TYPES = {
    FORM_BIODATA: (Biodata, 'bio_submitted', ('id_document', 'passport_photo')),
    FORM_GUARANTOR: (Guarantor, 'guarantor_submitted', ('id_document', 'passport_photo', 'signature')),
    FORM_COMMITMENT: (Commitment, 'commitment_submitted', ('direct_sales_rep_signature',)),
}

PHOTO_GROUPS = ('location_photos', 'admin_marketer_photos', 'landmark_photos')


@dataclass
class TransitionResult:
    submission: Submission
    previous_status: str
    new_status: str
    outbox: Outbox = field(default_factory=Outbox)

    @property
    def changed(self):
        return self.previous_status != self.new_status


def _form_config(form_type):
    try:
        return FORM_TYPES[form_type]
    except KeyError:
        raise WorkflowValidationError(
            f"Unknown form type '{form_type}'. Expected one of: {', '.join(FORM_TYPES)}."
        )


def _lock_user(user_id):
    try:
        return User.objects.select_for_update().get(pk=user_id)
    except User.DoesNotExist:
        raise ResourceNotFound(f"User {user_id} not found.")


def _lock_submission(submission_id):
    try:
        return Submission.objects.select_for_update().select_related(
            'marketer', 'admin', 'super_admin'
        ).get(pk=submission_id)
    except Submission.DoesNotExist:
        raise ResourceNotFound(f"Verification submission {submission_id} not found.")


def _get_submission(submission_id):
    try:
        return Submission.objects.select_related('marketer', 'admin', 'super_admin').get(pk=submission_id)
    except Submission.DoesNotExist:
        raise ResourceNotFound(f"Verification submission {submission_id} not found.")


def _log(submission, actor, action_type, description, previous_status, new_status, notes=''):
    return WorkflowLog.objects.create(
        submission=submission,
        actor=actor,
        actor_role=actor.role if actor else 'System',
        action_type=action_type,
        description=description,
        previous_status=previous_status,
        new_status=new_status,
        notes=notes or '',
    )


def _transition(submission, new_status, actor, action_type, description, notes=''):
    """
    Move a locked submission to ``new_status`` and log it. Raises
    WorkflowValidationError, leaving the row untouched, when the move is illegal.
    """
    previous = submission.submission_status
    validate_transition(previous, new_status)
    submission.submission_status = new_status
    submission.save()
    _log(submission, actor, action_type, description, previous, new_status, notes)
    logger.info(f"Submission {submission.pk}: {previous} -> {new_status} by user {actor.pk if actor else 'system'}")
    return previous


def _set_user_status(user_id, status, **extra):
    User.objects.filter(pk=user_id).update(overall_verification_status=status, updated_at=timezone.now(), **extra)


def _master_admins():
    return User.objects.filter(role=User.ROLE_MASTER_ADMIN, is_active=True)


def _require_role(actor, *roles):
    if actor.role not in roles:
        raise ActionForbidden(f"This action requires one of the roles: {', '.join(roles)}.")


def _require_submission_admin(admin, submission):
    if submission.admin_id != admin.pk:
        raise ActionForbidden("Only the marketer's assigned admin can perform this action.")


def _require_status(submission, *statuses):
    if submission.submission_status not in statuses:
        raise WorkflowValidationError(
            f"Submission is '{submission.submission_status}'; this action needs "
            f"{' or '.join(repr(s) for s in statuses)}."
        )


def submit_form(marketer, form_type, data, files=None):
    """
    Store one of the marketer's three forms. When the third form lands the
    submission moves on to admin review automatically.
    """
    model, flag, file_fields = _form_config(form_type)
    _require_role(marketer, User.ROLE_MARKETER)
    if getattr(marketer, flag):
        raise WorkflowValidationError(f"The {form_type} form has already been submitted.", code='already_submitted')

    urls = {}
    for name in file_fields:
        file_obj = (files or {}).get(name)
        if file_obj is not None:
            urls[f"{name}_url"] = uploads.upload_file(file_obj, f"verification/{form_type}", name)

    outbox = Outbox()
    with transaction.atomic():
        user = _lock_user(marketer.pk)
        if getattr(user, flag) or model.objects.filter(marketer=user).exists():
            raise WorkflowValidationError(f"The {form_type} form has already been submitted.", code='already_submitted')

        submission = Submission.objects.select_for_update().filter(marketer=user).first()
        if submission is None:
            if user.admin_id is None:
                raise WorkflowValidationError("You have no assigned admin yet. Contact support before submitting forms.")
            admin = user.admin
            submission = Submission.objects.create(
                marketer=user,
                admin=admin,
                super_admin=admin.super_admin or user.super_admin,
            )
        _require_status(submission, Submission.STATUS_PENDING_MARKETER_FORMS)

        model.objects.create(marketer=user, **data, **urls)
        setattr(user, flag, True)
        user.save(update_fields=[flag, 'updated_at'])

        status = submission.submission_status
        _log(submission, user, WorkflowLog.ACTION_FORM_SUBMITTED, f"{form_type} form submitted", status, status)
        logger.info(f"Marketer {user.pk} submitted {form_type} form")

        if user.all_forms_submitted:
            _transition(
                submission, Submission.STATUS_PENDING_ADMIN_REVIEW, user,
                WorkflowLog.ACTION_SUBMITTED_FOR_REVIEW, "All forms submitted; sent for admin review",
            )
            _set_user_status(user.pk, User.VERIFICATION_AWAITING_ADMIN)
            outbox.add(
                submission.admin, 'verification_review_requested',
                f"{user.name} ({user.unique_id}) has submitted all verification forms and is awaiting your review.",
                title='Verification review requested', priority='high',
                related_object_type='verification_submission', related_object_id=submission.pk,
                marketer_unique_id=user.unique_id,
            )

    return TransitionResult(submission, status, submission.submission_status, outbox)


def upload_admin_verification(admin, submission_id, notes='', photos=None):
    """
    Store the admin's visit notes and photos. Photo groups that are sent
    replace the stored ones; the rest are kept.
    """
    submission = _get_submission(submission_id)
    _require_submission_admin(admin, submission)
    _require_status(submission, Submission.STATUS_PENDING_ADMIN_REVIEW)

    uploaded = {}
    for group in PHOTO_GROUPS:
        group_files = (photos or {}).get(group)
        if group_files:
            uploaded[group] = uploads.upload_many(group_files, f"verification/admin/{submission.pk}", group)

    with transaction.atomic():
        submission = _lock_submission(submission_id)
        _require_status(submission, Submission.STATUS_PENDING_ADMIN_REVIEW)

        details, _ = AdminVerificationDetails.objects.update_or_create(
            submission=submission,
            defaults={'admin': admin, 'verification_notes': notes or '', **uploaded},
        )
        status = submission.submission_status
        photo_count = sum(len(urls) for urls in uploaded.values())
        _log(submission, admin, WorkflowLog.ACTION_ADMIN_UPLOAD,
             f"Admin verification uploaded with {photo_count} photos", status, status, notes)

    logger.info(f"Admin {admin.pk} uploaded verification details for submission {submission.pk}")
    return TransitionResult(submission, status, status)


def admin_review(admin, submission_id, approvals, report=''):
    """Record the admin's per-form approval flags and review report."""
    submission = _get_submission(submission_id)
    _require_submission_admin(admin, submission)

    flags = {
        f"{form_type}_approved": approvals[form_type]
        for form_type in FORM_TYPES if form_type in approvals
    }
    with transaction.atomic():
        submission = _lock_submission(submission_id)
        _require_status(submission, Submission.STATUS_PENDING_ADMIN_REVIEW)

        AdminVerificationDetails.objects.update_or_create(
            submission=submission,
            defaults={'admin': admin, 'admin_review_report': report or '', **flags},
        )
        status = submission.submission_status
        _log(submission, admin, WorkflowLog.ACTION_ADMIN_REVIEW, "Admin review recorded", status, status, report)

    return TransitionResult(submission, status, status)


def verify_and_send(admin, submission_id):
    outbox = Outbox()
    with transaction.atomic():
        submission = _lock_submission(submission_id)
        _require_submission_admin(admin, submission)

        if not AdminVerificationDetails.objects.filter(submission=submission).exists():
            raise WorkflowValidationError("Upload the admin verification details before sending to the super-admin.")
        if submission.super_admin_id is None:
            raise WorkflowValidationError("This marketer's admin has no assigned super-admin.")

        previous = _transition(
            submission, Submission.STATUS_PENDING_SUPERADMIN_REVIEW, admin,
            WorkflowLog.ACTION_SENT_TO_SUPERADMIN, "Admin verified and sent to super-admin",
        )
        submission.admin_reviewed_at = timezone.now()
        submission.save(update_fields=['admin_reviewed_at', 'updated_at'])
        _set_user_status(submission.marketer_id, User.VERIFICATION_AWAITING_SUPERADMIN)

        marketer = submission.marketer
        outbox.add(
            submission.super_admin, 'verification_review_requested',
            f"{admin.name} verified {marketer.name} ({marketer.unique_id}); your validation is required.",
            title='Verification awaiting your validation', priority='high',
            related_object_type='verification_submission', related_object_id=submission.pk,
        )
        outbox.add(
            marketer, 'verification_status_changed',
            "Your admin has verified your details and sent them to the super-admin.",
            title='Verification progress',
            related_object_type='verification_submission', related_object_id=submission.pk,
        )

    return TransitionResult(submission, previous, submission.submission_status, outbox)


def superadmin_verify(super_admin, submission_id, verified, report=''):
    """
    Super-admin validation. ``verified`` forwards to the master-admin;
    otherwise the submission is rejected with ``report`` as the reason.
    """
    outbox = Outbox()
    with transaction.atomic():
        submission = _lock_submission(submission_id)
        if super_admin.role != User.ROLE_SUPER_ADMIN or submission.super_admin_id != super_admin.pk:
            raise ActionForbidden("Only the super-admin of this marketer's admin can validate it.")
        _require_status(submission, Submission.STATUS_PENDING_SUPERADMIN_REVIEW)

        marketer = submission.marketer
        if verified:
            previous = _transition(
                submission, Submission.STATUS_PENDING_MASTERADMIN_APPROVAL, super_admin,
                WorkflowLog.ACTION_SUPERADMIN_APPROVED, "Super-admin validated; sent for master-admin approval",
                report,
            )
            submission.superadmin_reviewed_at = timezone.now()
            submission.save(update_fields=['superadmin_reviewed_at', 'updated_at'])
            _set_user_status(marketer.pk, User.VERIFICATION_AWAITING_MASTERADMIN)

            outbox.add(
                marketer, 'verification_status_changed',
                "Your verification was validated by the super-admin and awaits final approval.",
                title='Verification progress',
                related_object_type='verification_submission', related_object_id=submission.pk,
            )
            outbox.add(
                submission.admin, 'verification_status_changed',
                f"{marketer.name} ({marketer.unique_id}) was validated by the super-admin.",
                title='Verification progress',
                related_object_type='verification_submission', related_object_id=submission.pk,
            )
            for master_admin in _master_admins():
                outbox.add(
                    master_admin, 'verification_review_requested',
                    f"{marketer.name} ({marketer.unique_id}) is awaiting your final approval.",
                    title='Verification awaiting approval', priority='high',
                    related_object_type='verification_submission', related_object_id=submission.pk,
                )
        else:
            if not (report or '').strip():
                raise WorkflowValidationError("A reason is required when rejecting a verification.")
            previous = _transition(
                submission, Submission.STATUS_REJECTED, super_admin,
                WorkflowLog.ACTION_SUPERADMIN_REJECTED, "Super-admin rejected the verification", report,
            )
            submission.superadmin_reviewed_at = timezone.now()
            submission.rejection_reason = report
            submission.rejected_by = super_admin
            submission.rejected_at = submission.superadmin_reviewed_at
            submission.save(update_fields=[
                'superadmin_reviewed_at', 'rejection_reason', 'rejected_by', 'rejected_at', 'updated_at',
            ])
            _set_user_status(marketer.pk, User.VERIFICATION_SUPERADMIN_REJECTED)

            for recipient in (marketer, submission.admin):
                outbox.add(
                    recipient, 'verification_status_changed',
                    f"The verification of {marketer.name} was rejected by the super-admin: {report}",
                    title='Verification rejected', priority='high',
                    related_object_type='verification_submission', related_object_id=submission.pk,
                )

    return TransitionResult(submission, previous, submission.submission_status, outbox)


def masteradmin_decide(master_admin, submission_id, action, reason):
    """
    Final decision. Approval unlocks the marketer's account; rejection locks it.
    """
    _require_role(master_admin, User.ROLE_MASTER_ADMIN)
    if action not in ('approve', 'reject'):
        raise WorkflowValidationError("Action must be 'approve' or 'reject'.")
    if not (reason or '').strip():
        raise WorkflowValidationError("A reason is required for the final decision.")

    outbox = Outbox()
    with transaction.atomic():
        submission = _lock_submission(submission_id)
        _require_status(submission, Submission.STATUS_PENDING_MASTERADMIN_APPROVAL)
        marketer = submission.marketer
        now = timezone.now()

        if action == 'approve':
            previous = _transition(
                submission, Submission.STATUS_APPROVED, master_admin,
                WorkflowLog.ACTION_MASTERADMIN_APPROVED, "Master-admin approved the verification", reason,
            )
            submission.masteradmin_approved_at = now
            submission.save(update_fields=['masteradmin_approved_at', 'updated_at'])
            _set_user_status(marketer.pk, User.VERIFICATION_APPROVED, locked=False)
            message = "Congratulations, your verification has been approved."
        else:
            previous = _transition(
                submission, Submission.STATUS_REJECTED, master_admin,
                WorkflowLog.ACTION_MASTERADMIN_REJECTED, "Master-admin rejected the verification", reason,
            )
            submission.rejection_reason = reason
            submission.rejected_by = master_admin
            submission.rejected_at = now
            submission.save(update_fields=['rejection_reason', 'rejected_by', 'rejected_at', 'updated_at'])
            _set_user_status(marketer.pk, User.VERIFICATION_REJECTED, locked=True)
            message = f"Your verification was rejected: {reason}"

        outbox.add(
            marketer, 'verification_status_changed', message,
            title='Verification decision', priority='high',
            related_object_type='verification_submission', related_object_id=submission.pk,
        )

    return TransitionResult(submission, previous, submission.submission_status, outbox)


def cancel_submission(actor, submission_id, reason=''):
    _require_role(actor, User.ROLE_MASTER_ADMIN)

    outbox = Outbox()
    with transaction.atomic():
        submission = _lock_submission(submission_id)
        previous = _transition(
            submission, Submission.STATUS_CANCELLED, actor,
            WorkflowLog.ACTION_CANCELLED, "Verification cancelled", reason,
        )
        _set_user_status(submission.marketer_id, User.VERIFICATION_CANCELLED)
        outbox.add(
            submission.marketer, 'verification_status_changed',
            f"Your verification was cancelled.{f' Reason: {reason}' if reason else ''}",
            title='Verification cancelled',
            related_object_type='verification_submission', related_object_id=submission.pk,
        )

    return TransitionResult(submission, previous, submission.submission_status, outbox)


def allow_refill(actor, marketer, form_type):
    """
    Let a marketer submit ``form_type`` again: the stored form is deleted,
    the flag cleared and the submission brought back to
    ``pending_marketer_forms`` through the transition table.
    """
    _require_role(actor, User.ROLE_MASTER_ADMIN)
    model, flag, _ = _form_config(form_type)

    outbox = Outbox()
    with transaction.atomic():
        user = _lock_user(marketer.pk)
        if user.role != User.ROLE_MARKETER:
            raise WorkflowValidationError("Forms can only be reset for marketers.")
        if not getattr(user, flag) and not model.objects.filter(marketer=user).exists():
            raise WorkflowValidationError(f"The {form_type} form has not been submitted.")

        model.objects.filter(marketer=user).delete()
        setattr(user, flag, False)
        user.overall_verification_status = User.VERIFICATION_PENDING
        user.save(update_fields=[flag, 'overall_verification_status', 'updated_at'])

        submission = Submission.objects.select_for_update().filter(marketer=user).first()
        previous = new = None
        if submission is not None:
            previous = submission.submission_status
            description = f"{form_type} form reset for refill"
            if previous == Submission.STATUS_PENDING_MARKETER_FORMS:
                _log(submission, actor, WorkflowLog.ACTION_REFILL_ALLOWED, description, previous, previous)
            else:
                if previous not in (Submission.STATUS_REJECTED, Submission.STATUS_CANCELLED):
                    _transition(
                        submission, Submission.STATUS_CANCELLED, actor,
                        WorkflowLog.ACTION_CANCELLED, f"Cancelled so the {form_type} form can be refilled",
                    )
                _transition(
                    submission, Submission.STATUS_PENDING_MARKETER_FORMS, actor,
                    WorkflowLog.ACTION_REFILL_ALLOWED, description,
                )
            new = submission.submission_status

        outbox.add(
            user, 'verification_form_reset',
            f"You can now resubmit your {form_type} form.",
            title='Form reopened',
            related_object_type='verification_submission',
            related_object_id=submission.pk if submission else None,
            form_type=form_type,
        )

    logger.info(f"User {actor.pk} allowed refill of {form_type} for marketer {user.pk}")
    return TransitionResult(submission, previous, new, outbox)


def get_form_status(marketer):
    submission = Submission.objects.filter(marketer=marketer).first()
    return {
        'bio_submitted': marketer.bio_submitted,
        'guarantor_submitted': marketer.guarantor_submitted,
        'commitment_submitted': marketer.commitment_submitted,
        'all_forms_submitted': marketer.all_forms_submitted,
        'submission_status': submission.submission_status if submission else None,
    }


def get_verification_status(user):
    submission = Submission.objects.select_related('rejected_by').filter(marketer=user).first()
    return {
        'overall_verification_status': user.overall_verification_status,
        'locked': user.locked,
        'submission': submission,
    }


def get_workflow_history(actor, submission_id):
    submission = _get_submission(submission_id)
    if not is_in_hierarchy(actor, submission.marketer):
        raise ActionForbidden("This submission is outside your hierarchy.")
    return submission, submission.workflow_logs.select_related('actor')


def submissions_for(actor, status=None):
    """Submissions visible to ``actor``, optionally filtered by status."""
    queryset = Submission.objects.select_related('marketer', 'admin', 'super_admin').filter(
        marketer__in=users_in_hierarchy(actor)
    )
    if status:
        queryset = queryset.filter(submission_status=status)
    return queryset
