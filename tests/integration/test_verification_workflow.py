"""
End-to-end verification workflow through the service layer.
"""

import pytest

from authentication.models import User
from core_config.exceptions import WorkflowValidationError, ActionForbidden
from verification import services
from verification.models import (
    VerificationSubmission as Submission, Biodata, Guarantor, Commitment, AdminVerificationDetails, WorkflowLog,
)

BIODATA = {'name': 'Mo Marketer', 'address': '12 Market Road', 'phone': '08030000000'}
GUARANTOR = {'is_candidate_well_known': True, 'relationship': 'Uncle', 'known_duration': 10, 'occupation': 'Trader'}
COMMITMENT = {name: True for name in Commitment.PROMISE_FIELDS}
COMMITMENT['direct_sales_rep_name'] = 'Mo Marketer'


def submit_all_forms(marketer):
    services.submit_form(marketer, 'biodata', BIODATA)
    return submit_all_forms_after_biodata(marketer)


def submit_all_forms_after_biodata(marketer):
    marketer.refresh_from_db()
    services.submit_form(marketer, 'guarantor', GUARANTOR)
    marketer.refresh_from_db()
    result = services.submit_form(marketer, 'commitment', COMMITMENT)
    marketer.refresh_from_db()
    return result


def reach_masteradmin(marketer, admin, super_admin):
    submission = submit_all_forms(marketer).submission
    services.upload_admin_verification(admin, submission.pk, notes='Visited shop, all good')
    services.verify_and_send(admin, submission.pk)
    services.superadmin_verify(super_admin, submission.pk, True, 'Documents check out')
    return submission


@pytest.mark.django_db
def test_third_form_moves_submission_to_admin_review(marketer, admin):
    first = services.submit_form(marketer, 'biodata', BIODATA)
    assert first.new_status == Submission.STATUS_PENDING_MARKETER_FORMS
    assert not first.outbox

    result = submit_all_forms_after_biodata(marketer)

    assert result.previous_status == Submission.STATUS_PENDING_MARKETER_FORMS
    assert result.new_status == Submission.STATUS_PENDING_ADMIN_REVIEW
    assert marketer.overall_verification_status == User.VERIFICATION_AWAITING_ADMIN
    assert [item.recipient for item in result.outbox] == [admin]
    assert result.outbox.for_recipient(admin)[0].notification_type == 'verification_review_requested'
    assert WorkflowLog.objects.filter(
        submission=result.submission, action_type=WorkflowLog.ACTION_SUBMITTED_FOR_REVIEW
    ).count() == 1


@pytest.mark.django_db
def test_second_submission_of_same_form_is_rejected(marketer):
    services.submit_form(marketer, 'biodata', BIODATA)
    marketer.refresh_from_db()

    with pytest.raises(WorkflowValidationError):
        services.submit_form(marketer, 'biodata', BIODATA)
    assert Biodata.objects.filter(marketer=marketer).count() == 1


@pytest.mark.django_db
def test_marketer_without_admin_cannot_submit(db):
    loner = User.objects.create_user(email='loner@example.com', password='secret', role=User.ROLE_MARKETER)

    with pytest.raises(WorkflowValidationError):
        services.submit_form(loner, 'biodata', BIODATA)
    loner.refresh_from_db()
    assert not loner.bio_submitted
    assert not Biodata.objects.exists()


@pytest.mark.django_db
def test_form_files_fall_back_to_placeholder_urls(marketer, settings):
    from django.core.files.uploadedfile import SimpleUploadedFile
    settings.CLOUDINARY_STORAGE = {'CLOUD_NAME': '', 'API_KEY': '', 'API_SECRET': ''}
    photo = SimpleUploadedFile('passport.jpg', b'fake-image-bytes', content_type='image/jpeg')

    services.submit_form(marketer, 'biodata', BIODATA, {'passport_photo': photo})

    biodata = Biodata.objects.get(marketer=marketer)
    assert biodata.passport_photo_url.startswith('https://via.placeholder.com/')
    assert biodata.id_document_url is None


@pytest.mark.django_db
def test_verify_and_send_requires_admin_evidence(marketer, admin):
    submission = submit_all_forms(marketer).submission

    with pytest.raises(WorkflowValidationError):
        services.verify_and_send(admin, submission.pk)
    submission.refresh_from_db()
    assert submission.submission_status == Submission.STATUS_PENDING_ADMIN_REVIEW


@pytest.mark.django_db
def test_only_assigned_admin_may_upload(marketer, super_admin):
    other_admin = User.objects.create_user(
        email='other-admin@example.com', password='secret', role=User.ROLE_ADMIN, super_admin=super_admin,
    )
    submission = submit_all_forms(marketer).submission

    with pytest.raises(ActionForbidden):
        services.upload_admin_verification(other_admin, submission.pk, notes='Not mine')


@pytest.mark.django_db
def test_admin_review_records_form_approvals(marketer, admin):
    submission = submit_all_forms(marketer).submission

    services.admin_review(admin, submission.pk, {'biodata': True, 'guarantor': False}, 'Guarantor unreachable')

    details = AdminVerificationDetails.objects.get(submission=submission)
    assert details.biodata_approved is True
    assert details.guarantor_approved is False
    assert details.commitment_approved is None
    assert details.admin_review_report == 'Guarantor unreachable'


@pytest.mark.django_db
def test_full_approval_path(marketer, admin, super_admin, master_admin):
    submission = submit_all_forms(marketer).submission

    services.upload_admin_verification(admin, submission.pk, notes='Visited shop')
    sent = services.verify_and_send(admin, submission.pk)
    assert sent.new_status == Submission.STATUS_PENDING_SUPERADMIN_REVIEW
    assert {item.recipient.pk for item in sent.outbox} == {super_admin.pk, marketer.pk}

    validated = services.superadmin_verify(super_admin, submission.pk, True, 'Looks right')
    assert validated.new_status == Submission.STATUS_PENDING_MASTERADMIN_APPROVAL
    assert {item.recipient.pk for item in validated.outbox} == {marketer.pk, admin.pk, master_admin.pk}
    marketer.refresh_from_db()
    assert marketer.overall_verification_status == User.VERIFICATION_AWAITING_MASTERADMIN

    decided = services.masteradmin_decide(master_admin, submission.pk, 'approve', 'Welcome aboard')
    assert decided.new_status == Submission.STATUS_APPROVED
    marketer.refresh_from_db()
    assert marketer.overall_verification_status == User.VERIFICATION_APPROVED
    assert not marketer.locked

    actions = list(submission.workflow_logs.values_list('action_type', flat=True))
    assert actions == [
        WorkflowLog.ACTION_FORM_SUBMITTED,
        WorkflowLog.ACTION_FORM_SUBMITTED,
        WorkflowLog.ACTION_FORM_SUBMITTED,
        WorkflowLog.ACTION_SUBMITTED_FOR_REVIEW,
        WorkflowLog.ACTION_ADMIN_UPLOAD,
        WorkflowLog.ACTION_SENT_TO_SUPERADMIN,
        WorkflowLog.ACTION_SUPERADMIN_APPROVED,
        WorkflowLog.ACTION_MASTERADMIN_APPROVED,
    ]


@pytest.mark.django_db
def test_superadmin_rejection(marketer, admin, super_admin):
    submission = submit_all_forms(marketer).submission
    services.upload_admin_verification(admin, submission.pk)
    services.verify_and_send(admin, submission.pk)

    result = services.superadmin_verify(super_admin, submission.pk, False, 'Guarantor could not be reached')

    submission.refresh_from_db()
    marketer.refresh_from_db()
    assert result.new_status == Submission.STATUS_REJECTED
    assert submission.rejection_reason == 'Guarantor could not be reached'
    assert submission.rejected_by == super_admin
    assert marketer.overall_verification_status == User.VERIFICATION_SUPERADMIN_REJECTED
    assert {item.recipient.pk for item in result.outbox} == {marketer.pk, admin.pk}


@pytest.mark.django_db
def test_superadmin_rejection_requires_reason(marketer, admin, super_admin):
    submission = submit_all_forms(marketer).submission
    services.upload_admin_verification(admin, submission.pk)
    services.verify_and_send(admin, submission.pk)

    with pytest.raises(WorkflowValidationError):
        services.superadmin_verify(super_admin, submission.pk, False, '')


@pytest.mark.django_db
def test_foreign_superadmin_is_forbidden(marketer, admin):
    stranger = User.objects.create_user(email='stranger@example.com', password='secret', role=User.ROLE_SUPER_ADMIN)
    submission = submit_all_forms(marketer).submission
    services.upload_admin_verification(admin, submission.pk)
    services.verify_and_send(admin, submission.pk)

    with pytest.raises(ActionForbidden):
        services.superadmin_verify(stranger, submission.pk, True)


@pytest.mark.django_db
def test_masteradmin_rejection_locks_account(marketer, admin, super_admin, master_admin):
    submission = reach_masteradmin(marketer, admin, super_admin)

    services.masteradmin_decide(master_admin, submission.pk, 'reject', 'Fraudulent documents')

    marketer.refresh_from_db()
    submission.refresh_from_db()
    assert marketer.locked
    assert marketer.overall_verification_status == User.VERIFICATION_REJECTED
    assert submission.rejection_reason == 'Fraudulent documents'


@pytest.mark.django_db
def test_masteradmin_decision_requires_reason(marketer, admin, super_admin, master_admin):
    submission = reach_masteradmin(marketer, admin, super_admin)

    with pytest.raises(WorkflowValidationError):
        services.masteradmin_decide(master_admin, submission.pk, 'approve', '  ')


@pytest.mark.django_db
def test_illegal_transition_leaves_row_unchanged(marketer, admin, master_admin):
    submission = submit_all_forms(marketer).submission

    with pytest.raises(WorkflowValidationError) as excinfo:
        services.masteradmin_decide(master_admin, submission.pk, 'approve', 'Skipping ahead')

    assert 'pending_admin_review' in str(excinfo.value.detail)
    submission.refresh_from_db()
    assert submission.submission_status == Submission.STATUS_PENDING_ADMIN_REVIEW
    assert not submission.workflow_logs.filter(action_type=WorkflowLog.ACTION_MASTERADMIN_APPROVED).exists()


def drive_to(status, marketer, admin, super_admin, master_admin):
    if status == Submission.STATUS_PENDING_MARKETER_FORMS:
        return services.submit_form(marketer, 'biodata', BIODATA).submission
    if status == Submission.STATUS_PENDING_ADMIN_REVIEW:
        return submit_all_forms(marketer).submission
    if status == Submission.STATUS_CANCELLED:
        submission = submit_all_forms(marketer).submission
        services.cancel_submission(master_admin, submission.pk, 'Duplicate account')
        return submission
    if status == Submission.STATUS_PENDING_SUPERADMIN_REVIEW:
        submission = submit_all_forms(marketer).submission
        services.upload_admin_verification(admin, submission.pk)
        services.verify_and_send(admin, submission.pk)
        return submission

    submission = reach_masteradmin(marketer, admin, super_admin)
    if status == Submission.STATUS_APPROVED:
        services.masteradmin_decide(master_admin, submission.pk, 'approve', 'All checks passed')
    elif status == Submission.STATUS_REJECTED:
        services.masteradmin_decide(master_admin, submission.pk, 'reject', 'Forged guarantor letter')
    return submission


DECISIONS = {
    'superadmin_yes': (Submission.STATUS_PENDING_SUPERADMIN_REVIEW,
                       lambda sa, ma, pk: services.superadmin_verify(sa, pk, True, 'Looks fine')),
    'superadmin_no': (Submission.STATUS_PENDING_SUPERADMIN_REVIEW,
                      lambda sa, ma, pk: services.superadmin_verify(sa, pk, False, 'Not convinced')),
    'masteradmin_approve': (Submission.STATUS_PENDING_MASTERADMIN_APPROVAL,
                            lambda sa, ma, pk: services.masteradmin_decide(ma, pk, 'approve', 'Fine')),
    'masteradmin_reject': (Submission.STATUS_PENDING_MASTERADMIN_APPROVAL,
                           lambda sa, ma, pk: services.masteradmin_decide(ma, pk, 'reject', 'Skip stages')),
}

OUT_OF_TURN = [
    (decision, status)
    for decision, (expected, _) in DECISIONS.items()
    for status in (
        Submission.STATUS_PENDING_MARKETER_FORMS,
        Submission.STATUS_PENDING_ADMIN_REVIEW,
        Submission.STATUS_PENDING_SUPERADMIN_REVIEW,
        Submission.STATUS_PENDING_MASTERADMIN_APPROVAL,
        Submission.STATUS_APPROVED,
        Submission.STATUS_REJECTED,
        Submission.STATUS_CANCELLED,
    )
    if status != expected
]


@pytest.mark.django_db
@pytest.mark.parametrize('decision,status', OUT_OF_TURN)
def test_decision_out_of_turn_is_refused(decision, status, marketer, admin, super_admin, master_admin):
    submission = drive_to(status, marketer, admin, super_admin, master_admin)
    submission.refresh_from_db()
    assert submission.submission_status == status
    log_count = submission.workflow_logs.count()
    _, decide = DECISIONS[decision]

    with pytest.raises(WorkflowValidationError) as excinfo:
        decide(super_admin, master_admin, submission.pk)

    assert status in str(excinfo.value.detail)
    submission.refresh_from_db()
    assert submission.submission_status == status
    assert submission.workflow_logs.count() == log_count


@pytest.mark.django_db
def test_reject_before_superadmin_review_is_refused(marketer, admin, super_admin, master_admin):
    submission = submit_all_forms(marketer).submission

    with pytest.raises(WorkflowValidationError):
        services.masteradmin_decide(master_admin, submission.pk, 'reject', 'skip stages')
    with pytest.raises(WorkflowValidationError):
        services.superadmin_verify(super_admin, submission.pk, False, 'no')

    submission.refresh_from_db()
    marketer.refresh_from_db()
    assert submission.submission_status == Submission.STATUS_PENDING_ADMIN_REVIEW
    assert marketer.overall_verification_status == User.VERIFICATION_AWAITING_ADMIN
    assert not submission.workflow_logs.filter(new_status=Submission.STATUS_REJECTED).exists()


@pytest.mark.django_db
def test_superadmin_on_submission_keeps_authority_after_reassignment(marketer, admin, super_admin):
    submission = submit_all_forms(marketer).submission
    services.upload_admin_verification(admin, submission.pk)
    sent = services.verify_and_send(admin, submission.pk)
    assert sent.outbox.for_recipient(super_admin)

    successor = User.objects.create_user(email='successor@example.com', password='secret', role=User.ROLE_SUPER_ADMIN)
    admin.super_admin = successor
    admin.save()

    with pytest.raises(ActionForbidden):
        services.superadmin_verify(successor, submission.pk, True, 'New in post')

    result = services.superadmin_verify(super_admin, submission.pk, True, 'Documents check out')
    assert result.new_status == Submission.STATUS_PENDING_MASTERADMIN_APPROVAL


@pytest.mark.django_db
def test_allow_refill_after_rejection(marketer, admin, super_admin, master_admin):
    submission = reach_masteradmin(marketer, admin, super_admin)
    services.masteradmin_decide(master_admin, submission.pk, 'reject', 'Blurry guarantor ID')

    result = services.allow_refill(master_admin, marketer, 'guarantor')

    marketer.refresh_from_db()
    assert result.new_status == Submission.STATUS_PENDING_MARKETER_FORMS
    assert not marketer.guarantor_submitted
    assert marketer.bio_submitted
    assert marketer.overall_verification_status == User.VERIFICATION_PENDING
    assert not Guarantor.objects.filter(marketer=marketer).exists()

    # Resubmitting the reopened form sends the case back to the admin
    again = services.submit_form(marketer, 'guarantor', GUARANTOR)
    assert again.new_status == Submission.STATUS_PENDING_ADMIN_REVIEW


@pytest.mark.django_db
def test_allow_refill_mid_review_goes_through_cancelled(marketer, admin, master_admin):
    submission = submit_all_forms(marketer).submission

    services.allow_refill(master_admin, marketer, 'biodata')

    logs = list(submission.workflow_logs.order_by('-id').values_list('previous_status', 'new_status')[:2])
    assert logs == [
        (Submission.STATUS_CANCELLED, Submission.STATUS_PENDING_MARKETER_FORMS),
        (Submission.STATUS_PENDING_ADMIN_REVIEW, Submission.STATUS_CANCELLED),
    ]


@pytest.mark.django_db
def test_only_masteradmin_may_allow_refill(marketer, admin):
    services.submit_form(marketer, 'biodata', BIODATA)

    with pytest.raises(ActionForbidden):
        services.allow_refill(admin, marketer, 'biodata')


@pytest.mark.django_db
def test_cancel_then_refill(marketer, admin, master_admin):
    submission = submit_all_forms(marketer).submission

    cancelled = services.cancel_submission(master_admin, submission.pk, 'Duplicate account')
    assert cancelled.new_status == Submission.STATUS_CANCELLED
    marketer.refresh_from_db()
    assert marketer.overall_verification_status == User.VERIFICATION_CANCELLED

    refill = services.allow_refill(master_admin, marketer, 'commitment')
    assert refill.new_status == Submission.STATUS_PENDING_MARKETER_FORMS


@pytest.mark.django_db
def test_submission_queues_follow_hierarchy(marketer, admin, super_admin, master_admin):
    submit_all_forms(marketer)
    other_admin = User.objects.create_user(email='other-admin@example.com', password='secret', role=User.ROLE_ADMIN)

    assert services.submissions_for(admin).count() == 1
    assert services.submissions_for(super_admin).count() == 1
    assert services.submissions_for(master_admin).count() == 1
    assert services.submissions_for(other_admin).count() == 0
    assert services.submissions_for(master_admin, status=Submission.STATUS_APPROVED).count() == 0
