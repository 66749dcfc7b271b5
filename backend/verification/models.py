from django.conf import settings
from django.db import models


class VerificationSubmission(models.Model):
    """
    The verification case of one marketer, moved through the review chain
    marketer -> admin -> super-admin -> master-admin.
    """
    STATUS_PENDING_MARKETER_FORMS = 'pending_marketer_forms'
    STATUS_PENDING_ADMIN_REVIEW = 'pending_admin_review'
    STATUS_PENDING_SUPERADMIN_REVIEW = 'pending_superadmin_review'
    STATUS_PENDING_MASTERADMIN_APPROVAL = 'pending_masteradmin_approval'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING_MARKETER_FORMS, 'Pending Marketer Forms'),
        (STATUS_PENDING_ADMIN_REVIEW, 'Pending Admin Review'),
        (STATUS_PENDING_SUPERADMIN_REVIEW, 'Pending SuperAdmin Review'),
        (STATUS_PENDING_MASTERADMIN_APPROVAL, 'Pending MasterAdmin Approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    marketer = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='verification_submission'
    )
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='admin_submissions'
    )
    super_admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, null=True, blank=True,
        related_name='superadmin_submissions'
    )
    submission_status = models.CharField(
        max_length=40, choices=STATUS_CHOICES, default=STATUS_PENDING_MARKETER_FORMS
    )

    admin_reviewed_at = models.DateTimeField(null=True, blank=True)
    superadmin_reviewed_at = models.DateTimeField(null=True, blank=True)
    masteradmin_approved_at = models.DateTimeField(null=True, blank=True)

    rejection_reason = models.TextField(blank=True, default='')
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='rejected_submissions'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['submission_status'], name='verif_sub_status_idx'),
            models.Index(fields=['admin', 'submission_status'], name='verif_sub_admin_status_idx'),
        ]

    def __str__(self):
        return f"Submission {self.pk} for {self.marketer_id} ({self.submission_status})"


class Biodata(models.Model):
    marketer = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='biodata')

    name = models.CharField(max_length=255)
    address = models.TextField()
    phone = models.CharField(max_length=20)
    religion = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    marital_status = models.CharField(max_length=50, blank=True)
    state_of_origin = models.CharField(max_length=100, blank=True)
    state_of_residence = models.CharField(max_length=100, blank=True)
    mothers_maiden_name = models.CharField(max_length=255, blank=True)
    school_attended = models.CharField(max_length=255, blank=True)
    means_of_identification = models.CharField(max_length=100, blank=True)
    last_place_of_work = models.CharField(max_length=255, blank=True)
    job_description = models.TextField(blank=True)
    reason_for_quitting = models.TextField(blank=True)
    medical_condition = models.TextField(blank=True)

    next_of_kin_name = models.CharField(max_length=255, blank=True)
    next_of_kin_phone = models.CharField(max_length=20, blank=True)
    next_of_kin_address = models.TextField(blank=True)
    next_of_kin_relationship = models.CharField(max_length=100, blank=True)

    bank_name = models.CharField(max_length=255, blank=True)
    account_name = models.CharField(max_length=255, blank=True)
    account_number = models.CharField(max_length=50, blank=True)

    id_document_url = models.URLField(max_length=500, blank=True, null=True)
    passport_photo_url = models.URLField(max_length=500, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Biodata of {self.marketer_id}"


class Guarantor(models.Model):
    marketer = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='guarantor')

    is_candidate_well_known = models.BooleanField(default=False)
    relationship = models.CharField(max_length=100)
    known_duration = models.PositiveIntegerField(help_text="Years the guarantor has known the candidate")
    occupation = models.CharField(max_length=150, blank=True)

    id_document_url = models.URLField(max_length=500, blank=True, null=True)
    passport_photo_url = models.URLField(max_length=500, blank=True, null=True)
    signature_url = models.URLField(max_length=500, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Guarantor form of {self.marketer_id}"


class Commitment(models.Model):
    PROMISE_FIELDS = (
        'promise_accept_false_documents',
        'promise_not_request_irrelevant_info',
        'promise_not_charge_customer_fees',
        'promise_not_modify_contract_info',
        'promise_not_sell_unapproved_phones',
        'promise_not_make_unofficial_commitment',
        'promise_not_operate_customer_account',
        'promise_accept_fraud_firing',
        'promise_not_share_company_info',
        'promise_ensure_loan_recovery',
        'promise_abide_by_system',
    )

    marketer = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='commitment')

    promise_accept_false_documents = models.BooleanField(default=False)
    promise_not_request_irrelevant_info = models.BooleanField(default=False)
    promise_not_charge_customer_fees = models.BooleanField(default=False)
    promise_not_modify_contract_info = models.BooleanField(default=False)
    promise_not_sell_unapproved_phones = models.BooleanField(default=False)
    promise_not_make_unofficial_commitment = models.BooleanField(default=False)
    promise_not_operate_customer_account = models.BooleanField(default=False)
    promise_accept_fraud_firing = models.BooleanField(default=False)
    promise_not_share_company_info = models.BooleanField(default=False)
    promise_ensure_loan_recovery = models.BooleanField(default=False)
    promise_abide_by_system = models.BooleanField(default=False)

    direct_sales_rep_name = models.CharField(max_length=255)
    direct_sales_rep_signature_url = models.URLField(max_length=500, blank=True, null=True)
    date_signed = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Commitment form of {self.marketer_id}"


class AdminVerificationDetails(models.Model):
    """
    Evidence gathered by the admin during the physical verification visit.
    """
    submission = models.OneToOneField(
        VerificationSubmission, on_delete=models.CASCADE, related_name='admin_details'
    )
    admin = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='+')

    verification_notes = models.TextField(blank=True)
    admin_review_report = models.TextField(blank=True)
    biodata_approved = models.BooleanField(null=True)
    guarantor_approved = models.BooleanField(null=True)
    commitment_approved = models.BooleanField(null=True)

    location_photos = models.JSONField(default=list, blank=True)
    admin_marketer_photos = models.JSONField(default=list, blank=True)
    landmark_photos = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Admin verification for submission {self.submission_id}"


class WorkflowLog(models.Model):
    """
    Append-only audit trail of every transition and administrative action.
    """
    ACTION_FORM_SUBMITTED = 'form_submitted'
    ACTION_SUBMITTED_FOR_REVIEW = 'submitted_for_review'
    ACTION_ADMIN_UPLOAD = 'admin_upload'
    ACTION_ADMIN_REVIEW = 'admin_review'
    ACTION_SENT_TO_SUPERADMIN = 'sent_to_superadmin'
    ACTION_SUPERADMIN_APPROVED = 'superadmin_approved'
    ACTION_SUPERADMIN_REJECTED = 'superadmin_rejected'
    ACTION_MASTERADMIN_APPROVED = 'masteradmin_approved'
    ACTION_MASTERADMIN_REJECTED = 'masteradmin_rejected'
    ACTION_CANCELLED = 'cancelled'
    ACTION_REFILL_ALLOWED = 'refill_allowed'

    ACTION_CHOICES = [
        (ACTION_FORM_SUBMITTED, 'Form Submitted'),
        (ACTION_SUBMITTED_FOR_REVIEW, 'Submitted for Admin Review'),
        (ACTION_ADMIN_UPLOAD, 'Admin Verification Uploaded'),
        (ACTION_ADMIN_REVIEW, 'Admin Review Recorded'),
        (ACTION_SENT_TO_SUPERADMIN, 'Sent to SuperAdmin'),
        (ACTION_SUPERADMIN_APPROVED, 'SuperAdmin Approved'),
        (ACTION_SUPERADMIN_REJECTED, 'SuperAdmin Rejected'),
        (ACTION_MASTERADMIN_APPROVED, 'MasterAdmin Approved'),
        (ACTION_MASTERADMIN_REJECTED, 'MasterAdmin Rejected'),
        (ACTION_CANCELLED, 'Cancelled'),
        (ACTION_REFILL_ALLOWED, 'Refill Allowed'),
    ]

    submission = models.ForeignKey(VerificationSubmission, on_delete=models.CASCADE, related_name='workflow_logs')
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='workflow_actions'
    )
    actor_role = models.CharField(max_length=20)
    action_type = models.CharField(max_length=40, choices=ACTION_CHOICES)
    description = models.TextField(blank=True)
    previous_status = models.CharField(max_length=40, blank=True)
    new_status = models.CharField(max_length=40, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['submission', 'created_at'], name='workflow_log_sub_time_idx'),
        ]

    def __str__(self):
        return f"{self.action_type}: {self.previous_status} -> {self.new_status}"
