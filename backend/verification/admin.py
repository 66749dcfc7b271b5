from django.contrib import admin
from .models import (
    VerificationSubmission, Biodata, Guarantor, Commitment, AdminVerificationDetails, WorkflowLog,
)


class WorkflowLogInline(admin.TabularInline):
    model = WorkflowLog
    extra = 0
    readonly_fields = ('actor', 'actor_role', 'action_type', 'previous_status', 'new_status', 'notes', 'created_at')
    can_delete = False


@admin.register(VerificationSubmission)
class VerificationSubmissionAdmin(admin.ModelAdmin):
    list_display = ('id', 'marketer', 'admin', 'super_admin', 'submission_status', 'updated_at')
    list_filter = ('submission_status',)
    search_fields = ('marketer__unique_id', 'marketer__email')
    raw_id_fields = ('marketer', 'admin', 'super_admin', 'rejected_by')
    inlines = [WorkflowLogInline]


@admin.register(Biodata, Guarantor, Commitment)
class FormAdmin(admin.ModelAdmin):
    list_display = ('marketer', 'created_at')
    search_fields = ('marketer__unique_id', 'marketer__email')
    raw_id_fields = ('marketer',)


@admin.register(AdminVerificationDetails)
class AdminVerificationDetailsAdmin(admin.ModelAdmin):
    list_display = ('submission', 'admin', 'biodata_approved', 'guarantor_approved', 'commitment_approved', 'updated_at')
    raw_id_fields = ('submission', 'admin')
