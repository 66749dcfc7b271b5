from rest_framework import serializers

from authentication.serializers import UserLiteSerializer
from .models import (
    VerificationSubmission, Biodata, Guarantor, Commitment, AdminVerificationDetails, WorkflowLog,
)


class BiodataSerializer(serializers.ModelSerializer):
    id_document = serializers.FileField(write_only=True, required=False)
    passport_photo = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = Biodata
        exclude = ['marketer']
        read_only_fields = ['id_document_url', 'passport_photo_url', 'created_at', 'updated_at']


class GuarantorSerializer(serializers.ModelSerializer):
    id_document = serializers.FileField(write_only=True, required=False)
    passport_photo = serializers.FileField(write_only=True, required=False)
    signature = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = Guarantor
        exclude = ['marketer']
        read_only_fields = ['id_document_url', 'passport_photo_url', 'signature_url', 'created_at', 'updated_at']


class CommitmentSerializer(serializers.ModelSerializer):
    direct_sales_rep_signature = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = Commitment
        exclude = ['marketer']
        read_only_fields = ['direct_sales_rep_signature_url', 'created_at', 'updated_at']

    def validate(self, attrs):
        declined = [name for name in Commitment.PROMISE_FIELDS if not attrs.get(name)]
        if declined:
            raise serializers.ValidationError({name: 'This commitment must be accepted.' for name in declined})
        return attrs


FORM_SERIALIZERS = {
    'biodata': BiodataSerializer,
    'guarantor': GuarantorSerializer,
    'commitment': CommitmentSerializer,
}


def split_form_data(validated_data, file_fields):
    """Separate uploaded files from model field values."""
    data = dict(validated_data)
    files = {name: data.pop(name) for name in file_fields if name in data}
    return data, files


class AdminVerificationDetailsSerializer(serializers.ModelSerializer):
    admin = UserLiteSerializer(read_only=True)

    class Meta:
        model = AdminVerificationDetails
        exclude = ['submission']


class VerificationSubmissionSerializer(serializers.ModelSerializer):
    marketer = UserLiteSerializer(read_only=True)
    admin = UserLiteSerializer(read_only=True)
    super_admin = UserLiteSerializer(read_only=True)
    rejected_by = UserLiteSerializer(read_only=True)
    admin_details = AdminVerificationDetailsSerializer(read_only=True)

    class Meta:
        model = VerificationSubmission
        fields = [
            'id', 'marketer', 'admin', 'super_admin', 'submission_status',
            'admin_reviewed_at', 'superadmin_reviewed_at', 'masteradmin_approved_at',
            'rejection_reason', 'rejected_by', 'rejected_at', 'admin_details',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class WorkflowLogSerializer(serializers.ModelSerializer):
    actor = UserLiteSerializer(read_only=True)

    class Meta:
        model = WorkflowLog
        fields = [
            'id', 'actor', 'actor_role', 'action_type', 'description',
            'previous_status', 'new_status', 'notes', 'created_at',
        ]
        read_only_fields = fields


class FormStatusSerializer(serializers.Serializer):
    bio_submitted = serializers.BooleanField()
    guarantor_submitted = serializers.BooleanField()
    commitment_submitted = serializers.BooleanField()
    all_forms_submitted = serializers.BooleanField()
    submission_status = serializers.CharField(allow_null=True)


class VerificationStatusSerializer(serializers.Serializer):
    overall_verification_status = serializers.CharField()
    locked = serializers.BooleanField()
    submission = VerificationSubmissionSerializer(allow_null=True)


class TransitionResponseSerializer(serializers.Serializer):
    submission_id = serializers.IntegerField(source='submission.id', allow_null=True)
    previous_status = serializers.CharField(allow_null=True)
    new_status = serializers.CharField(allow_null=True)
    notifications_queued = serializers.SerializerMethodField()

    def get_notifications_queued(self, obj):
        return len(obj.outbox)


class AdminUploadSerializer(serializers.Serializer):
    verification_notes = serializers.CharField(required=False, allow_blank=True, default='')
    location_photos = serializers.ListField(child=serializers.FileField(), required=False)
    admin_marketer_photos = serializers.ListField(child=serializers.FileField(), required=False)
    landmark_photos = serializers.ListField(child=serializers.FileField(), required=False)


class AdminReviewSerializer(serializers.Serializer):
    biodata = serializers.BooleanField(required=False)
    guarantor = serializers.BooleanField(required=False)
    commitment = serializers.BooleanField(required=False)
    report = serializers.CharField(required=False, allow_blank=True, default='')


class SuperAdminVerifySerializer(serializers.Serializer):
    verified = serializers.BooleanField()
    report = serializers.CharField(required=False, allow_blank=True, default='')


class MasterAdminDecisionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'])
    reason = serializers.CharField()


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class AllowRefillSerializer(serializers.Serializer):
    marketer_unique_id = serializers.CharField()
    form_type = serializers.ChoiceField(choices=list(FORM_SERIALIZERS))
