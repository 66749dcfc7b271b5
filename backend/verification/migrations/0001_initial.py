import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='VerificationSubmission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('submission_status', models.CharField(choices=[('pending_marketer_forms', 'Pending Marketer Forms'), ('pending_admin_review', 'Pending Admin Review'), ('pending_superadmin_review', 'Pending SuperAdmin Review'), ('pending_masteradmin_approval', 'Pending MasterAdmin Approval'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('cancelled', 'Cancelled')], default='pending_marketer_forms', max_length=40)),
                ('admin_reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('superadmin_reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('masteradmin_approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True, default='')),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='admin_submissions', to=settings.AUTH_USER_MODEL)),
                ('marketer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='verification_submission', to=settings.AUTH_USER_MODEL)),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rejected_submissions', to=settings.AUTH_USER_MODEL)),
                ('super_admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='superadmin_submissions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['submission_status'], name='verif_sub_status_idx'),
                    models.Index(fields=['admin', 'submission_status'], name='verif_sub_admin_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Biodata',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('address', models.TextField()),
                ('phone', models.CharField(max_length=20)),
                ('religion', models.CharField(blank=True, max_length=100)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('marital_status', models.CharField(blank=True, max_length=50)),
                ('state_of_origin', models.CharField(blank=True, max_length=100)),
                ('state_of_residence', models.CharField(blank=True, max_length=100)),
                ('mothers_maiden_name', models.CharField(blank=True, max_length=255)),
                ('school_attended', models.CharField(blank=True, max_length=255)),
                ('means_of_identification', models.CharField(blank=True, max_length=100)),
                ('last_place_of_work', models.CharField(blank=True, max_length=255)),
                ('job_description', models.TextField(blank=True)),
                ('reason_for_quitting', models.TextField(blank=True)),
                ('medical_condition', models.TextField(blank=True)),
                ('next_of_kin_name', models.CharField(blank=True, max_length=255)),
                ('next_of_kin_phone', models.CharField(blank=True, max_length=20)),
                ('next_of_kin_address', models.TextField(blank=True)),
                ('next_of_kin_relationship', models.CharField(blank=True, max_length=100)),
                ('bank_name', models.CharField(blank=True, max_length=255)),
                ('account_name', models.CharField(blank=True, max_length=255)),
                ('account_number', models.CharField(blank=True, max_length=50)),
                ('id_document_url', models.URLField(blank=True, max_length=500, null=True)),
                ('passport_photo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('marketer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='biodata', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Guarantor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_candidate_well_known', models.BooleanField(default=False)),
                ('relationship', models.CharField(max_length=100)),
                ('known_duration', models.PositiveIntegerField(help_text='Years the guarantor has known the candidate')),
                ('occupation', models.CharField(blank=True, max_length=150)),
                ('id_document_url', models.URLField(blank=True, max_length=500, null=True)),
                ('passport_photo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('signature_url', models.URLField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('marketer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='guarantor', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Commitment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('promise_accept_false_documents', models.BooleanField(default=False)),
                ('promise_not_request_irrelevant_info', models.BooleanField(default=False)),
                ('promise_not_charge_customer_fees', models.BooleanField(default=False)),
                ('promise_not_modify_contract_info', models.BooleanField(default=False)),
                ('promise_not_sell_unapproved_phones', models.BooleanField(default=False)),
                ('promise_not_make_unofficial_commitment', models.BooleanField(default=False)),
                ('promise_not_operate_customer_account', models.BooleanField(default=False)),
                ('promise_accept_fraud_firing', models.BooleanField(default=False)),
                ('promise_not_share_company_info', models.BooleanField(default=False)),
                ('promise_ensure_loan_recovery', models.BooleanField(default=False)),
                ('promise_abide_by_system', models.BooleanField(default=False)),
                ('direct_sales_rep_name', models.CharField(max_length=255)),
                ('direct_sales_rep_signature_url', models.URLField(blank=True, max_length=500, null=True)),
                ('date_signed', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('marketer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='commitment', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='AdminVerificationDetails',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('verification_notes', models.TextField(blank=True)),
                ('admin_review_report', models.TextField(blank=True)),
                ('biodata_approved', models.BooleanField(null=True)),
                ('guarantor_approved', models.BooleanField(null=True)),
                ('commitment_approved', models.BooleanField(null=True)),
                ('location_photos', models.JSONField(blank=True, default=list)),
                ('admin_marketer_photos', models.JSONField(blank=True, default=list)),
                ('landmark_photos', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('submission', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='admin_details', to='verification.verificationsubmission')),
            ],
        ),
        migrations.CreateModel(
            name='WorkflowLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_role', models.CharField(max_length=20)),
                ('action_type', models.CharField(choices=[('form_submitted', 'Form Submitted'), ('submitted_for_review', 'Submitted for Admin Review'), ('admin_upload', 'Admin Verification Uploaded'), ('admin_review', 'Admin Review Recorded'), ('sent_to_superadmin', 'Sent to SuperAdmin'), ('superadmin_approved', 'SuperAdmin Approved'), ('superadmin_rejected', 'SuperAdmin Rejected'), ('masteradmin_approved', 'MasterAdmin Approved'), ('masteradmin_rejected', 'MasterAdmin Rejected'), ('cancelled', 'Cancelled'), ('refill_allowed', 'Refill Allowed')], max_length=40)),
                ('description', models.TextField(blank=True)),
                ('previous_status', models.CharField(blank=True, max_length=40)),
                ('new_status', models.CharField(blank=True, max_length=40)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='workflow_actions', to=settings.AUTH_USER_MODEL)),
                ('submission', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='workflow_logs', to='verification.verificationsubmission')),
            ],
            options={
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['submission', 'created_at'], name='workflow_log_sub_time_idx')],
            },
        ),
    ]
