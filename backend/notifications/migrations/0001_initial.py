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
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, max_length=255)),
                ('message', models.TextField()),
                ('notification_type', models.CharField(choices=[('verification_submitted', 'Verification Submitted'), ('verification_status_changed', 'Verification Status Changed'), ('verification_form_reset', 'Verification Form Reset'), ('verification_review_requested', 'Verification Review Requested'), ('commission_credited', 'Commission Credited'), ('withheld_released', 'Withheld Balance Released'), ('withheld_release_reversed', 'Withheld Release Reversed'), ('withdrawal_requested', 'Withdrawal Requested'), ('withdrawal_reviewed', 'Withdrawal Reviewed')], max_length=50)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=20)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('related_object_type', models.CharField(blank=True, max_length=100, null=True)),
                ('related_object_id', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'), models.Index(fields=['notification_type'], name='notif_type_idx')],
            },
        ),
    ]
