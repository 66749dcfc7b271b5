from django.db import models
from django.conf import settings
from django.utils import timezone


class Notification(models.Model):
    """
    Model for in-system notifications shown to users.
    """

    # Notification Types
    TYPE_CHOICES = [
        ('verification_submitted', 'Verification Submitted'),
        ('verification_status_changed', 'Verification Status Changed'),
        ('verification_form_reset', 'Verification Form Reset'),
        ('verification_review_requested', 'Verification Review Requested'),
        ('commission_credited', 'Commission Credited'),
        ('withheld_released', 'Withheld Balance Released'),
        ('withheld_release_reversed', 'Withheld Release Reversed'),
        ('withdrawal_requested', 'Withdrawal Requested'),
        ('withdrawal_reviewed', 'Withdrawal Reviewed'),
    ]

    # Priority Levels
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    title = models.CharField(max_length=255, blank=True)
    message = models.TextField()
    notification_type = models.CharField(max_length=50, choices=TYPE_CHOICES)
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default='medium')

    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')

    # Status
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    # Metadata
    related_object_type = models.CharField(max_length=100, null=True, blank=True)  # e.g., 'submission', 'withdrawal'
    related_object_id = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
            models.Index(fields=['notification_type'], name='notif_type_idx'),
        ]

    def __str__(self):
        return f"{self.notification_type} - {self.recipient.email}"

    def mark_as_read(self):
        """Mark notification as read"""
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at'])
