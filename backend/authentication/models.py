"""
User model for marketers and the people who review them.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models, transaction


class CustomUserManager(BaseUserManager):
    """
    Custom user model manager where email is the unique identifiers
    for authentication instead of usernames.
    """
    def create_user(self, email, password, **extra_fields):
        """
        Create and save a User with the given email and password.
        """
        if not email:
            raise ValueError('The Email must be set')
        email = self.normalize_email(email)
        # Set username to email if not provided
        if 'username' not in extra_fields:
            extra_fields['username'] = email
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra_fields):
        """
        Create and save a SuperUser with the given email and password.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.ROLE_MASTER_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    A marketer, a reviewer in the marketer's assignment chain, or a dealer.

    Marketers point at their Admin through ``admin`` and Admins point at their
    SuperAdmin through ``super_admin``; commission and verification routing
    both walk this chain.
    """
    ROLE_MARKETER = 'Marketer'
    ROLE_ADMIN = 'Admin'
    ROLE_SUPER_ADMIN = 'SuperAdmin'
    ROLE_MASTER_ADMIN = 'MasterAdmin'
    ROLE_DEALER = 'Dealer'

    ROLE_CHOICES = [
        (ROLE_MARKETER, 'Marketer'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_SUPER_ADMIN, 'Super Admin'),
        (ROLE_MASTER_ADMIN, 'Master Admin'),
        (ROLE_DEALER, 'Dealer'),
    ]

    UNIQUE_ID_PREFIXES = {
        ROLE_MARKETER: 'DSR',
        ROLE_ADMIN: 'ADM',
        ROLE_SUPER_ADMIN: 'SAD',
        ROLE_MASTER_ADMIN: 'MAS',
        ROLE_DEALER: 'DLR',
    }

    VERIFICATION_PENDING = 'pending'
    VERIFICATION_AWAITING_ADMIN = 'awaiting_admin_review'
    VERIFICATION_AWAITING_SUPERADMIN = 'awaiting_superadmin_validation'
    VERIFICATION_AWAITING_MASTERADMIN = 'awaiting_masteradmin_approval'
    VERIFICATION_SUPERADMIN_REJECTED = 'superadmin_rejected'
    VERIFICATION_APPROVED = 'approved'
    VERIFICATION_REJECTED = 'rejected'
    VERIFICATION_CANCELLED = 'cancelled'

    VERIFICATION_STATUS_CHOICES = [
        (VERIFICATION_PENDING, 'Pending'),
        (VERIFICATION_AWAITING_ADMIN, 'Awaiting Admin Review'),
        (VERIFICATION_AWAITING_SUPERADMIN, 'Awaiting SuperAdmin Validation'),
        (VERIFICATION_AWAITING_MASTERADMIN, 'Awaiting MasterAdmin Approval'),
        (VERIFICATION_SUPERADMIN_REJECTED, 'Rejected by SuperAdmin'),
        (VERIFICATION_APPROVED, 'Approved'),
        (VERIFICATION_REJECTED, 'Rejected'),
        (VERIFICATION_CANCELLED, 'Cancelled'),
    ]

    # Use email as the primary identifier
    username = models.CharField(max_length=150, unique=False, blank=True)
    email = models.EmailField('email address', unique=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_MARKETER, db_index=True)
    unique_id = models.CharField(max_length=20, unique=True, blank=True, editable=False)

    # Assignment chain
    admin = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='marketers',
        limit_choices_to={'role': ROLE_ADMIN},
    )
    super_admin = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admins',
        limit_choices_to={'role': ROLE_SUPER_ADMIN},
    )

    contact_number = models.CharField(max_length=30, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)

    # Verification progress
    bio_submitted = models.BooleanField(default=False)
    guarantor_submitted = models.BooleanField(default=False)
    commitment_submitted = models.BooleanField(default=False)
    overall_verification_status = models.CharField(
        max_length=40, choices=VERIFICATION_STATUS_CHOICES, default=VERIFICATION_PENDING
    )
    locked = models.BooleanField(default=False, help_text="Locked accounts cannot use the dashboard")

    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    def __str__(self):
        return self.email

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.username

    @property
    def all_forms_submitted(self):
        return self.bio_submitted and self.guarantor_submitted and self.commitment_submitted

    def has_role(self, *roles):
        return self.role in roles

    def save(self, *args, **kwargs):
        if not self.unique_id:
            prefix = self.UNIQUE_ID_PREFIXES.get(self.role, 'USR')
            # Use select_for_update to prevent race conditions in ID generation
            with transaction.atomic():
                last_user = User.objects.select_for_update().filter(
                    unique_id__startswith=prefix
                ).order_by('-unique_id').first()

                new_number = int(last_user.unique_id[len(prefix):]) + 1 if last_user else 1
                self.unique_id = f"{prefix}{new_number:05d}"
                super().save(*args, **kwargs)
            return
        super().save(*args, **kwargs)

    class Meta:
        indexes = [
            models.Index(fields=['role', 'overall_verification_status'], name='user_role_verif_idx'),
        ]
