import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('username', models.CharField(blank=True, max_length=150)),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='email address')),
                ('role', models.CharField(choices=[('Marketer', 'Marketer'), ('Admin', 'Admin'), ('SuperAdmin', 'Super Admin'), ('MasterAdmin', 'Master Admin'), ('Dealer', 'Dealer')], db_index=True, default='Marketer', max_length=20)),
                ('unique_id', models.CharField(blank=True, editable=False, max_length=20, unique=True)),
                ('contact_number', models.CharField(blank=True, max_length=30, null=True)),
                ('location', models.CharField(blank=True, max_length=255, null=True)),
                ('bio_submitted', models.BooleanField(default=False)),
                ('guarantor_submitted', models.BooleanField(default=False)),
                ('commitment_submitted', models.BooleanField(default=False)),
                ('overall_verification_status', models.CharField(choices=[('pending', 'Pending'), ('awaiting_admin_review', 'Awaiting Admin Review'), ('awaiting_superadmin_validation', 'Awaiting SuperAdmin Validation'), ('awaiting_masteradmin_approval', 'Awaiting MasterAdmin Approval'), ('superadmin_rejected', 'Rejected by SuperAdmin'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('cancelled', 'Cancelled')], default='pending', max_length=40)),
                ('locked', models.BooleanField(default=False, help_text='Locked accounts cannot use the dashboard')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(blank=True, limit_choices_to={'role': 'Admin'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='marketers', to=settings.AUTH_USER_MODEL)),
                ('super_admin', models.ForeignKey(blank=True, limit_choices_to={'role': 'SuperAdmin'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admins', to=settings.AUTH_USER_MODEL)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'indexes': [models.Index(fields=['role', 'overall_verification_status'], name='user_role_verif_idx')],
            },
        ),
    ]
