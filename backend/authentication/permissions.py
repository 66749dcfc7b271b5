import logging
from django.db.models import Q
from rest_framework.permissions import BasePermission

from .models import User

logger = logging.getLogger(__name__)


class HasRole(BasePermission):
    """
    Grants access when the authenticated user's role is one of ``allowed_roles``.
    Subclasses only set ``allowed_roles``.
    """
    allowed_roles = ()
    message = 'Your role is not allowed to perform this action.'

    def has_permission(self, request, view):
        # For swagger schema generation, allow access
        if getattr(view, 'swagger_fake_view', False):
            return True

        user = request.user
        if not user or not user.is_authenticated:
            return False

        if user.role not in self.allowed_roles:
            logger.debug(f"User {user.id} with role '{user.role}' denied; requires one of {self.allowed_roles}")
            return False
        return True


class IsMarketer(HasRole):
    allowed_roles = (User.ROLE_MARKETER,)


class IsAdmin(HasRole):
    allowed_roles = (User.ROLE_ADMIN,)


class IsSuperAdmin(HasRole):
    allowed_roles = (User.ROLE_SUPER_ADMIN,)


class IsMasterAdmin(HasRole):
    allowed_roles = (User.ROLE_MASTER_ADMIN,)


class IsReviewer(HasRole):
    """Any role above Marketer in the assignment chain."""
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN, User.ROLE_MASTER_ADMIN)


class IsWalletHolder(HasRole):
    """Roles that earn commission and may withdraw it."""
    allowed_roles = (User.ROLE_MARKETER, User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN)


def is_in_hierarchy(actor, target):
    """
    True when ``target`` sits under ``actor`` in the assignment chain.
    MasterAdmin sees everyone, and every user sees themselves.
    """
    if actor.pk == target.pk or actor.role == User.ROLE_MASTER_ADMIN:
        return True
    if actor.role == User.ROLE_ADMIN:
        return target.admin_id == actor.pk
    if actor.role == User.ROLE_SUPER_ADMIN:
        if target.super_admin_id == actor.pk:
            return True
        return target.admin_id is not None and target.admin.super_admin_id == actor.pk
    return False


def users_in_hierarchy(actor):
    """Queryset of the users ``actor`` may review, excluding ``actor``."""
    queryset = User.objects.select_related('admin', 'super_admin')
    if actor.role == User.ROLE_MASTER_ADMIN:
        return queryset.exclude(pk=actor.pk)
    if actor.role == User.ROLE_ADMIN:
        return queryset.filter(admin=actor)
    if actor.role == User.ROLE_SUPER_ADMIN:
        return queryset.filter(Q(super_admin=actor) | Q(admin__super_admin=actor))
    return queryset.none()
