"""Modelos base compartidos por las apps de la plataforma."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TimeStampedModel(models.Model):
    """Abstract base model that provides self-updating created_at and updated_at fields."""

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    class Meta:
        abstract = True


class TenantScopedModel(TimeStampedModel):
    """
    Abstract base model for rows owned by a tenant.

    The tenant itself lives in the CMS tenancy layer; here it is only an
    opaque identifier (e.g. 'tenant-8361048f').
    """

    tenant_id = models.CharField(_("Tenant"), max_length=255, db_index=True)

    class Meta:
        abstract = True
