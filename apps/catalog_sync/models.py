"""
Modelos para el sistema de sincronización de catálogo

La configuración de cada integración se guarda por tenant en
`tenant_integrations`; las credenciales y el estado de sincronización viven
dentro del JSON `config`.
"""

from django.db import models

from core.models import TimeStampedModel


class TenantIntegration(TimeStampedModel):
    """
    Integración externa configurada por un tenant

    `config` para WooCommerce:
        store_url, consumer_key, consumer_secret, api_version, last_sync_at
    """

    TYPE_WOOCOMMERCE = 'woocommerce'

    INTEGRATION_TYPE_CHOICES = [
        (TYPE_WOOCOMMERCE, 'WooCommerce'),
    ]

    tenant_id = models.CharField(max_length=255, db_index=True)
    integration_type = models.CharField(
        max_length=50,
        choices=INTEGRATION_TYPE_CHOICES,
        default=TYPE_WOOCOMMERCE
    )
    is_active = models.BooleanField(default=True)
    config = models.JSONField(
        default=dict,
        blank=True,
        help_text="Credenciales y estado de la integración"
    )

    class Meta:
        db_table = 'tenant_integrations'
        verbose_name = "Integración de Tenant"
        verbose_name_plural = "Integraciones de Tenant"
        ordering = ['tenant_id', 'integration_type']
        unique_together = ['tenant_id', 'integration_type']

    def __str__(self):
        return f"{self.tenant_id} ({self.integration_type})"

    @property
    def store_url(self):
        return (self.config or {}).get('store_url') or ''

    @property
    def last_sync_at(self):
        """Último sync registrado (string ISO-8601 o None)"""
        return (self.config or {}).get('last_sync_at')

    @property
    def api_version(self):
        return (self.config or {}).get('api_version') or 'wc/v3'

    @property
    def has_credentials(self):
        config = self.config or {}
        return all(config.get(key) for key in ('store_url', 'consumer_key', 'consumer_secret'))
