"""
Resolución de la configuración de integración por tenant

Las credenciales salen del registro `tenant_integrations` del tenant o, si el
tenant no tiene registro, de variables de entorno leídas con python-decouple.
Nunca se escriben credenciales en código ni en logs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from decouple import config as env_config
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from .client import DEFAULT_API_VERSION, DEFAULT_TIMEOUT_MS
from .exceptions import ConfigurationError, IntegrationInactive, IntegrationNotConfigured

logger = logging.getLogger(__name__)

CREDENTIAL_FIELDS = ('store_url', 'consumer_key', 'consumer_secret')
OVERRIDABLE_FIELDS = CREDENTIAL_FIELDS + ('api_version',)

ENV_VARIABLES = {
    'store_url': 'WOOCOMMERCE_STORE_URL',
    'consumer_key': 'WOOCOMMERCE_CONSUMER_KEY',
    'consumer_secret': 'WOOCOMMERCE_CONSUMER_SECRET',
    'api_version': 'WOOCOMMERCE_API_VERSION',
}


@dataclass(repr=False)
class Integration:
    """Integración WooCommerce resuelta para una ejecución"""
    tenant_id: str
    store_url: str
    consumer_key: str
    consumer_secret: str
    api_version: str = DEFAULT_API_VERSION
    last_sync_at: Optional[str] = None
    is_active: bool = True
    stored: bool = False  # True si proviene de tenant_integrations

    def __repr__(self):
        return f"<Integration tenant={self.tenant_id} store={self.store_url} stored={self.stored}>"


@dataclass
class SyncSettings:
    """Parámetros del motor (settings.WOOCOMMERCE_SYNC)"""
    per_page: int = 50
    max_pages: int = 100
    page_delay_seconds: float = 1.0
    request_timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_attempts: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 120.0

    @classmethod
    def from_django_settings(cls) -> 'SyncSettings':
        values = getattr(settings, 'WOOCOMMERCE_SYNC', {}) or {}
        return cls(
            per_page=int(values.get('PER_PAGE', 50)),
            max_pages=int(values.get('MAX_PAGES', 100)),
            page_delay_seconds=float(values.get('PAGE_DELAY_SECONDS', 1.0)),
            request_timeout_ms=int(values.get('REQUEST_TIMEOUT_MS', DEFAULT_TIMEOUT_MS)),
            max_attempts=int(values.get('MAX_ATTEMPTS', 3)),
            backoff_base_seconds=float(values.get('BACKOFF_BASE_SECONDS', 1.0)),
            backoff_max_seconds=float(values.get('BACKOFF_MAX_SECONDS', 120.0)),
        )

    def as_retry_settings(self) -> Dict[str, Any]:
        return {
            'MAX_ATTEMPTS': self.max_attempts,
            'BACKOFF_BASE_SECONDS': self.backoff_base_seconds,
            'BACKOFF_MAX_SECONDS': self.backoff_max_seconds,
        }


def environment_credentials() -> Dict[str, str]:
    """Credenciales WOOCOMMERCE_* del entorno (vacías si no están definidas)"""
    return {
        key: env_config(variable, default='')
        for key, variable in ENV_VARIABLES.items()
    }


class IntegrationConfigResolver:
    """
    Resuelve la integración de un tenant

    Prioridad: overrides explícitos (CLI) > registro del tenant > entorno.
    El entorno solo se consulta cuando el tenant no tiene registro.
    """

    def get_record(self, tenant_id):
        from apps.catalog_sync.models import TenantIntegration

        return TenantIntegration.objects.filter(
            tenant_id=tenant_id,
            integration_type=TenantIntegration.TYPE_WOOCOMMERCE
        ).first()

    def resolve(self, tenant_id: str, overrides: Optional[Dict[str, Any]] = None) -> Integration:
        """
        Args:
            tenant_id: tenant dueño de la integración
            overrides: valores que reemplazan a los almacenados (vacíos se ignoran)

        Raises:
            ConfigurationError: sin tenant o con credenciales incompletas
            IntegrationNotConfigured: sin registro ni credenciales alternativas
            IntegrationInactive: el registro existe pero está deshabilitado
        """
        if not tenant_id:
            raise ConfigurationError("Se requiere tenant_id para sincronizar")

        explicit = {
            key: value for key, value in (overrides or {}).items()
            if key in OVERRIDABLE_FIELDS and value
        }

        record = self.get_record(tenant_id)
        if record is not None:
            if not record.is_active:
                raise IntegrationInactive(tenant_id)
            base = dict(record.config or {})
        else:
            base = {key: value for key, value in environment_credentials().items() if value}
            if not base and not explicit:
                raise IntegrationNotConfigured(tenant_id)

        values = {**base, **explicit}
        missing = [key for key in CREDENTIAL_FIELDS if not values.get(key)]
        if missing:
            if record is None and not explicit:
                raise IntegrationNotConfigured(tenant_id)
            raise ConfigurationError(
                f"Credenciales WooCommerce incompletas para tenant {tenant_id}: faltan {', '.join(missing)}"
            )

        return Integration(
            tenant_id=tenant_id,
            store_url=str(values['store_url']).strip(),
            consumer_key=str(values['consumer_key']).strip(),
            consumer_secret=str(values['consumer_secret']).strip(),
            api_version=values.get('api_version') or DEFAULT_API_VERSION,
            last_sync_at=(record.config or {}).get('last_sync_at') if record else None,
            is_active=True,
            stored=record is not None,
        )

    def record_last_sync(self, tenant_id: str, when: Optional[datetime] = None) -> bool:
        """
        Guarda `last_sync_at` en el JSON config del tenant

        Best-effort: un fallo se registra en el log y retorna False.
        """
        from apps.catalog_sync.models import TenantIntegration

        when = when or timezone.now()
        try:
            with transaction.atomic():
                record = TenantIntegration.objects.select_for_update().filter(
                    tenant_id=tenant_id,
                    integration_type=TenantIntegration.TYPE_WOOCOMMERCE
                ).first()
                if record is None:
                    logger.info(f"ℹ️ Tenant {tenant_id} sin registro de integración: last_sync_at no se guarda")
                    return False
                record.config = {**(record.config or {}), 'last_sync_at': when.isoformat()}
                record.save(update_fields=['config', 'updated_at'])
        except DatabaseError as e:
            logger.warning(f"⚠️ No se pudo guardar last_sync_at para tenant {tenant_id}: {e}")
            return False
        return True
