"""
Tareas asíncronas de Celery para la sincronización de catálogo

Cada tenant tiene un lock en cache: nunca corren dos sincronizaciones del
mismo tenant a la vez. Tenants distintos son independientes.
"""

import logging
from typing import Any, Dict

from celery import shared_task
from django.core.cache import cache
from django.utils import timezone

from .sync_engine.client import WooCommerceClient
from .sync_engine.config import IntegrationConfigResolver, SyncSettings
from .sync_engine.exceptions import CatalogSyncError
from .sync_engine.orchestrator import RunStatus, run_order_sync, run_product_sync

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 1800  # 30 minutos


def tenant_lock_key(tenant_id: str) -> str:
    return f'catalog_sync_lock_{tenant_id}'


def _run_locked(task, tenant_id: str, entity: str, runner) -> Dict[str, Any]:
    lock_key = tenant_lock_key(tenant_id)

    if not cache.add(lock_key, 'locked', LOCK_TIMEOUT):
        logger.warning(f"⚠️ Sincronización del tenant {tenant_id} ya está en ejecución, omitiendo...")
        return {
            'success': False,
            'tenant_id': tenant_id,
            'entity': entity,
            'error': 'Sincronización ya en ejecución',
        }

    try:
        report = runner(tenant_id)
        result = report.to_dict()
        result['success'] = report.status is not RunStatus.FAILED
        result['task_id'] = task.request.id
        return result
    finally:
        cache.delete(lock_key)
        logger.info(f"🔓 Lock liberado para tenant {tenant_id}")


@shared_task(bind=True, time_limit=1800, soft_time_limit=1700)
def sync_tenant_products(self, tenant_id: str):
    """
    Sincroniza los productos WooCommerce de un tenant

    Args:
        tenant_id: tenant dueño de la integración

    Returns:
        Dict con el reporte de la ejecución y `success`
    """
    logger.info(f"📤 Tarea de sincronización de productos para tenant {tenant_id}")
    return _run_locked(self, tenant_id, 'products', run_product_sync)


@shared_task(bind=True, time_limit=1800, soft_time_limit=1700)
def sync_tenant_orders(self, tenant_id: str):
    """Sincroniza las órdenes WooCommerce de un tenant"""
    logger.info(f"📤 Tarea de sincronización de órdenes para tenant {tenant_id}")
    return _run_locked(self, tenant_id, 'orders', run_order_sync)


@shared_task
def test_tenant_connection(tenant_id: str):
    """
    Verifica las credenciales WooCommerce de un tenant

    Returns:
        Dict con `success` y el detalle de la tienda o el error
    """
    sync_settings = SyncSettings.from_django_settings()
    try:
        integration = IntegrationConfigResolver().resolve(tenant_id)
        with WooCommerceClient.from_integration(integration, timeout_ms=sync_settings.request_timeout_ms) as client:
            result = client.test_connection()
    except CatalogSyncError as e:
        logger.error(f"❌ Prueba de conexión fallida para tenant {tenant_id}: {e}")
        result = {'success': False, 'error': str(e)}

    result['tenant_id'] = tenant_id
    result['timestamp'] = timezone.now().isoformat()
    return result
