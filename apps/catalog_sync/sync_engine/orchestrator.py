"""
Orquestador de sincronización WooCommerce -> plataforma

Ciclo por ejecución: INIT -> FETCH_PAGE -> MAP_ITEMS -> PERSIST_ITEMS ->
(más páginas? FETCH_PAGE : DONE). Páginas e ítems se procesan en secuencia;
cada ítem corre en su propio savepoint y un error en él no detiene el lote.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from .backoff import CancellationToken, RetryPolicy
from .client import WooCommerceClient
from .config import Integration, IntegrationConfigResolver, SyncSettings
from .exceptions import (
    AuthError,
    CatalogSyncError,
    ConfigurationError,
    IntegrationInactive,
    IntegrationNotConfigured,
    MappingError,
    PersistenceError,
    RateLimitError,
    SyncCancelled,
    TransportError,
    UpstreamError,
)
from .mapper import (
    external_ids_for_orders,
    map_categories,
    map_order,
    map_order_items,
    map_product,
    map_variants,
)
from .persistence import CatalogGateway, UpsertOutcome
from .woo_models import WooOrder, WooProduct

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGES = 10
PRODUCT_FILTERS = {'status': 'publish'}


class RunStatus(str, Enum):
    COMPLETED = 'completed'
    TRUNCATED = 'truncated'
    INCOMPLETE = 'incomplete'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


@dataclass
class SyncReport:
    """Resultado de una ejecución. Solo existe en memoria; nunca se guarda."""
    entity: str
    tenant_id: str
    status: RunStatus = RunStatus.COMPLETED
    reason: Optional[str] = None

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: int = 0
    pages_fetched: int = 0
    legacy_mirror_failures: int = 0
    skipped_items: int = 0

    incomplete_pages: List[int] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=timezone.now)
    finished_at: Optional[datetime] = None

    def record_error(self, message: str):
        self.errors += 1
        if len(self.error_messages) < MAX_ERROR_MESSAGES:
            self.error_messages.append(message)

    def record_outcome(self, outcome: UpsertOutcome):
        if outcome is UpsertOutcome.CREATED:
            self.created += 1
        elif outcome is UpsertOutcome.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1

    def fail(self, reason: str):
        self.status = RunStatus.FAILED
        self.reason = reason

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return round((self.finished_at - self.started_at).total_seconds(), 3)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entity': self.entity,
            'tenant_id': self.tenant_id,
            'status': self.status.value,
            'reason': self.reason,
            'created': self.created,
            'updated': self.updated,
            'unchanged': self.unchanged,
            'errors': self.errors,
            'pages_fetched': self.pages_fetched,
            'legacy_mirror_failures': self.legacy_mirror_failures,
            'skipped_items': self.skipped_items,
            'incomplete_pages': list(self.incomplete_pages),
            'error_messages': list(self.error_messages),
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'duration_seconds': self.duration_seconds,
        }


@dataclass
class SyncContext:
    """
    Todo lo que una ejecución necesita

    Los colaboradores (client_factory, gateway, resolver) son inyectables; los
    tests pasan dobles en lugar de tocar la red.
    """
    tenant_id: str
    per_page: int = 50
    max_pages: int = 100
    page_delay: float = 1.0
    request_timeout_ms: int = 30000
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    overrides: Dict[str, Any] = field(default_factory=dict)
    client_factory: Optional[Callable[[Integration], Any]] = None
    gateway: Optional[CatalogGateway] = None
    resolver: Optional[IntegrationConfigResolver] = None

    def __post_init__(self):
        self.per_page = min(max(1, int(self.per_page)), 100)
        self.max_pages = max(1, int(self.max_pages))
        self.page_delay = max(0.0, float(self.page_delay))
        if self.client_factory is None:
            self.client_factory = self._build_client
        if self.gateway is None:
            self.gateway = CatalogGateway()
        if self.resolver is None:
            self.resolver = IntegrationConfigResolver()

    @classmethod
    def from_django_settings(cls, tenant_id: str, **kwargs) -> 'SyncContext':
        """Contexto con los valores de settings.WOOCOMMERCE_SYNC; kwargs los reemplaza"""
        sync_settings = SyncSettings.from_django_settings()
        values = {
            'per_page': sync_settings.per_page,
            'max_pages': sync_settings.max_pages,
            'page_delay': sync_settings.page_delay_seconds,
            'request_timeout_ms': sync_settings.request_timeout_ms,
            'retry_policy': RetryPolicy.from_settings(sync_settings.as_retry_settings()),
        }
        values.update({key: value for key, value in kwargs.items() if value is not None})
        return cls(tenant_id=tenant_id, **values)

    def _build_client(self, integration: Integration) -> WooCommerceClient:
        return WooCommerceClient.from_integration(
            integration,
            timeout_ms=self.request_timeout_ms,
            retry_policy=self.retry_policy,
        )


class CatalogSyncOrchestrator:
    """Ejecuta la sincronización de productos u órdenes para un tenant"""

    def __init__(self, context: SyncContext):
        self.context = context
        self.gateway = context.gateway
        self.resolver = context.resolver
        self.token = context.cancel_token

    def sync_products(self) -> SyncReport:
        return self._run('products', self._fetch_products, self._products_handler)

    def sync_orders(self) -> SyncReport:
        return self._run('orders', self._fetch_orders, self._orders_handler)

    # Ciclo principal

    def _run(self, entity: str, fetch_page, build_handler) -> SyncReport:
        tenant_id = self.context.tenant_id
        report = SyncReport(entity=entity, tenant_id=tenant_id)
        logger.info(f"🚀 Iniciando sincronización de {entity} para tenant {tenant_id}")

        try:
            integration = self.resolver.resolve(tenant_id, self.context.overrides)
            client = self.context.client_factory(integration)
        except (ConfigurationError, IntegrationNotConfigured, IntegrationInactive) as e:
            logger.error(f"❌ Sincronización de {entity} abortada para tenant {tenant_id}: {e}")
            report.fail(str(e))
            return self._finish(report)

        try:
            with client:
                self._paginate(client, report, fetch_page, build_handler)
        except AuthError as e:
            logger.error(f"❌ Autenticación rechazada por {integration.store_url}: {e}")
            report.fail(f"Autenticación fallida: {e}")
        except SyncCancelled as e:
            logger.warning(f"⚠️ Sincronización de {entity} cancelada para tenant {tenant_id}")
            report.status = RunStatus.CANCELLED
            report.reason = str(e)

        if report.status not in (RunStatus.FAILED, RunStatus.CANCELLED):
            self.resolver.record_last_sync(tenant_id, timezone.now())

        return self._finish(report)

    def _paginate(self, client, report: SyncReport, fetch_page, build_handler):
        per_page = self.context.per_page
        page = 1

        while True:
            self.token.raise_if_cancelled()
            if page > 1 and self.token.wait(self.context.page_delay):
                raise SyncCancelled(f"Cancelada antes de la página {page}")

            try:
                records = self.context.retry_policy.run(
                    lambda: fetch_page(client, page, per_page),
                    cancel_token=self.token,
                    description=f"GET /{report.entity} página {page}"
                )
            except (RateLimitError, TransportError, UpstreamError) as e:
                logger.error(f"❌ Página {page} de {report.entity} no se pudo obtener: {e}")
                report.record_error(f"Página {page}: {e}")
                report.incomplete_pages.append(page)
                report.status = RunStatus.INCOMPLETE
                return

            if records is None:
                records = []
            if not isinstance(records, list):
                report.record_error(f"Página {page}: respuesta inesperada ({type(records).__name__})")
                report.incomplete_pages.append(page)
                report.status = RunStatus.INCOMPLETE
                return

            report.pages_fetched += 1
            logger.info(f"📄 Página {page}: {len(records)} {report.entity}")
            if not records:
                return

            handler = build_handler(records)
            for index, record in enumerate(records, start=1):
                self._process_item(record, handler, report, f"página {page}, ítem {index}")

            if len(records) < per_page:
                return
            if page >= self.context.max_pages:
                logger.warning(
                    f"⚠️ Límite de {self.context.max_pages} páginas alcanzado: "
                    f"la sincronización de {report.entity} quedó truncada"
                )
                report.status = RunStatus.TRUNCATED
                return
            page += 1

    def _process_item(self, record, handler, report: SyncReport, label: str):
        external_id = record.get('id') if isinstance(record, dict) else None
        try:
            with transaction.atomic():
                outcome = handler(record, report)
        except MappingError as e:
            logger.warning(f"⚠️ {label} (id {external_id}) omitido: {e}")
            report.record_error(f"{report.entity} {external_id}: {e}")
        except PersistenceError as e:
            logger.error(f"❌ {label} (id {external_id}) no se pudo guardar: {e}")
            report.record_error(f"{report.entity} {external_id}: {e}")
        except Exception as e:
            logger.exception(f"❌ Error inesperado en {label} (id {external_id})")
            report.record_error(f"{report.entity} {external_id}: {type(e).__name__}: {e}")
        else:
            report.record_outcome(outcome)

    def _finish(self, report: SyncReport) -> SyncReport:
        report.finished_at = timezone.now()
        logger.info(
            f"✅ Sincronización de {report.entity} ({report.status.value}) para tenant {report.tenant_id}: "
            f"{report.created} creados, {report.updated} actualizados, {report.unchanged} sin cambios, "
            f"{report.errors} errores, {report.pages_fetched} páginas"
        )
        return report

    # Productos

    @staticmethod
    def _fetch_products(client, page: int, per_page: int):
        return client.get_products(page, per_page, dict(PRODUCT_FILTERS))

    def _products_handler(self, records):
        return self._process_product

    def _process_product(self, record, report: SyncReport) -> UpsertOutcome:
        tenant_id = self.context.tenant_id
        upstream = WooProduct.from_dict(record)
        product_data = map_product(upstream, tenant_id)

        product, outcome = self.gateway.upsert_product(product_data)
        variants = map_variants(upstream, product.pk, tenant_id)
        variants_changed = self.gateway.upsert_variants(product, variants)
        categories_changed = self.gateway.link_categories(product, map_categories(upstream.categories, tenant_id))

        if outcome is UpsertOutcome.UNCHANGED and (variants_changed or categories_changed):
            outcome = UpsertOutcome.UPDATED

        try:
            self.gateway.mirror_legacy_product(product, variants)
        except PersistenceError as e:
            report.legacy_mirror_failures += 1
            logger.warning(f"⚠️ pern_products desincronizado para '{product.handle}': {e}")

        return outcome

    # Órdenes

    @staticmethod
    def _fetch_orders(client, page: int, per_page: int):
        return client.get_orders(page, per_page)

    def _orders_handler(self, records):
        orders = []
        for record in records:
            try:
                orders.append(WooOrder.from_dict(record))
            except CatalogSyncError:
                continue
        product_map = self.gateway.build_product_map(self.context.tenant_id, external_ids_for_orders(orders))

        def handler(record, report: SyncReport) -> UpsertOutcome:
            return self._process_order(record, report, product_map)

        return handler

    def _process_order(self, record, report: SyncReport, product_map) -> UpsertOutcome:
        tenant_id = self.context.tenant_id
        upstream = WooOrder.from_dict(record)
        order_data = map_order(upstream, tenant_id)

        order, outcome = self.gateway.upsert_order(order_data)
        items = map_order_items(upstream, order.pk, product_map)
        known_items = [item for item in items if item['product_id'] is not None]
        skipped = len(items) - len(known_items)
        if skipped:
            report.skipped_items += skipped
            logger.warning(
                f"⚠️ Orden {order.order_number}: {skipped} línea(s) sin producto sincronizado se omiten"
            )

        if self.gateway.replace_order_items(order, known_items) and outcome is UpsertOutcome.UNCHANGED:
            outcome = UpsertOutcome.UPDATED
        return outcome


def run_product_sync(tenant_id: str, **kwargs) -> SyncReport:
    """Atajo: contexto desde settings + sincronización de productos"""
    return CatalogSyncOrchestrator(SyncContext.from_django_settings(tenant_id, **kwargs)).sync_products()


def run_order_sync(tenant_id: str, **kwargs) -> SyncReport:
    return CatalogSyncOrchestrator(SyncContext.from_django_settings(tenant_id, **kwargs)).sync_orders()
