"""
Sincroniza el catálogo WooCommerce de un tenant desde la línea de comandos

El reporte JSON se imprime en stdout; los mensajes de progreso van a stderr.
Sale con código 0 aunque haya errores por ítem; con CommandError solo cuando
la ejecución termina en estado "failed".

Credenciales: los flags explícitos reemplazan a la integración guardada; las
variables WOOCOMMERCE_* solo se usan cuando el tenant no tiene registro.

Usage:
    python manage.py sync_woocommerce_products --tenant-id tenant-123
    python manage.py sync_woocommerce_products --tenant-id tenant-123 \\
        --store-url https://shop.example.com --consumer-key ck_... --consumer-secret cs_...
    python manage.py sync_woocommerce_products --tenant-id tenant-123 --orders
"""

import json

from decouple import config
from django.core.management.base import BaseCommand, CommandError

from apps.catalog_sync.sync_engine.orchestrator import CatalogSyncOrchestrator, RunStatus, SyncContext


class Command(BaseCommand):
    help = 'Sincroniza productos (y opcionalmente órdenes) de WooCommerce para un tenant'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tenant-id',
            default=config('CMS_TENANT', default=''),
            help='Tenant a sincronizar (default: $CMS_TENANT)',
        )
        parser.add_argument(
            '--store-url',
            help='URL de la tienda (default: integración guardada; sin registro, $WOOCOMMERCE_STORE_URL)',
        )
        parser.add_argument(
            '--consumer-key',
            help='Consumer key (default: integración guardada o $WOOCOMMERCE_CONSUMER_KEY)',
        )
        parser.add_argument(
            '--consumer-secret',
            help='Consumer secret (default: integración guardada o $WOOCOMMERCE_CONSUMER_SECRET)',
        )
        parser.add_argument(
            '--api-version',
            help='Versión de la API (default: integración guardada, $WOOCOMMERCE_API_VERSION o wc/v3)',
        )
        parser.add_argument(
            '--orders',
            action='store_true',
            help='Sincronizar también las órdenes después de los productos',
        )
        parser.add_argument('--per-page', type=int, help='Registros por página (1-100)')
        parser.add_argument('--max-pages', type=int, help='Máximo de páginas por ejecución')
        parser.add_argument('--page-delay', type=float, help='Segundos de espera entre páginas')

    def handle(self, *args, **options):
        tenant_id = (options['tenant_id'] or '').strip()
        if not tenant_id:
            raise CommandError('Se requiere --tenant-id (o la variable CMS_TENANT)')

        overrides = {
            key: options[key]
            for key in ('store_url', 'consumer_key', 'consumer_secret', 'api_version')
            if options.get(key)
        }

        context = SyncContext.from_django_settings(
            tenant_id,
            per_page=options.get('per_page'),
            max_pages=options.get('max_pages'),
            page_delay=options.get('page_delay'),
            overrides=overrides,
        )
        orchestrator = CatalogSyncOrchestrator(context)

        self.stderr.write(f'🚀 Sincronizando productos WooCommerce para tenant {tenant_id}...')
        reports = [orchestrator.sync_products()]

        if options['orders'] and reports[0].status is not RunStatus.FAILED:
            self.stderr.write(f'🚀 Sincronizando órdenes WooCommerce para tenant {tenant_id}...')
            reports.append(orchestrator.sync_orders())

        payload = reports[0].to_dict() if len(reports) == 1 else {
            'products': reports[0].to_dict(),
            'orders': reports[1].to_dict(),
        }
        self.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))

        failed = [report for report in reports if report.status is RunStatus.FAILED]
        if failed:
            raise CommandError(f'Sincronización fallida: {failed[0].reason}')

        for report in reports:
            style = self.style.SUCCESS if report.status is RunStatus.COMPLETED else self.style.WARNING
            self.stderr.write(style(
                f'✅ {report.entity}: {report.created} creados, {report.updated} actualizados, '
                f'{report.unchanged} sin cambios, {report.errors} errores ({report.status.value})'
            ))
