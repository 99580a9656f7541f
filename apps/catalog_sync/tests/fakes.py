"""
Dobles de prueba: registros WooCommerce y un cliente REST en memoria
"""

import copy

from apps.catalog_sync.models import TenantIntegration
from apps.catalog_sync.sync_engine.backoff import RetryPolicy
from apps.catalog_sync.sync_engine.orchestrator import SyncContext

TENANT_ID = 'tenant-test'


def make_product(number, **overrides):
    """Producto con la forma del JSON de GET /products"""
    product = {
        'id': 1000 + number,
        'name': f'Producto {number}',
        'slug': f'producto-{number}',
        'type': 'simple',
        'status': 'publish',
        'description': f'<p>Descripción {number}</p>',
        'short_description': '',
        'sku': f'SKU-{number}',
        'price': '19.99',
        'regular_price': '19.99',
        'sale_price': '',
        'manage_stock': True,
        'stock_quantity': 5,
        'stock_status': 'instock',
        'images': [{'id': 1, 'src': f'https://shop.test/img/{number}.jpg', 'name': '', 'alt': ''}],
        'categories': [{'id': 7, 'name': 'Poleras &amp; Polerones', 'slug': 'poleras'}],
        'variations': [],
    }
    product.update(overrides)
    return product


def make_products(count, start=1):
    return [make_product(number) for number in range(start, start + count)]


def make_order(number, line_items=None, **overrides):
    """Orden con la forma del JSON de GET /orders"""
    order = {
        'id': 5000 + number,
        'number': str(5000 + number),
        'status': 'processing',
        'currency': 'CLP',
        'date_created': '2024-03-01T10:00:00',
        'date_created_gmt': '2024-03-01T13:00:00',
        'total': '45.98',
        'total_tax': '0.00',
        'shipping_total': '6.00',
        'discount_total': '0.00',
        'billing': {
            'first_name': 'Ana',
            'last_name': 'Pérez',
            'address_1': 'Av. Siempre Viva 742',
            'city': 'Santiago',
            'country': 'CL',
            'email': 'ana@example.com',
            'phone': '+56 9 1234 5678',
        },
        'shipping': {
            'first_name': 'Ana',
            'last_name': 'Pérez',
            'address_1': '',
        },
        'line_items': line_items if line_items is not None else [
            {'id': 1, 'name': 'Producto 1', 'product_id': 1001, 'variation_id': 0,
             'quantity': 2, 'price': 19.99, 'subtotal': '39.98', 'total': '39.98'},
        ],
    }
    order.update(overrides)
    return order


def create_integration(tenant_id=TENANT_ID, is_active=True, **config):
    values = {
        'store_url': 'https://shop.test',
        'consumer_key': 'ck_test_1234',
        'consumer_secret': 'cs_test_secret',
        'api_version': 'wc/v3',
    }
    values.update(config)
    return TenantIntegration.objects.create(
        tenant_id=tenant_id,
        integration_type=TenantIntegration.TYPE_WOOCOMMERCE,
        is_active=is_active,
        config=values,
    )


class FakeWooClient:
    """
    Cliente en memoria con la misma interfaz de paginación que WooCommerceClient

    `failures` mapea número de página -> lista de excepciones que se lanzan en
    orden antes de responder normalmente.
    """

    def __init__(self, products=None, orders=None, failures=None, on_page=None):
        self.products = products or []
        self.orders = orders or []
        self.failures = {page: list(errors) for page, errors in (failures or {}).items()}
        self.on_page = on_page
        self.calls = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.closed = True

    def _page(self, entity, records, page, per_page, filters=None):
        self.calls.append((entity, page, per_page, dict(filters or {})))
        pending = self.failures.get(page)
        if pending:
            raise pending.pop(0)
        start = (page - 1) * per_page
        result = copy.deepcopy(records[start:start + per_page])
        if self.on_page:
            self.on_page(page)
        return result

    def get_products(self, page=1, per_page=10, filters=None):
        return self._page('products', self.products, page, per_page, filters)

    def get_orders(self, page=1, per_page=10, filters=None):
        return self._page('orders', self.orders, page, per_page, filters)

    def pages_requested(self, entity='products'):
        return [page for name, page, _, _ in self.calls if name == entity]

    def filters_sent(self, entity='products'):
        return [filters for name, _, _, filters in self.calls if name == entity]


def build_context(client, tenant_id=TENANT_ID, **kwargs):
    """SyncContext sin esperas y con el cliente falso inyectado"""
    kwargs.setdefault('page_delay', 0)
    kwargs.setdefault('retry_policy', RetryPolicy(max_attempts=2, base_delay=0, jitter=0))
    return SyncContext(tenant_id=tenant_id, client_factory=lambda integration: client, **kwargs)
