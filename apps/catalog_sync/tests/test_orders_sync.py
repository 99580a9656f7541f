"""
Tests de la sincronización de órdenes
"""

from decimal import Decimal

from django.test import TestCase

from apps.catalog_sync.sync_engine.exceptions import UpstreamError
from apps.catalog_sync.sync_engine.orchestrator import CatalogSyncOrchestrator, RunStatus
from apps.shop.choices import OrderStatus
from apps.shop.models import Order, OrderItem, Product, ProductVariant
from .fakes import FakeWooClient, TENANT_ID, build_context, create_integration, make_order, make_products


class OrderSyncTestCase(TestCase):
    """Tests para CatalogSyncOrchestrator.sync_orders"""

    def setUp(self):
        create_integration()
        products = make_products(2)
        CatalogSyncOrchestrator(build_context(FakeWooClient(products=products))).sync_products()

    def _sync(self, client, **kwargs):
        return CatalogSyncOrchestrator(build_context(client, **kwargs)).sync_orders()

    def test_orders_and_items_created(self):
        client = FakeWooClient(orders=[make_order(1), make_order(2)])

        report = self._sync(client)

        self.assertEqual(report.status, RunStatus.COMPLETED)
        self.assertEqual(report.created, 2)
        self.assertEqual(client.pages_requested('orders'), [1])

        order = Order.objects.get(external_id='5001')
        self.assertEqual(order.tenant_id, TENANT_ID)
        self.assertEqual(order.external_source, 'woocommerce')
        self.assertEqual(order.status, OrderStatus.PROCESSING)
        self.assertEqual(order.total_amount, Decimal('45.98'))
        self.assertEqual(order.billing_address['city'], 'Santiago')
        self.assertIsNone(order.shipping_address)

        item = order.items.get()
        product = Product.objects.get(external_id='1001')
        self.assertEqual(item.product, product)
        self.assertEqual(item.variant, ProductVariant.objects.get(product=product))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.total_price, Decimal('39.98'))

    def test_rerun_is_unchanged(self):
        self._sync(FakeWooClient(orders=[make_order(1)]))

        report = self._sync(FakeWooClient(orders=[make_order(1)]))

        self.assertEqual(report.created, 0)
        self.assertEqual(report.unchanged, 1)
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(OrderItem.objects.count(), 1)

    def test_status_change_updates_order(self):
        self._sync(FakeWooClient(orders=[make_order(1)]))

        report = self._sync(FakeWooClient(orders=[make_order(1, status='wc-completed')]))

        self.assertEqual(report.updated, 1)
        self.assertEqual(Order.objects.get().status, OrderStatus.COMPLETED)

    def test_changed_items_are_replaced(self):
        self._sync(FakeWooClient(orders=[make_order(1)]))
        items = [
            {'product_id': 1001, 'quantity': 1, 'price': '19.99', 'total': '19.99'},
            {'product_id': 1002, 'quantity': 3, 'price': '19.99', 'total': '59.97'},
        ]

        report = self._sync(FakeWooClient(orders=[make_order(1, line_items=items)]))

        self.assertEqual(report.updated, 1)
        order = Order.objects.get()
        self.assertEqual(order.items.count(), 2)
        self.assertEqual(
            sorted(order.items.values_list('quantity', flat=True)),
            [1, 3]
        )

    def test_unknown_products_are_skipped(self):
        """Test que las líneas sin producto sincronizado se omiten y se cuentan"""
        items = [
            {'product_id': 1001, 'quantity': 1, 'price': '19.99', 'total': '19.99'},
            {'product_id': 8888, 'quantity': 1, 'price': '5', 'total': '5'},
        ]

        report = self._sync(FakeWooClient(orders=[make_order(1, line_items=items)]))

        self.assertEqual(report.created, 1)
        self.assertEqual(report.errors, 0)
        self.assertEqual(report.skipped_items, 1)
        self.assertEqual(OrderItem.objects.count(), 1)

    def test_invalid_order_is_isolated(self):
        report = self._sync(FakeWooClient(orders=[make_order(1), make_order(2, id=None)]))

        self.assertEqual(report.created, 1)
        self.assertEqual(report.errors, 1)

    def test_upstream_failure_is_incomplete(self):
        client = FakeWooClient(orders=[make_order(1)], failures={1: [UpstreamError('Boom', 500)]})

        report = self._sync(client)

        self.assertEqual(report.status, RunStatus.INCOMPLETE)
        self.assertEqual(report.incomplete_pages, [1])
        self.assertEqual(Order.objects.count(), 0)
