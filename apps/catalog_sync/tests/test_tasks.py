"""
Tests de las tareas Celery (modo eager)
"""

from unittest import mock

from django.core.cache import cache
from django.test import TestCase

from apps.catalog_sync import tasks
from apps.catalog_sync.sync_engine.orchestrator import RunStatus, SyncReport
from .fakes import TENANT_ID, create_integration


class SyncTasksTestCase(TestCase):
    """Tests para sync_tenant_products / sync_tenant_orders"""

    def setUp(self):
        cache.clear()

    @mock.patch('apps.catalog_sync.tasks.run_product_sync')
    def test_product_task_returns_report(self, run_product_sync):
        run_product_sync.return_value = SyncReport(entity='products', tenant_id=TENANT_ID, created=4)

        result = tasks.sync_tenant_products.apply(args=[TENANT_ID]).get()

        run_product_sync.assert_called_once_with(TENANT_ID)
        self.assertTrue(result['success'])
        self.assertEqual(result['created'], 4)
        self.assertIn('task_id', result)
        self.assertIsNone(cache.get(tasks.tenant_lock_key(TENANT_ID)))

    @mock.patch('apps.catalog_sync.tasks.run_order_sync')
    def test_failed_report_is_not_success(self, run_order_sync):
        report = SyncReport(entity='orders', tenant_id=TENANT_ID)
        report.fail('Integración WooCommerce no configurada')
        run_order_sync.return_value = report

        result = tasks.sync_tenant_orders.apply(args=[TENANT_ID]).get()

        self.assertFalse(result['success'])
        self.assertEqual(result['status'], RunStatus.FAILED.value)

    @mock.patch('apps.catalog_sync.tasks.run_product_sync')
    def test_lock_prevents_concurrent_runs(self, run_product_sync):
        cache.add(tasks.tenant_lock_key(TENANT_ID), 'locked', 60)

        result = tasks.sync_tenant_products.apply(args=[TENANT_ID]).get()

        self.assertFalse(result['success'])
        self.assertEqual(result['error'], 'Sincronización ya en ejecución')
        run_product_sync.assert_not_called()

    @mock.patch('apps.catalog_sync.tasks.run_product_sync', side_effect=RuntimeError('boom'))
    def test_lock_released_on_exception(self, _run):
        with self.assertRaises(RuntimeError):
            tasks.sync_tenant_products.apply(args=[TENANT_ID])

        self.assertIsNone(cache.get(tasks.tenant_lock_key(TENANT_ID)))

    @mock.patch('apps.catalog_sync.tasks.run_product_sync')
    def test_other_tenants_are_independent(self, run_product_sync):
        run_product_sync.return_value = SyncReport(entity='products', tenant_id='tenant-b')
        cache.add(tasks.tenant_lock_key(TENANT_ID), 'locked', 60)

        result = tasks.sync_tenant_products.apply(args=['tenant-b']).get()

        self.assertTrue(result['success'])


class ConnectionTaskTestCase(TestCase):

    @mock.patch('apps.catalog_sync.tasks.WooCommerceClient.test_connection')
    def test_connection_success(self, test_connection):
        create_integration()
        test_connection.return_value = {'success': True, 'store_name': 'Mi Tienda'}

        result = tasks.test_tenant_connection.apply(args=[TENANT_ID]).get()

        self.assertTrue(result['success'])
        self.assertEqual(result['tenant_id'], TENANT_ID)
        self.assertIn('timestamp', result)

    def test_connection_inactive_integration(self):
        create_integration(is_active=False)

        result = tasks.test_tenant_connection.apply(args=[TENANT_ID]).get()

        self.assertFalse(result['success'])
        self.assertIn('inactiva', result['error'])
