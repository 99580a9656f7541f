"""
Tests del mapper WooCommerce -> esquema normalizado
"""

from datetime import datetime, timezone
from decimal import Decimal

from django.test import SimpleTestCase

from apps.catalog_sync.sync_engine.exceptions import MappingError
from apps.catalog_sync.sync_engine.mapper import (
    WooOrderStatus,
    calculate_order_totals,
    map_categories,
    map_order,
    map_order_items,
    map_product,
    map_variants,
    normalize_handle,
    resolve_order_status,
    resolve_product_status,
)
from apps.shop.choices import OrderStatus, ProductStatus
from .fakes import TENANT_ID, make_order, make_product


class HandleTestCase(SimpleTestCase):
    """Tests para la generación de handles"""

    def test_ascii_folding_and_punctuation(self):
        """Test que acentos se pliegan a ASCII y la puntuación desaparece"""
        self.assertEqual(normalize_handle('Café Crème Brûlée!'), 'cafe-creme-brulee')

    def test_underscores_and_dash_runs(self):
        """Test que guiones bajos y guiones repetidos colapsan a un solo '-'"""
        self.assertEqual(normalize_handle('  Hello__World  --  Foo '), 'hello-world-foo')

    def test_only_allowed_characters(self):
        handle = normalize_handle('Polera "Edición" 100% algodón / talla M')
        self.assertRegex(handle, r'^[a-z0-9]+(-[a-z0-9]+)*$')

    def test_truncated_to_255(self):
        self.assertEqual(len(normalize_handle('a' * 300)), 255)

    def test_emoji_only_normalizes_to_empty(self):
        self.assertEqual(normalize_handle('🔥🔥🔥'), '')

    def test_slug_preferred_over_name(self):
        mapped = map_product(make_product(1, slug='mi-slug', name='Otro Nombre'), TENANT_ID)
        self.assertEqual(mapped['handle'], 'mi-slug')

    def test_name_used_when_slug_missing(self):
        mapped = map_product(make_product(1, slug='', name='Nice Shirt'), TENANT_ID)
        self.assertEqual(mapped['handle'], 'nice-shirt')

    def test_fallback_to_product_id(self):
        """Test que un nombre sin caracteres válidos usa product-{id}"""
        mapped = map_product(make_product(1, id=42, slug='', name='🔥🔥'), TENANT_ID)
        self.assertEqual(mapped['handle'], 'product-42')

    def test_empty_slug_and_name_raises(self):
        with self.assertRaises(MappingError):
            map_product(make_product(1, slug='', name=''), TENANT_ID)

    def test_handle_is_deterministic(self):
        record = make_product(3, slug='', name='Zapatillas Año Nuevo')
        self.assertEqual(map_product(record, TENANT_ID), map_product(record, TENANT_ID))


class ProductMappingTestCase(SimpleTestCase):
    """Tests para map_product y map_variants"""

    def test_product_fields(self):
        mapped = map_product(make_product(1), TENANT_ID)

        self.assertEqual(mapped['name'], 'Producto 1')
        self.assertEqual(mapped['status'], ProductStatus.ACTIVE)
        self.assertEqual(mapped['featured_image'], 'https://shop.test/img/1.jpg')
        self.assertEqual(mapped['external_id'], '1001')
        self.assertEqual(mapped['external_source'], 'woocommerce')
        self.assertEqual(mapped['tenant_id'], TENANT_ID)

    def test_missing_id_raises(self):
        with self.assertRaises(MappingError):
            map_product(make_product(1, id=None), TENANT_ID)

    def test_zero_id_raises(self):
        with self.assertRaises(MappingError):
            map_product(make_product(1, id=0), TENANT_ID)

    def test_non_dict_record_raises(self):
        with self.assertRaises(MappingError):
            map_product(['no', 'es', 'un', 'producto'], TENANT_ID)

    def test_status_table(self):
        self.assertEqual(resolve_product_status('publish'), ProductStatus.ACTIVE)
        for value in ('draft', 'pending', 'private', 'trash', 'future', '', None):
            self.assertEqual(resolve_product_status(value), ProductStatus.DRAFT)

    def test_no_images(self):
        mapped = map_product(make_product(1, images=[]), TENANT_ID)
        self.assertIsNone(mapped['featured_image'])

    def test_single_default_variant(self):
        variants = map_variants(make_product(1), 10, TENANT_ID)

        self.assertEqual(len(variants), 1)
        variant = variants[0]
        self.assertEqual(variant['title'], 'Default')
        self.assertEqual(variant['product_id'], 10)
        self.assertEqual(variant['sku'], 'SKU-1')
        self.assertEqual(variant['price'], Decimal('19.99'))
        self.assertIsNone(variant['compare_at_price'])
        self.assertEqual(variant['inventory_quantity'], 5)
        self.assertEqual(variant['inventory_management'], 'woocommerce')

    def test_sale_price_sets_compare_at(self):
        record = make_product(1, price='15', regular_price='20', sale_price='15')
        variant = map_variants(record, 1, TENANT_ID)[0]

        self.assertEqual(variant['price'], Decimal('15.00'))
        self.assertEqual(variant['compare_at_price'], Decimal('20.00'))

    def test_missing_price_and_stock(self):
        record = make_product(1, price='', regular_price='', sku='', manage_stock=False, stock_quantity=None)
        variant = map_variants(record, 1, TENANT_ID)[0]

        self.assertEqual(variant['price'], Decimal('0.00'))
        self.assertIsNone(variant['sku'])
        self.assertEqual(variant['inventory_quantity'], 0)
        self.assertIsNone(variant['inventory_management'])

    def test_variable_product_logs_warning(self):
        """Test que un producto variable genera una sola variante y un warning"""
        record = make_product(1, type='variable', variations=[11, 12, 13])

        with self.assertLogs('apps.catalog_sync.sync_engine.mapper', level='WARNING') as logs:
            variants = map_variants(record, 1, TENANT_ID)

        self.assertEqual(len(variants), 1)
        self.assertIn('3 variaciones', logs.output[0])

    def test_categories(self):
        categories = map_categories([
            {'id': 1, 'name': 'Poleras &amp; Polerones', 'slug': 'poleras'},
            {'id': 2, 'name': 'Accesorios', 'slug': ''},
            {'id': 3, 'name': 'Duplicada', 'slug': 'poleras'},
            {'id': 4, 'name': '', 'slug': ''},
        ], TENANT_ID)

        self.assertEqual([c['slug'] for c in categories], ['poleras', 'accesorios'])
        self.assertEqual(categories[0]['name'], 'Poleras & Polerones')


class OrderMappingTestCase(SimpleTestCase):
    """Tests para map_order, map_order_items y calculate_order_totals"""

    def test_status_table(self):
        self.assertEqual(resolve_order_status('on-hold'), OrderStatus.ON_HOLD)
        self.assertEqual(resolve_order_status('wc-completed'), OrderStatus.COMPLETED)
        self.assertEqual(resolve_order_status('checkout-draft'), OrderStatus.PENDING)
        self.assertEqual(resolve_order_status('something-else'), OrderStatus.PENDING)
        self.assertIs(WooOrderStatus.parse('REFUNDED'), WooOrderStatus.REFUNDED)

    def test_order_fields(self):
        mapped = map_order(make_order(1), TENANT_ID)

        self.assertEqual(mapped['order_number'], '5001')
        self.assertEqual(mapped['status'], OrderStatus.PROCESSING)
        self.assertEqual(mapped['customer_email'], 'ana@example.com')
        self.assertEqual(mapped['total_amount'], Decimal('45.98'))
        self.assertEqual(mapped['shipping_amount'], Decimal('6.00'))
        self.assertEqual(mapped['subtotal'], Decimal('39.98'))
        self.assertEqual(mapped['placed_at'], datetime(2024, 3, 1, 13, 0, tzinfo=timezone.utc))
        self.assertEqual(mapped['external_id'], '5001')

    def test_addresses_only_with_address_line(self):
        mapped = map_order(make_order(1), TENANT_ID)

        self.assertEqual(mapped['billing_address']['address1'], 'Av. Siempre Viva 742')
        self.assertEqual(mapped['billing_address']['email'], 'ana@example.com')
        self.assertIsNone(mapped['shipping_address'])

    def test_total_falls_back_to_line_items(self):
        record = make_order(1, total='', shipping_total='5', total_tax='1.50')
        mapped = map_order(record, TENANT_ID)

        self.assertEqual(mapped['total_amount'], Decimal('46.48'))

    def test_missing_id_raises(self):
        with self.assertRaises(MappingError):
            map_order(make_order(1, id=None), TENANT_ID)

    def test_items_resolved_through_product_map(self):
        record = make_order(1, line_items=[
            {'product_id': 1001, 'variation_id': 0, 'quantity': 2, 'price': '10', 'total': '20'},
            {'product_id': 9999, 'quantity': 1, 'price': '5', 'total': '5'},
        ])
        product_map = {'1001': {'product_id': 1, 'variant_id': 7}}

        items = map_order_items(record, 55, product_map)

        self.assertEqual(items[0]['product_id'], 1)
        self.assertEqual(items[0]['variant_id'], 7)
        self.assertEqual(items[0]['order_id'], 55)
        self.assertEqual(items[0]['total_price'], Decimal('20.00'))
        self.assertIsNone(items[1]['product_id'])

    def test_unit_price_derived_from_total(self):
        record = make_order(1, line_items=[{'product_id': 1001, 'quantity': 4, 'total': '10'}])
        items = map_order_items(record, 1, {})

        self.assertEqual(items[0]['unit_price'], Decimal('2.50'))

    def test_calculate_order_totals(self):
        totals = calculate_order_totals(
            [{'total_price': '10.10'}, {'unit_price': '2.50', 'quantity': 3}],
            shipping='4',
            tax='1.19'
        )

        self.assertEqual(totals['subtotal'], Decimal('17.60'))
        self.assertEqual(totals['total'], Decimal('22.79'))
