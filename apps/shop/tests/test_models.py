"""
Tests de las restricciones del esquema de la tienda
"""

from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.shop.models import LegacyProduct, Order, Product, ProductCategory, ProductVariant


class ProductConstraintsTestCase(TestCase):
    """Tests para las restricciones únicas de productos"""

    def test_handle_unique_per_tenant(self):
        Product.objects.create(tenant_id='t1', name='Uno', handle='polera')

        with self.assertRaises(IntegrityError), transaction.atomic():
            Product.objects.create(tenant_id='t1', name='Dos', handle='polera')

        Product.objects.create(tenant_id='t2', name='Otro tenant', handle='polera')
        self.assertEqual(Product.objects.filter(handle='polera').count(), 2)

    def test_external_id_unique_per_tenant_and_source(self):
        Product.objects.create(tenant_id='t1', name='A', handle='a', external_id='10', external_source='woocommerce')

        with self.assertRaises(IntegrityError), transaction.atomic():
            Product.objects.create(tenant_id='t1', name='B', handle='b', external_id='10', external_source='woocommerce')

    def test_products_without_external_id_do_not_collide(self):
        Product.objects.create(tenant_id='t1', name='A', handle='a')
        Product.objects.create(tenant_id='t1', name='B', handle='b')

        self.assertEqual(Product.objects.filter(external_id__isnull=True).count(), 2)

    def test_variant_sku_unique_per_product(self):
        product = Product.objects.create(tenant_id='t1', name='A', handle='a')
        ProductVariant.objects.create(tenant_id='t1', product=product, sku='SKU-1')

        with self.assertRaises(IntegrityError), transaction.atomic():
            ProductVariant.objects.create(tenant_id='t1', product=product, sku='SKU-1', title='Otra')

        ProductVariant.objects.create(tenant_id='t1', product=product, sku=None, title='Sin SKU 1')
        ProductVariant.objects.create(tenant_id='t1', product=product, sku=None, title='Sin SKU 2')
        self.assertEqual(product.variants.count(), 3)


class CatalogConstraintsTestCase(TestCase):

    def test_category_slug_unique_per_tenant(self):
        ProductCategory.objects.create(tenant_id='t1', name='Poleras', slug='poleras')

        with self.assertRaises(IntegrityError), transaction.atomic():
            ProductCategory.objects.create(tenant_id='t1', name='Poleras 2', slug='poleras')

    def test_legacy_slug_unique_per_tenant(self):
        LegacyProduct.objects.create(tenant_id='t1', name='A', slug='a')

        with self.assertRaises(IntegrityError), transaction.atomic():
            LegacyProduct.objects.create(tenant_id='t1', name='A', slug='a')

    def test_order_external_id_unique(self):
        Order.objects.create(tenant_id='t1', order_number='1', external_id='1', external_source='woocommerce')

        with self.assertRaises(IntegrityError), transaction.atomic():
            Order.objects.create(tenant_id='t1', order_number='1', external_id='1', external_source='woocommerce')

        Order.objects.create(tenant_id='t2', order_number='1', external_id='1', external_source='woocommerce')
