"""
Modelos de la tienda del tenant.

Estas tablas son el destino de la sincronización de catálogo: productos,
variantes, categorías, órdenes y la tabla heredada `pern_products` que todavía
consume el administrador de productos antiguo.
"""

from django.db import models
from django.db.models import Q

from core.models import TenantScopedModel
from .choices import ProductStatus, OrderStatus


class Product(TenantScopedModel):
    """
    Producto normalizado del catálogo

    Un producto importado conserva `external_id`/`external_source` para poder
    reconciliarlo en sincronizaciones posteriores.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    handle = models.CharField(
        max_length=255,
        help_text="Slug URL-safe, único por tenant"
    )
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.DRAFT
    )
    featured_image = models.URLField(max_length=1000, null=True, blank=True)

    external_id = models.CharField(max_length=255, null=True, blank=True)
    external_source = models.CharField(max_length=50, null=True, blank=True)

    class Meta:
        db_table = 'products'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'handle'],
                name='products_tenant_handle_uniq'
            ),
            models.UniqueConstraint(
                fields=['tenant_id', 'external_id', 'external_source'],
                condition=Q(external_id__isnull=False),
                name='products_tenant_external_uniq'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.handle})"


class ProductVariant(TenantScopedModel):
    """Variante vendible de un producto (precio, SKU e inventario)"""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='variants'
    )
    sku = models.CharField(max_length=255, null=True, blank=True)
    title = models.CharField(max_length=255, default='Default')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    compare_at_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )
    inventory_quantity = models.IntegerField(default=0)
    inventory_management = models.CharField(max_length=50, null=True, blank=True)

    class Meta:
        db_table = 'product_variants'
        ordering = ['product', 'title']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'sku'],
                condition=Q(sku__isnull=False),
                name='product_variants_product_sku_uniq'
            ),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.title}"


class ProductCategory(TenantScopedModel):
    """Categoría de productos"""

    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    products = models.ManyToManyField(
        Product,
        through='ProductCategoryRelation',
        related_name='categories'
    )

    class Meta:
        db_table = 'product_categories'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['slug', 'tenant_id'],
                name='product_categories_slug_tenant_uniq'
            ),
        ]

    def __str__(self):
        return self.name


class ProductCategoryRelation(models.Model):
    """Vínculo producto ↔ categoría"""

    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    category = models.ForeignKey(ProductCategory, on_delete=models.CASCADE)

    class Meta:
        db_table = 'product_category_relations'
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'category'],
                name='product_category_relations_uniq'
            ),
        ]


class LegacyProduct(TenantScopedModel):
    """
    Proyección desnormalizada en la tabla heredada `pern_products`

    Se escribe en paralelo a `products` para compatibilidad con el esquema
    anterior. Su consistencia con `Product` es best-effort.
    """

    product_id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    description = models.TextField(blank=True, default='')
    image_url = models.URLField(max_length=1000, null=True, blank=True)

    class Meta:
        db_table = 'pern_products'
        constraints = [
            models.UniqueConstraint(
                fields=['slug', 'tenant_id'],
                name='pern_products_slug_tenant_uniq'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"


class Order(TenantScopedModel):
    """Orden importada desde la tienda externa"""

    order_number = models.CharField(max_length=100)
    customer_email = models.EmailField(blank=True, default='')
    customer_first_name = models.CharField(max_length=255, blank=True, default='')
    customer_last_name = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING
    )
    currency = models.CharField(max_length=10, blank=True, default='')

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    shipping_address = models.JSONField(null=True, blank=True)
    billing_address = models.JSONField(null=True, blank=True)
    placed_at = models.DateTimeField(null=True, blank=True)

    external_id = models.CharField(max_length=255, null=True, blank=True)
    external_source = models.CharField(max_length=50, null=True, blank=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-placed_at', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'external_id', 'external_source'],
                condition=Q(external_id__isnull=False),
                name='orders_tenant_external_uniq'
            ),
        ]

    def __str__(self):
        return f"#{self.order_number} ({self.status})"


class OrderItem(models.Model):
    """Línea de una orden"""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items'
    )
    variant = models.ForeignKey(
        ProductVariant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items'
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        db_table = 'order_items'

    def __str__(self):
        return f"{self.quantity} x {self.product_id}"
