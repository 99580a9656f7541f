"""
Configuración del admin para la tienda
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Product, ProductVariant, ProductCategory, LegacyProduct, Order, OrderItem
)


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ['sku', 'title', 'price', 'compare_at_price', 'inventory_quantity', 'inventory_management']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin para productos"""

    list_display = ['name', 'handle', 'tenant_id', 'status', 'source_display', 'updated_at']
    list_filter = ['status', 'external_source', 'tenant_id']
    search_fields = ['name', 'handle', 'external_id']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ProductVariantInline]

    def source_display(self, obj):
        """Mostrar origen externo con color"""
        if not obj.external_source:
            return '-'
        return format_html(
            '<span style="color: purple;">{} #{}</span>',
            obj.external_source,
            obj.external_id
        )
    source_display.short_description = 'Origen'


@admin.register(ProductCategory)
class ProductCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'tenant_id']
    search_fields = ['name', 'slug']


@admin.register(LegacyProduct)
class LegacyProductAdmin(admin.ModelAdmin):
    """Admin para la tabla heredada pern_products"""

    list_display = ['name', 'slug', 'tenant_id', 'price', 'updated_at']
    search_fields = ['name', 'slug']
    list_filter = ['tenant_id']


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ['product', 'variant']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin para órdenes"""

    list_display = ['order_number', 'tenant_id', 'customer_email', 'status', 'total_amount', 'placed_at']
    list_filter = ['status', 'external_source', 'tenant_id']
    search_fields = ['order_number', 'customer_email', 'external_id']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [OrderItemInline]
