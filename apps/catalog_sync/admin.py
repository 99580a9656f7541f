"""
Configuración del admin para integraciones de tenant
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from .models import TenantIntegration
from .tasks import sync_tenant_orders, sync_tenant_products


@admin.register(TenantIntegration)
class TenantIntegrationAdmin(admin.ModelAdmin):
    """Admin para integraciones de tenant"""

    list_display = [
        'tenant_id', 'integration_type', 'store_url_display',
        'is_active', 'credentials_display', 'last_sync_display', 'updated_at'
    ]
    list_filter = ['integration_type', 'is_active']
    search_fields = ['tenant_id']
    readonly_fields = ['created_at', 'updated_at']
    actions = ['trigger_product_sync', 'trigger_order_sync']
    fieldsets = (
        ('Información Básica', {
            'fields': ('tenant_id', 'integration_type', 'is_active')
        }),
        ('Configuración', {
            'fields': ('config',),
            'description': 'store_url, consumer_key, consumer_secret, api_version'
        }),
        ('Metadatos', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def store_url_display(self, obj):
        if not obj.store_url:
            return '-'
        return format_html('<a href="{}" target="_blank">{}</a>', obj.store_url, obj.store_url)
    store_url_display.short_description = 'Tienda'

    def credentials_display(self, obj):
        """Indica si las credenciales están completas (sin mostrarlas)"""
        if obj.has_credentials:
            return format_html('<span style="color: {};">{}</span>', 'green', '✓ Completas')
        return format_html('<span style="color: {};">{}</span>', 'red', '✗ Incompletas')
    credentials_display.short_description = 'Credenciales'

    def last_sync_display(self, obj):
        if not obj.last_sync_at:
            return format_html('<span style="color: {};">{}</span>', 'gray', 'Nunca')
        return obj.last_sync_at
    last_sync_display.short_description = 'Última Sincronización'

    def _enqueue(self, request, queryset, task, label):
        count = 0
        for integration in queryset.filter(is_active=True):
            task.delay(integration.tenant_id)
            count += 1
        self.message_user(request, f"Sincronización de {label} encolada para {count} tenant(s)", messages.SUCCESS)

    def trigger_product_sync(self, request, queryset):
        self._enqueue(request, queryset, sync_tenant_products, 'productos')
    trigger_product_sync.short_description = 'Sincronizar productos'

    def trigger_order_sync(self, request, queryset):
        self._enqueue(request, queryset, sync_tenant_orders, 'órdenes')
    trigger_order_sync.short_description = 'Sincronizar órdenes'
