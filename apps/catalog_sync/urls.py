"""
URLs para la API de sincronización WooCommerce
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import SyncViewSet, TenantIntegrationViewSet, TestConnectionViewSet

router = DefaultRouter()
router.register(r'integrations', TenantIntegrationViewSet, basename='woocommerce-integrations')
router.register(r'test-connection', TestConnectionViewSet, basename='woocommerce-test-connection')
router.register(r'sync', SyncViewSet, basename='woocommerce-sync')

app_name = 'catalog_sync'

urlpatterns = [
    path('', include(router.urls)),
]
