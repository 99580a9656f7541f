"""
Vistas de la API para sincronización de catálogo WooCommerce

El tenant del request lo resuelve un middleware externo (`request.tenant_id`);
como alternativa se acepta el header X-Tenant-ID o el parámetro tenant_id.
"""

import logging

from django.core.cache import cache
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import TenantIntegration
from .serializers import SyncStatusSerializer, TenantIntegrationSerializer, TestConnectionSerializer
from .sync_engine.client import WooCommerceClient
from .sync_engine.config import IntegrationConfigResolver, SyncSettings
from .sync_engine.exceptions import CatalogSyncError, IntegrationNotConfigured
from .sync_engine.persistence import CatalogGateway
from .tasks import sync_tenant_orders, sync_tenant_products, tenant_lock_key

logger = logging.getLogger(__name__)


def get_request_tenant_id(request):
    """Tenant del request (middleware, header o parámetro)"""
    tenant_id = getattr(request, 'tenant_id', None)
    if not tenant_id:
        tenant_id = request.headers.get('X-Tenant-ID')
    if not tenant_id:
        tenant_id = request.query_params.get('tenant_id')
    if not tenant_id and hasattr(request.data, 'get'):
        tenant_id = request.data.get('tenant_id')
    return str(tenant_id).strip() if tenant_id else None


def _missing_tenant_response():
    return Response(
        {'error': 'No se pudo determinar el tenant del request'},
        status=status.HTTP_400_BAD_REQUEST
    )


class TenantIntegrationViewSet(viewsets.ModelViewSet):
    """
    ViewSet para integraciones de tenant

    Endpoints:
    - GET /api/v1/woocommerce/integrations/ - Listar integraciones del tenant
    - POST /api/v1/woocommerce/integrations/ - Crear integración
    - GET/PUT/PATCH/DELETE /api/v1/woocommerce/integrations/{id}/
    """

    serializer_class = TenantIntegrationSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['integration_type', 'is_active']
    ordering_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']

    def get_queryset(self):
        tenant_id = get_request_tenant_id(self.request)
        if not tenant_id:
            return TenantIntegration.objects.none()
        return TenantIntegration.objects.filter(tenant_id=tenant_id)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['tenant_id'] = get_request_tenant_id(self.request)
        return context

    def perform_create(self, serializer):
        integration = serializer.save()
        logger.info(f"✅ Integración {integration.integration_type} creada para tenant {integration.tenant_id}")

    def perform_destroy(self, instance):
        logger.info(f"🗑️ Integración {instance.integration_type} eliminada para tenant {instance.tenant_id}")
        instance.delete()


class TestConnectionViewSet(viewsets.ViewSet):
    """
    POST /api/v1/woocommerce/test-connection/

    Sin cuerpo prueba la integración guardada; con credenciales en el cuerpo
    las prueba antes de guardarlas.
    """

    permission_classes = [IsAuthenticated]

    def create(self, request):
        tenant_id = get_request_tenant_id(request)
        if not tenant_id:
            return _missing_tenant_response()

        serializer = TestConnectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sync_settings = SyncSettings.from_django_settings()
        try:
            integration = IntegrationConfigResolver().resolve(tenant_id, serializer.validated_data)
            with WooCommerceClient.from_integration(integration, timeout_ms=sync_settings.request_timeout_ms) as client:
                result = client.test_connection()
        except IntegrationNotConfigured as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except CatalogSyncError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"🔌 Prueba de conexión para tenant {tenant_id}: {'OK' if result.get('success') else 'fallida'}")
        response_status = status.HTTP_200_OK if result.get('success') else status.HTTP_400_BAD_REQUEST
        return Response(result, status=response_status)


class SyncViewSet(viewsets.ViewSet):
    """
    Gestión de sincronizaciones del tenant

    Endpoints:
    - GET /api/v1/woocommerce/sync/status/ - Estado de la sincronización
    - POST /api/v1/woocommerce/sync/products/ - Encolar sincronización de productos
    - POST /api/v1/woocommerce/sync/orders/ - Encolar sincronización de órdenes
    """

    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['get'], url_path='status', url_name='status')
    def sync_status(self, request):
        tenant_id = get_request_tenant_id(request)
        if not tenant_id:
            return _missing_tenant_response()

        record = IntegrationConfigResolver().get_record(tenant_id)
        gateway = CatalogGateway()
        data = {
            'tenant_id': tenant_id,
            'configured': bool(record and record.has_credentials),
            'is_active': bool(record and record.is_active),
            'last_sync_at': record.last_sync_at if record else None,
            'synced_products': gateway.count_synced_products(tenant_id),
            'synced_orders': gateway.count_synced_orders(tenant_id),
            'store_url': record.store_url if record else None,
            'sync_running': cache.get(tenant_lock_key(tenant_id)) is not None,
        }
        return Response(SyncStatusSerializer(data).data)

    @action(detail=False, methods=['post'])
    def products(self, request):
        return self._enqueue(request, sync_tenant_products, 'productos')

    @action(detail=False, methods=['post'])
    def orders(self, request):
        return self._enqueue(request, sync_tenant_orders, 'órdenes')

    def _enqueue(self, request, task, label):
        tenant_id = get_request_tenant_id(request)
        if not tenant_id:
            return _missing_tenant_response()

        try:
            IntegrationConfigResolver().resolve(tenant_id)
        except IntegrationNotConfigured as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except CatalogSyncError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        if cache.get(tenant_lock_key(tenant_id)) is not None:
            return Response(
                {'error': 'Ya hay una sincronización en ejecución para este tenant'},
                status=status.HTTP_409_CONFLICT
            )

        async_result = task.delay(tenant_id)
        logger.info(f"📤 Sincronización de {label} encolada para tenant {tenant_id} - Task ID: {async_result.id}")

        return Response({
            'message': f'Sincronización de {label} iniciada',
            'task_id': async_result.id,
            'tenant_id': tenant_id,
        }, status=status.HTTP_202_ACCEPTED)
