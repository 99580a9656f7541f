"""
Serializers para la API de sincronización de catálogo
"""

from rest_framework import serializers

from .models import TenantIntegration

CONFIG_FIELDS = ('store_url', 'consumer_key', 'consumer_secret', 'api_version')


class TenantIntegrationSerializer(serializers.ModelSerializer):
    """
    Serializer para integraciones de tenant

    Las credenciales se guardan dentro de `config`; el secret nunca se
    devuelve y de la consumer key solo se expone un sufijo.
    """

    store_url = serializers.URLField(max_length=1000, required=False)
    consumer_key = serializers.CharField(write_only=True, required=False, trim_whitespace=True)
    consumer_secret = serializers.CharField(
        write_only=True,
        required=False,
        trim_whitespace=True,
        style={'input_type': 'password'}
    )
    api_version = serializers.CharField(required=False, max_length=20)
    consumer_key_hint = serializers.SerializerMethodField()
    last_sync_at = serializers.ReadOnlyField()
    has_credentials = serializers.ReadOnlyField()

    class Meta:
        model = TenantIntegration
        fields = [
            'id', 'tenant_id', 'integration_type', 'is_active',
            'store_url', 'consumer_key', 'consumer_secret', 'api_version',
            'consumer_key_hint', 'has_credentials', 'last_sync_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'tenant_id': {'required': False},
        }
        # unique_together se valida en validate() con el tenant ya resuelto
        validators = []

    def get_consumer_key_hint(self, obj):
        key = (obj.config or {}).get('consumer_key') or ''
        if not key:
            return None
        return f"...{key[-4:]}"

    def validate_store_url(self, value):
        return value.rstrip('/')

    def validate(self, data):
        """El tenant sale del request si no viene en el cuerpo"""
        tenant_id = data.get('tenant_id') or self.context.get('tenant_id')
        if self.instance is None:
            if not tenant_id:
                raise serializers.ValidationError({'tenant_id': 'Se requiere tenant_id'})
            data['tenant_id'] = tenant_id

            missing = [key for key in ('store_url', 'consumer_key', 'consumer_secret') if not data.get(key)]
            if missing:
                raise serializers.ValidationError({key: 'Este campo es requerido.' for key in missing})

            integration_type = data.get('integration_type', TenantIntegration.TYPE_WOOCOMMERCE)
            if TenantIntegration.objects.filter(tenant_id=tenant_id, integration_type=integration_type).exists():
                raise serializers.ValidationError(
                    'El tenant ya tiene una integración de este tipo'
                )
        elif 'tenant_id' in data and data['tenant_id'] != self.instance.tenant_id:
            raise serializers.ValidationError({'tenant_id': 'No se puede cambiar el tenant de una integración'})
        return data

    @staticmethod
    def _pop_config(validated_data):
        return {key: validated_data.pop(key) for key in CONFIG_FIELDS if key in validated_data}

    def create(self, validated_data):
        config = self._pop_config(validated_data)
        return TenantIntegration.objects.create(config=config, **validated_data)

    def update(self, instance, validated_data):
        changes = self._pop_config(validated_data)
        if changes:
            instance.config = {**(instance.config or {}), **changes}
        return super().update(instance, validated_data)


class TestConnectionSerializer(serializers.Serializer):
    """Credenciales opcionales para probar antes de guardar"""

    store_url = serializers.URLField(max_length=1000, required=False)
    consumer_key = serializers.CharField(required=False, write_only=True)
    consumer_secret = serializers.CharField(required=False, write_only=True)
    api_version = serializers.CharField(required=False, max_length=20)


class SyncStatusSerializer(serializers.Serializer):
    """Estado de la sincronización de un tenant"""

    tenant_id = serializers.CharField()
    configured = serializers.BooleanField()
    is_active = serializers.BooleanField()
    last_sync_at = serializers.CharField(allow_null=True)
    synced_products = serializers.IntegerField()
    synced_orders = serializers.IntegerField()
    store_url = serializers.CharField(allow_null=True)
    sync_running = serializers.BooleanField()
