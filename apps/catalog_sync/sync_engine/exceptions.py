"""
Jerarquía de errores del motor de sincronización

Fatales (detienen la ejecución completa): ConfigurationError,
IntegrationNotConfigured, IntegrationInactive, AuthError.
Recuperables / acotados a un ítem o página: RateLimitError, TransportError
(RequestTimeoutError, NetworkError), UpstreamError, MappingError,
PersistenceError.
"""

DEFAULT_RETRY_AFTER_SECONDS = 60


class CatalogSyncError(Exception):
    """Excepción base del motor de sincronización"""

    fatal = False


class ConfigurationError(CatalogSyncError):
    """Faltan argumentos o credenciales para construir el cliente"""

    fatal = True


class IntegrationNotConfigured(CatalogSyncError):
    """El tenant no tiene una integración WooCommerce registrada"""

    fatal = True

    def __init__(self, tenant_id):
        self.tenant_id = tenant_id
        super().__init__(f"Integración WooCommerce no configurada para el tenant {tenant_id}")


class IntegrationInactive(CatalogSyncError):
    """La integración existe pero está deshabilitada"""

    fatal = True

    def __init__(self, tenant_id):
        self.tenant_id = tenant_id
        super().__init__(f"Integración WooCommerce inactiva para el tenant {tenant_id}")


class AuthError(CatalogSyncError):
    """Credenciales inválidas (401) o permisos insuficientes (403)"""

    fatal = True

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(CatalogSyncError):
    """HTTP 429: la tienda pide esperar `retry_after` segundos"""

    def __init__(self, retry_after=DEFAULT_RETRY_AFTER_SECONDS):
        self.retry_after = retry_after
        super().__init__(f"Rate limit excedido. Reintentar en {retry_after} segundos")


class TransportError(CatalogSyncError):
    """Error de transporte (reintentable)"""


class RequestTimeoutError(TransportError):
    """La petición superó el timeout configurado"""


class NetworkError(TransportError):
    """Fallo de DNS o de conexión"""


class UpstreamError(CatalogSyncError):
    """Respuesta no-2xx inesperada; fatal solo para esa petición"""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class MappingError(CatalogSyncError):
    """Registro de WooCommerce mal formado (acotado al ítem)"""


class PersistenceError(CatalogSyncError):
    """Conflicto o violación en almacenamiento (acotado al ítem)"""


class SyncCancelled(CatalogSyncError):
    """La ejecución fue cancelada mediante su CancellationToken"""
