"""
Cliente REST para la API de WooCommerce

Maneja autenticación Basic (consumer key/secret), paginación y clasificación
de errores de transporte, autenticación y rate limit. No valida el esquema de
las respuestas: eso es responsabilidad del mapper.
"""

import base64
import json
import logging
import math
from datetime import datetime, timezone as dt_timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

import requests

from .backoff import RetryPolicy
from .exceptions import (
    DEFAULT_RETRY_AFTER_SECONDS,
    AuthError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = 'wc/v3'
DEFAULT_TIMEOUT_MS = 30000
CONNECT_TIMEOUT_SECONDS = 10
MAX_PER_PAGE = 100


class WooCommerceClient:
    """
    Cliente para una tienda WooCommerce

    Una instancia por ejecución de sincronización; nunca se comparte entre
    tenants. Usable como context manager para cerrar la sesión HTTP.
    """

    BODY_METHODS = ('POST', 'PUT', 'PATCH')

    def __init__(self, store_url: str, consumer_key: str, consumer_secret: str,
                 api_version: str = DEFAULT_API_VERSION, timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 session: Optional[requests.Session] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        if not store_url or not consumer_key or not consumer_secret:
            raise ConfigurationError(
                "La configuración de WooCommerce requiere store_url, consumer_key y consumer_secret"
            )

        self.store_url = store_url.rstrip('/')
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.api_version = (api_version or DEFAULT_API_VERSION).strip('/')
        self.timeout_ms = timeout_ms or DEFAULT_TIMEOUT_MS
        self.base_url = f"{self.store_url}/wp-json/{self.api_version}"
        self.session = session or requests.Session()
        self.retry_policy = retry_policy or RetryPolicy()

    @classmethod
    def from_integration(cls, integration, **kwargs) -> 'WooCommerceClient':
        """Construye el cliente a partir de un `Integration` resuelto"""
        return cls(
            store_url=integration.store_url,
            consumer_key=integration.consumer_key,
            consumer_secret=integration.consumer_secret,
            api_version=integration.api_version,
            **kwargs
        )

    def __repr__(self):
        return f"<WooCommerceClient {self.base_url}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.session.close()

    @property
    def timeout(self):
        """
        Tupla (connect, read) para requests

        `timeout_ms` acota cada espera de socket, no la duración total: una
        respuesta que llega por goteo puede superar `timeout_ms` en total.
        """
        read = self.timeout_ms / 1000
        return (min(CONNECT_TIMEOUT_SECONDS, read), read)

    def auth_header(self) -> str:
        """Valor del header Authorization (Basic). Nunca se registra en logs."""
        credentials = f"{self.consumer_key}:{self.consumer_secret}"
        encoded = base64.b64encode(credentials.encode('utf-8')).decode('ascii')
        return f"Basic {encoded}"

    def request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Ejecuta una petición contra la API

        Args:
            method: GET, POST, PUT, PATCH o DELETE
            endpoint: ruta relativa a base_url (p. ej. '/products')
            params: query string para GET, cuerpo JSON para POST/PUT/PATCH

        Returns:
            JSON decodificado tal cual, o None si la respuesta viene vacía
        """
        method = method.upper()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        options = {
            'headers': {
                'Authorization': self.auth_header(),
                'Accept': 'application/json',
            },
            'timeout': self.timeout,
        }

        if method == 'GET':
            options['params'] = self._build_query(params)
        elif method in self.BODY_METHODS and params:
            options['json'] = params

        try:
            response = self.session.request(method, url, **options)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Timeout después de {self.timeout_ms}ms: {method} {endpoint}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Error de red en {method} {endpoint}: {e}") from e

        return self._handle_response(response, method, endpoint)

    def get_products(self, page: int = 1, per_page: int = 10,
                     filters: Optional[Dict[str, Any]] = None) -> Any:
        """GET /products paginado"""
        return self.request('GET', '/products', self._page_params(page, per_page, filters))

    def get_orders(self, page: int = 1, per_page: int = 10,
                   filters: Optional[Dict[str, Any]] = None) -> Any:
        """GET /orders paginado"""
        return self.request('GET', '/orders', self._page_params(page, per_page, filters))

    def get_product(self, product_id) -> Any:
        return self.retry_policy.run(
            lambda: self.request('GET', f'/products/{product_id}'),
            description=f"GET /products/{product_id}"
        )

    def get_order(self, order_id) -> Any:
        return self.retry_policy.run(
            lambda: self.request('GET', f'/orders/{order_id}'),
            description=f"GET /orders/{order_id}"
        )

    def test_connection(self) -> Dict[str, Any]:
        """
        Verifica credenciales y conectividad. Nunca lanza excepciones.

        Primero consulta /system_status; si falla (algunas tiendas lo
        restringen) intenta leer un producto como segunda prueba de vida.
        """
        try:
            status_data = self.request('GET', '/system_status')
            environment = {}
            if isinstance(status_data, dict):
                environment = status_data.get('environment') or {}
            return {
                'success': True,
                'store_name': environment.get('site_title') or environment.get('site_url') or self.store_url,
                'api_version': self.api_version,
                'wc_version': environment.get('version'),
            }
        except Exception as e:
            logger.warning(f"⚠️ /system_status no disponible en {self.store_url}: {e}")

        try:
            self.get_products(1, 1)
            return {
                'success': True,
                'store_name': self.store_url,
                'api_version': self.api_version,
            }
        except Exception as e:
            logger.error(f"❌ Conexión WooCommerce fallida para {self.store_url}: {e}")
            return {
                'success': False,
                'error': str(e),
            }

    def _page_params(self, page, per_page, filters) -> Dict[str, Any]:
        params = dict(filters or {})
        params['page'] = max(1, int(page or 1))
        params['per_page'] = min(max(1, int(per_page or 1)), MAX_PER_PAGE)
        return params

    @staticmethod
    def _build_query(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Descarta valores None y une listas con comas (formato WooCommerce)"""
        query = {}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                query[key] = ','.join(str(v) for v in value)
            else:
                query[key] = value
        return query

    def _handle_response(self, response, method: str, endpoint: str) -> Any:
        status_code = response.status_code

        if status_code == 429:
            retry_after = self._parse_retry_after(response.headers.get('Retry-After'))
            logger.warning(f"⏳ Rate limit de WooCommerce en {method} {endpoint}. Retry-After: {retry_after}s")
            raise RateLimitError(retry_after)

        if status_code == 401:
            raise AuthError("invalid credentials", status_code)

        if status_code == 403:
            raise AuthError("insufficient permissions", status_code)

        if not 200 <= status_code < 300:
            message = self._extract_error_message(response)
            logger.error(f"❌ WooCommerce {method} {endpoint} -> {status_code}: {message}")
            raise UpstreamError(message, status_code)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Respuesta JSON inválida en {method} {endpoint}", status_code
            ) from e

    @staticmethod
    def _extract_error_message(response) -> str:
        text = response.text or ''
        message = ''
        try:
            data = json.loads(text)
            if isinstance(data, dict):
                message = data.get('message') or data.get('error') or ''
                if message and data.get('code'):
                    message = f"{message} (code: {data['code']})"
        except ValueError:
            message = text.strip()
        return message or f"HTTP {response.status_code}"

    @staticmethod
    def _parse_retry_after(value) -> int:
        """Retry-After en segundos o como fecha HTTP; 60s si falta o no se entiende"""
        if value is None or str(value).strip() == '':
            return DEFAULT_RETRY_AFTER_SECONDS
        try:
            return max(0, int(math.ceil(float(value))))
        except (TypeError, ValueError):
            pass
        try:
            retry_at = parsedate_to_datetime(str(value))
        except (TypeError, ValueError):
            return DEFAULT_RETRY_AFTER_SECONDS
        if retry_at is None:
            return DEFAULT_RETRY_AFTER_SECONDS
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=dt_timezone.utc)
        delta = (retry_at - datetime.now(dt_timezone.utc)).total_seconds()
        return max(0, int(math.ceil(delta)))
