"""
Tests del cliente REST de WooCommerce (sesión HTTP simulada)
"""

import base64
import json
from unittest import mock

import requests
from django.test import SimpleTestCase

from apps.catalog_sync.sync_engine.backoff import RetryPolicy
from apps.catalog_sync.sync_engine.client import WooCommerceClient
from apps.catalog_sync.sync_engine.exceptions import (
    AuthError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    UpstreamError,
)


def make_response(status_code=200, payload=None, text=None, headers=None):
    response = requests.Response()
    response.status_code = status_code
    if payload is not None:
        response._content = json.dumps(payload).encode('utf-8')
    elif text is not None:
        response._content = text.encode('utf-8')
    else:
        response._content = b''
    response.headers.update(headers or {})
    response.encoding = 'utf-8'
    return response


class WooCommerceClientTestCase(SimpleTestCase):
    """Tests para WooCommerceClient"""

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.session.request.return_value = make_response(payload=[])
        self.client = WooCommerceClient(
            'https://shop.test/',
            'ck_key',
            'cs_secret',
            session=self.session,
            retry_policy=RetryPolicy(max_attempts=3, base_delay=0, jitter=0),
        )

    def _last_call(self):
        args, kwargs = self.session.request.call_args
        return args, kwargs

    def test_missing_credentials(self):
        """Test que faltar cualquier credencial es un error de configuración"""
        with self.assertRaises(ConfigurationError):
            WooCommerceClient('https://shop.test', '', 'cs_secret')
        with self.assertRaises(ConfigurationError):
            WooCommerceClient('', 'ck_key', 'cs_secret')

    def test_base_url_strips_trailing_slash(self):
        self.assertEqual(self.client.base_url, 'https://shop.test/wp-json/wc/v3')

    def test_auth_header(self):
        expected = base64.b64encode(b'ck_key:cs_secret').decode('ascii')
        self.assertEqual(self.client.auth_header(), f'Basic {expected}')

    def test_repr_hides_credentials(self):
        self.assertNotIn('cs_secret', repr(self.client))
        self.assertNotIn('ck_key', repr(self.client))

    def test_get_products_clamps_pagination(self):
        self.client.get_products(page=0, per_page=500, filters={'status': 'publish'})

        args, kwargs = self._last_call()
        self.assertEqual(args, ('GET', 'https://shop.test/wp-json/wc/v3/products'))
        self.assertEqual(kwargs['params'], {'status': 'publish', 'page': 1, 'per_page': 100})
        self.assertEqual(kwargs['timeout'], (10, 30))
        self.assertTrue(kwargs['headers']['Authorization'].startswith('Basic '))

    def test_timeout_is_connect_read_tuple(self):
        """Test que timeout_ms se traduce a (connect, read) por socket"""
        client = WooCommerceClient('https://shop.test', 'ck', 'cs', timeout_ms=5000, session=self.session)

        self.assertEqual(client.timeout, (5, 5))

    def test_query_drops_none_and_joins_lists(self):
        self.client.request('GET', '/products', {'include': [1, 2, 3], 'search': None})

        _, kwargs = self._last_call()
        self.assertEqual(kwargs['params'], {'include': '1,2,3'})

    def test_post_sends_json_body(self):
        self.session.request.return_value = make_response(201, payload={'id': 9})

        result = self.client.request('POST', '/products', {'name': 'Nuevo'})

        _, kwargs = self._last_call()
        self.assertEqual(kwargs['json'], {'name': 'Nuevo'})
        self.assertNotIn('params', kwargs)
        self.assertEqual(result, {'id': 9})

    def test_rate_limit_with_retry_after(self):
        self.session.request.return_value = make_response(429, headers={'Retry-After': '30'})

        with self.assertRaises(RateLimitError) as ctx:
            self.client.get_products()

        self.assertEqual(ctx.exception.retry_after, 30)

    def test_rate_limit_default_retry_after(self):
        self.session.request.return_value = make_response(429)

        with self.assertRaises(RateLimitError) as ctx:
            self.client.get_products()

        self.assertEqual(ctx.exception.retry_after, 60)

    def test_unauthorized(self):
        self.session.request.return_value = make_response(401, payload={'code': 'woocommerce_rest_cannot_view'})

        with self.assertRaises(AuthError) as ctx:
            self.client.get_products()

        self.assertEqual(str(ctx.exception), 'invalid credentials')
        self.assertEqual(ctx.exception.status_code, 401)

    def test_forbidden(self):
        self.session.request.return_value = make_response(403)

        with self.assertRaises(AuthError) as ctx:
            self.client.get_orders()

        self.assertEqual(str(ctx.exception), 'insufficient permissions')

    def test_upstream_error_message_with_code(self):
        self.session.request.return_value = make_response(
            500, payload={'message': 'Boom', 'code': 'internal_error'}
        )

        with self.assertRaises(UpstreamError) as ctx:
            self.client.get_products()

        self.assertEqual(str(ctx.exception), 'Boom (code: internal_error)')
        self.assertEqual(ctx.exception.status_code, 500)

    def test_upstream_error_plain_text(self):
        self.session.request.return_value = make_response(502, text='Bad gateway')

        with self.assertRaises(UpstreamError) as ctx:
            self.client.get_products()

        self.assertEqual(str(ctx.exception), 'Bad gateway')

    def test_upstream_error_empty_body(self):
        self.session.request.return_value = make_response(503)

        with self.assertRaises(UpstreamError) as ctx:
            self.client.get_products()

        self.assertEqual(str(ctx.exception), 'HTTP 503')

    def test_empty_body_returns_none(self):
        self.session.request.return_value = make_response(204)
        self.assertIsNone(self.client.request('DELETE', '/products/1'))

    def test_invalid_json(self):
        self.session.request.return_value = make_response(200, text='<html>not json</html>')

        with self.assertRaises(UpstreamError):
            self.client.get_products()

    def test_timeout(self):
        self.session.request.side_effect = requests.exceptions.Timeout('slow')

        with self.assertRaises(RequestTimeoutError):
            self.client.get_products()

    def test_network_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('dns')

        with self.assertRaises(NetworkError):
            self.client.get_products()

    def test_get_product_retries_transport_errors(self):
        self.session.request.side_effect = [
            requests.exceptions.ConnectionError('reset'),
            make_response(payload={'id': 5}),
        ]

        self.assertEqual(self.client.get_product(5), {'id': 5})
        self.assertEqual(self.session.request.call_count, 2)

    def test_connection_via_system_status(self):
        self.session.request.return_value = make_response(payload={
            'environment': {'site_title': 'Mi Tienda', 'version': '8.5.0'}
        })

        result = self.client.test_connection()

        self.assertTrue(result['success'])
        self.assertEqual(result['store_name'], 'Mi Tienda')
        self.assertEqual(result['wc_version'], '8.5.0')

    def test_connection_falls_back_to_products(self):
        self.session.request.side_effect = [
            make_response(404, payload={'message': 'No route'}),
            make_response(payload=[{'id': 1}]),
        ]

        result = self.client.test_connection()

        self.assertTrue(result['success'])
        self.assertEqual(result['store_name'], 'https://shop.test')

    def test_connection_failure_never_raises(self):
        self.session.request.return_value = make_response(401)

        result = self.client.test_connection()

        self.assertFalse(result['success'])
        self.assertEqual(result['error'], 'invalid credentials')

    def test_context_manager_closes_session(self):
        with self.client:
            pass
        self.session.close.assert_called_once()
