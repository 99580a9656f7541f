"""
Mapeo de registros WooCommerce al esquema normalizado de la plataforma

Funciones puras: sin I/O y deterministas para una misma entrada. El único
efecto lateral permitido es un log de advertencia (productos variables).
"""

import html
import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from django.utils.text import slugify

from apps.shop.choices import ProductStatus, OrderStatus, EXTERNAL_SOURCE_WOOCOMMERCE
from .exceptions import MappingError
from .woo_models import WooCategory, WooOrder, WooProduct, WooAddress, to_decimal

logger = logging.getLogger(__name__)

HANDLE_MAX_LENGTH = 255
DEFAULT_VARIANT_TITLE = 'Default'
INVENTORY_MANAGED_BY = 'woocommerce'

_INVALID_HANDLE_CHARS = re.compile(r'[^a-z0-9-]')
_DASH_RUNS = re.compile(r'-{2,}')
_CENTS = Decimal('0.01')


class WooProductStatus(Enum):
    """Estados de producto que expone WooCommerce"""

    PUBLISH = 'publish'
    DRAFT = 'draft'
    PENDING = 'pending'
    PRIVATE = 'private'
    TRASH = 'trash'
    UNKNOWN = 'unknown'

    @classmethod
    def parse(cls, value) -> 'WooProductStatus':
        try:
            return cls(str(value or '').strip().lower())
        except ValueError:
            return cls.UNKNOWN

    def to_internal(self) -> ProductStatus:
        return _PRODUCT_STATUS_TABLE[self]


_PRODUCT_STATUS_TABLE = {
    WooProductStatus.PUBLISH: ProductStatus.ACTIVE,
    WooProductStatus.DRAFT: ProductStatus.DRAFT,
    WooProductStatus.PENDING: ProductStatus.DRAFT,
    WooProductStatus.PRIVATE: ProductStatus.DRAFT,
    WooProductStatus.TRASH: ProductStatus.DRAFT,
    WooProductStatus.UNKNOWN: ProductStatus.DRAFT,
}


class WooOrderStatus(Enum):
    """Estados de orden que expone WooCommerce (con o sin prefijo 'wc-')"""

    PENDING = 'pending'
    PROCESSING = 'processing'
    ON_HOLD = 'on-hold'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
    FAILED = 'failed'
    CHECKOUT_DRAFT = 'checkout-draft'
    TRASH = 'trash'
    UNKNOWN = 'unknown'

    @classmethod
    def parse(cls, value) -> 'WooOrderStatus':
        normalized = str(value or '').strip().lower()
        if normalized.startswith('wc-'):
            normalized = normalized[3:]
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN

    def to_internal(self) -> OrderStatus:
        return _ORDER_STATUS_TABLE[self]


_ORDER_STATUS_TABLE = {
    WooOrderStatus.PENDING: OrderStatus.PENDING,
    WooOrderStatus.PROCESSING: OrderStatus.PROCESSING,
    WooOrderStatus.ON_HOLD: OrderStatus.ON_HOLD,
    WooOrderStatus.COMPLETED: OrderStatus.COMPLETED,
    WooOrderStatus.CANCELLED: OrderStatus.CANCELLED,
    WooOrderStatus.REFUNDED: OrderStatus.REFUNDED,
    WooOrderStatus.FAILED: OrderStatus.FAILED,
    WooOrderStatus.CHECKOUT_DRAFT: OrderStatus.PENDING,
    WooOrderStatus.TRASH: OrderStatus.CANCELLED,
    WooOrderStatus.UNKNOWN: OrderStatus.PENDING,
}


def resolve_product_status(value) -> ProductStatus:
    return WooProductStatus.parse(value).to_internal()


def resolve_order_status(value) -> OrderStatus:
    return WooOrderStatus.parse(value).to_internal()


def normalize_handle(value: str) -> str:
    """
    Normaliza un texto a handle URL-safe

    ASCII, minúsculas, espacios y guiones bajos a '-', todo lo que no sea
    [a-z0-9-] se elimina, guiones repetidos colapsados y sin guiones en los
    bordes. Máximo 255 caracteres. Puede retornar '' (p. ej. solo emojis).
    """
    text = slugify(value or '').replace('_', '-')
    text = _INVALID_HANDLE_CHARS.sub('', text)
    text = _DASH_RUNS.sub('-', text).strip('-')
    return text[:HANDLE_MAX_LENGTH].rstrip('-')


def resolve_handle(product: WooProduct) -> str:
    """Handle desde el slug de WooCommerce o, si falta, desde el nombre"""
    if not product.slug and not product.name:
        raise MappingError(f"Producto {product.id} sin slug ni nombre: no se puede generar handle")

    handle = normalize_handle(product.slug) or normalize_handle(product.name)
    if handle:
        return handle

    if product.id:
        return f"product-{product.id}"
    raise MappingError(f"No se pudo generar un handle válido para '{product.name or product.slug}'")


def money(value: Optional[Decimal]) -> Decimal:
    return (value or Decimal('0')).quantize(_CENTS, rounding=ROUND_HALF_UP)


def _as_product(upstream: Union[WooProduct, Dict[str, Any]]) -> WooProduct:
    if isinstance(upstream, WooProduct):
        return upstream
    return WooProduct.from_dict(upstream)


def _as_order(upstream: Union[WooOrder, Dict[str, Any]]) -> WooOrder:
    if isinstance(upstream, WooOrder):
        return upstream
    return WooOrder.from_dict(upstream)


def map_product(upstream: Union[WooProduct, Dict[str, Any]], tenant_id: str) -> Dict[str, Any]:
    """
    Mapea un producto WooCommerce a un registro de `products`

    Raises:
        MappingError: registro sin id, o sin slug ni nombre utilizables
    """
    product = _as_product(upstream)
    if not product.id:
        raise MappingError("Producto de WooCommerce sin id")

    handle = resolve_handle(product)

    return {
        'name': (product.name or product.slug or handle)[:255],
        'description': product.description or product.short_description,
        'handle': handle,
        'status': resolve_product_status(product.status).value,
        'featured_image': product.featured_image,
        'tenant_id': tenant_id,
        'external_id': str(product.id),
        'external_source': EXTERNAL_SOURCE_WOOCOMMERCE,
    }


def map_variants(upstream: Union[WooProduct, Dict[str, Any]], product_id, tenant_id: str) -> List[Dict[str, Any]]:
    """
    Variantes de un producto

    Siempre una única variante "Default" construida con el precio y stock del
    producto padre. Los productos variables no se expanden desde la API de
    variaciones; se deja constancia en el log.
    """
    product = _as_product(upstream)

    if product.is_variable:
        logger.warning(
            f"⚠️ Producto variable {product.id} ({len(product.variation_ids)} variaciones): "
            f"solo se sincroniza la variante {DEFAULT_VARIANT_TITLE}"
        )

    price = product.price
    if price is None:
        price = product.sale_price if product.sale_price is not None else product.regular_price
    price = money(price)

    compare_at_price = None
    if product.regular_price is not None and product.regular_price > price:
        compare_at_price = money(product.regular_price)

    return [{
        'product_id': product_id,
        'sku': product.sku or None,
        'title': DEFAULT_VARIANT_TITLE,
        'price': price,
        'compare_at_price': compare_at_price,
        'inventory_quantity': product.stock_quantity or 0,
        'inventory_management': INVENTORY_MANAGED_BY if product.manage_stock else None,
        'tenant_id': tenant_id,
    }]


def map_categories(categories: Iterable[Union[WooCategory, Dict[str, Any]]], tenant_id: str) -> List[Dict[str, Any]]:
    """Categorías de un producto; se descartan las que no producen slug"""
    mapped = []
    seen = set()
    for raw in categories or []:
        category = raw if isinstance(raw, WooCategory) else WooCategory.from_dict(raw)
        name = html.unescape(category.name)
        slug = normalize_handle(category.slug) or normalize_handle(name)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        mapped.append({
            'name': (name or slug)[:255],
            'slug': slug,
            'description': category.description,
            'tenant_id': tenant_id,
        })
    return mapped


def _map_address(address: WooAddress, include_contact: bool = False) -> Optional[Dict[str, str]]:
    if not address.has_address:
        return None
    mapped = {
        'first_name': address.first_name,
        'last_name': address.last_name,
        'company': address.company,
        'address1': address.address_1,
        'address2': address.address_2,
        'city': address.city,
        'province': address.state,
        'zip': address.postcode,
        'country': address.country,
        'phone': address.phone,
    }
    if include_contact:
        mapped['email'] = address.email
    return mapped


def _line_total(item) -> Decimal:
    if isinstance(item, dict):
        total = to_decimal(item.get('total_price', item.get('total')))
        if total is None:
            unit = to_decimal(item.get('unit_price', item.get('price')), Decimal('0'))
            total = unit * Decimal(str(item.get('quantity') or 0))
        return total
    if item.total is not None:
        return item.total
    return (item.price or Decimal('0')) * item.quantity


def calculate_order_totals(items: Iterable, shipping=None, tax=None) -> Dict[str, Decimal]:
    """
    Totales de una orden a partir de sus líneas

    Solo se usa como respaldo cuando WooCommerce no entrega el total.
    """
    subtotal = sum((_line_total(item) for item in items or []), Decimal('0'))
    shipping_amount = to_decimal(shipping, Decimal('0'))
    tax_amount = to_decimal(tax, Decimal('0'))
    return {
        'subtotal': money(subtotal),
        'shipping': money(shipping_amount),
        'tax': money(tax_amount),
        'total': money(subtotal + shipping_amount + tax_amount),
    }


def map_order(upstream: Union[WooOrder, Dict[str, Any]], tenant_id: str) -> Dict[str, Any]:
    """
    Mapea una orden WooCommerce a un registro de `orders`

    Las direcciones solo se emiten si traen al menos una línea de dirección.
    """
    order = _as_order(upstream)
    if not order.id:
        raise MappingError("Orden de WooCommerce sin id")

    totals = calculate_order_totals(order.line_items, order.shipping_total, order.total_tax)
    total = money(order.total) if order.total is not None else totals['total']

    return {
        'order_number': order.number or str(order.id),
        'customer_email': order.billing.email,
        'customer_first_name': order.billing.first_name,
        'customer_last_name': order.billing.last_name,
        'status': resolve_order_status(order.status).value,
        'currency': order.currency,
        'subtotal': totals['subtotal'],
        'tax_amount': totals['tax'],
        'shipping_amount': totals['shipping'],
        'total_amount': total,
        'shipping_address': _map_address(order.shipping),
        'billing_address': _map_address(order.billing, include_contact=True),
        'placed_at': order.date_created,
        'tenant_id': tenant_id,
        'external_id': str(order.id),
        'external_source': EXTERNAL_SOURCE_WOOCOMMERCE,
    }


def map_order_items(upstream: Union[WooOrder, Dict[str, Any]], order_id,
                    product_map: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Líneas de una orden

    `product_map` traduce IDs externos de WooCommerce a IDs locales
    ({'product_id', 'variant_id'}). Una línea cuyo producto aún no se
    sincronizó queda con product_id None; el llamador decide si la omite.
    """
    order = _as_order(upstream)
    items = []
    for line in order.line_items:
        ref = None
        if line.variation_id:
            ref = product_map.get(str(line.variation_id))
        if ref is None and line.product_id:
            ref = product_map.get(str(line.product_id))

        unit_price = line.price
        if unit_price is None:
            unit_price = (line.total / line.quantity) if (line.total is not None and line.quantity) else Decimal('0')

        items.append({
            'order_id': order_id,
            'product_id': ref.get('product_id') if ref else None,
            'variant_id': ref.get('variant_id') if ref else None,
            'external_product_id': line.product_id,
            'quantity': line.quantity,
            'unit_price': money(unit_price),
            'total_price': money(_line_total(line)),
        })
    return items


def external_ids_for_orders(orders: Iterable[WooOrder]) -> List[str]:
    """IDs externos de producto referenciados por un lote de órdenes"""
    ids = []
    for order in orders:
        ids.extend(str(pid) for pid in order.product_ids())
    return sorted(set(ids))


__all__ = [
    'WooProductStatus', 'WooOrderStatus', 'resolve_product_status', 'resolve_order_status',
    'normalize_handle', 'resolve_handle', 'map_product', 'map_variants', 'map_categories',
    'map_order', 'map_order_items', 'calculate_order_totals', 'external_ids_for_orders',
]
