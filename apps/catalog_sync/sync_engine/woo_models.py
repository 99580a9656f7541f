"""
Modelos de datos para los registros de la API de WooCommerce
Define estructuras explícitas para productos, categorías y órdenes

El JSON de WooCommerce varía entre tiendas y plugins: cualquier campo puede
faltar, venir vacío o con otro tipo. Cada `from_dict` es total: un campo
ausente o inválido toma un default explícito, nunca propaga basura.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .exceptions import MappingError


def to_decimal(value, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convierte precios/totales ('12.50', 12.5, '') a Decimal"""
    if value is None or value == '':
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def to_int(value, default: Optional[int] = None) -> Optional[int]:
    """Convierte enteros (maneja '3', 3.0 y '3.0')"""
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        if '.' in str(value):
            return int(float(str(value)))
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('1', 'yes', 'true')


def to_str(value, default: str = '') -> str:
    if value is None:
        return default
    return str(value).strip()


def to_datetime(value) -> Optional[datetime]:
    """Fechas ISO-8601 de WooCommerce ('2024-03-01T10:00:00', con o sin Z)"""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_dict(data, entity: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MappingError(f"Registro de {entity} inválido: se esperaba un objeto, llegó {type(data).__name__}")
    return data


def _dict_list(value) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


@dataclass
class WooImage:
    """Imagen de producto"""
    src: str
    id: Optional[int] = None
    name: str = ''
    alt: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WooImage':
        return cls(
            src=to_str(data.get('src')),
            id=to_int(data.get('id')),
            name=to_str(data.get('name')),
            alt=to_str(data.get('alt')),
        )


@dataclass
class WooCategory:
    """Categoría de producto"""
    id: Optional[int] = None
    name: str = ''
    slug: str = ''
    description: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WooCategory':
        data = _require_dict(data, 'categoría')
        return cls(
            id=to_int(data.get('id')),
            name=to_str(data.get('name')),
            slug=to_str(data.get('slug')),
            description=to_str(data.get('description')),
        )


@dataclass
class WooProduct:
    """Modelo para productos de WooCommerce"""
    id: Optional[int]
    name: str = ''
    slug: str = ''
    type: str = 'simple'
    status: str = ''
    description: str = ''
    short_description: str = ''

    # Precio e inventario
    sku: str = ''
    price: Optional[Decimal] = None
    regular_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    stock_status: str = ''

    images: List[WooImage] = field(default_factory=list)
    categories: List[WooCategory] = field(default_factory=list)
    variation_ids: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WooProduct':
        """Crea una instancia desde el JSON de GET /products"""
        data = _require_dict(data, 'producto')

        images = [WooImage.from_dict(img) for img in _dict_list(data.get('images'))]
        categories = [WooCategory.from_dict(cat) for cat in _dict_list(data.get('categories'))]
        variations = data.get('variations') if isinstance(data.get('variations'), list) else []

        return cls(
            id=to_int(data.get('id')),
            name=to_str(data.get('name')),
            slug=to_str(data.get('slug')),
            type=to_str(data.get('type'), 'simple') or 'simple',
            status=to_str(data.get('status')),
            description=to_str(data.get('description')),
            short_description=to_str(data.get('short_description')),

            sku=to_str(data.get('sku')),
            price=to_decimal(data.get('price')),
            regular_price=to_decimal(data.get('regular_price')),
            sale_price=to_decimal(data.get('sale_price')),
            manage_stock=to_bool(data.get('manage_stock')),
            stock_quantity=to_int(data.get('stock_quantity')),
            stock_status=to_str(data.get('stock_status')),

            images=[img for img in images if img.src],
            categories=categories,
            variation_ids=[v for v in (to_int(x) for x in variations) if v is not None],
        )

    @property
    def is_variable(self) -> bool:
        return self.type == 'variable'

    @property
    def featured_image(self) -> Optional[str]:
        return self.images[0].src if self.images else None


@dataclass
class WooAddress:
    """Dirección de facturación o envío"""
    first_name: str = ''
    last_name: str = ''
    company: str = ''
    address_1: str = ''
    address_2: str = ''
    city: str = ''
    state: str = ''
    postcode: str = ''
    country: str = ''
    email: str = ''
    phone: str = ''

    @classmethod
    def from_dict(cls, data) -> 'WooAddress':
        if not isinstance(data, dict):
            return cls()
        return cls(
            first_name=to_str(data.get('first_name')),
            last_name=to_str(data.get('last_name')),
            company=to_str(data.get('company')),
            address_1=to_str(data.get('address_1')),
            address_2=to_str(data.get('address_2')),
            city=to_str(data.get('city')),
            state=to_str(data.get('state')),
            postcode=to_str(data.get('postcode')),
            country=to_str(data.get('country')),
            email=to_str(data.get('email')),
            phone=to_str(data.get('phone')),
        )

    @property
    def has_address(self) -> bool:
        return bool(self.address_1)


@dataclass
class WooLineItem:
    """Línea de una orden"""
    id: Optional[int] = None
    name: str = ''
    product_id: Optional[int] = None
    variation_id: Optional[int] = None
    quantity: int = 1
    sku: str = ''
    price: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None
    total: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WooLineItem':
        return cls(
            id=to_int(data.get('id')),
            name=to_str(data.get('name')),
            product_id=to_int(data.get('product_id')) or None,
            variation_id=to_int(data.get('variation_id')) or None,
            quantity=max(to_int(data.get('quantity'), 1), 0),
            sku=to_str(data.get('sku')),
            price=to_decimal(data.get('price')),
            subtotal=to_decimal(data.get('subtotal')),
            total=to_decimal(data.get('total')),
        )


@dataclass
class WooOrder:
    """Modelo para órdenes de WooCommerce"""
    id: Optional[int]
    number: str = ''
    status: str = ''
    currency: str = ''
    date_created: Optional[datetime] = None

    # Información financiera
    total: Optional[Decimal] = None
    total_tax: Optional[Decimal] = None
    shipping_total: Optional[Decimal] = None
    discount_total: Optional[Decimal] = None

    billing: WooAddress = field(default_factory=WooAddress)
    shipping: WooAddress = field(default_factory=WooAddress)
    line_items: List[WooLineItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WooOrder':
        """Crea una instancia desde el JSON de GET /orders"""
        data = _require_dict(data, 'orden')
        return cls(
            id=to_int(data.get('id')),
            number=to_str(data.get('number')),
            status=to_str(data.get('status')),
            currency=to_str(data.get('currency')),
            date_created=to_datetime(data.get('date_created_gmt') or data.get('date_created')),

            total=to_decimal(data.get('total')),
            total_tax=to_decimal(data.get('total_tax')),
            shipping_total=to_decimal(data.get('shipping_total')),
            discount_total=to_decimal(data.get('discount_total')),

            billing=WooAddress.from_dict(data.get('billing')),
            shipping=WooAddress.from_dict(data.get('shipping')),
            line_items=[WooLineItem.from_dict(item) for item in _dict_list(data.get('line_items'))],
        )

    def product_ids(self) -> List[int]:
        """IDs externos (producto y variación) referenciados por las líneas"""
        ids = []
        for item in self.line_items:
            if item.product_id:
                ids.append(item.product_id)
            if item.variation_id:
                ids.append(item.variation_id)
        return ids
