"""
Gateway de persistencia sobre el ORM de Django

Las restricciones únicas de la base son la autoridad ante conflictos: un
IntegrityError o DatabaseError se traduce a PersistenceError y el
orquestador lo acota al ítem. Las filas sin cambios no se escriben.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, IntegrityError, transaction

from apps.shop.choices import EXTERNAL_SOURCE_WOOCOMMERCE
from apps.shop.models import (
    LegacyProduct,
    Order,
    OrderItem,
    Product,
    ProductCategory,
    ProductCategoryRelation,
    ProductVariant,
)
from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


class UpsertOutcome(Enum):
    CREATED = 'created'
    UPDATED = 'updated'
    UNCHANGED = 'unchanged'


@contextmanager
def translate_db_errors(operation: str):
    """Convierte errores de base de datos en PersistenceError"""
    try:
        yield
    except IntegrityError as e:
        raise PersistenceError(f"Conflicto de unicidad en {operation}: {e}") from e
    except DatabaseError as e:
        raise PersistenceError(f"Error de base de datos en {operation}: {e}") from e


def apply_changes(instance, data: Dict[str, Any]) -> List[str]:
    """Asigna en `instance` los valores distintos y retorna los campos modificados"""
    changed = []
    for field_name, value in data.items():
        if getattr(instance, field_name) != value:
            setattr(instance, field_name, value)
            changed.append(field_name)
    return changed


def _save_changes(instance, data: Dict[str, Any]) -> bool:
    changed = apply_changes(instance, data)
    if not changed:
        return False
    if hasattr(instance, 'updated_at'):
        changed.append('updated_at')
    instance.save(update_fields=changed)
    return True


class CatalogGateway:
    """Operaciones find-by-key / insert / update para el catálogo y las órdenes"""

    source = EXTERNAL_SOURCE_WOOCOMMERCE

    # Productos

    def find_product(self, tenant_id: str, external_id: Optional[str], handle: str) -> Optional[Product]:
        """
        Busca por (tenant, external_id, source) y luego por (tenant, handle)

        Por handle solo se adopta un producto local sin external_id.

        Raises:
            PersistenceError: el handle ya pertenece a otro producto externo
        """
        queryset = Product.objects.filter(tenant_id=tenant_id)
        if external_id:
            product = queryset.filter(external_id=external_id, external_source=self.source).first()
            if product is not None:
                return product

        product = queryset.filter(handle=handle).first()
        if product is not None and product.external_id is not None:
            raise PersistenceError(
                f"Conflicto de handle '{handle}': ya pertenece a "
                f"{product.external_source or 'otro origen'} {product.external_id}"
            )
        return product

    def upsert_product(self, data: Dict[str, Any]) -> Tuple[Product, UpsertOutcome]:
        with translate_db_errors(f"products[{data.get('handle')}]"):
            product = self.find_product(data['tenant_id'], data.get('external_id'), data['handle'])
            if product is None:
                product = Product.objects.create(**data)
                return product, UpsertOutcome.CREATED
            if _save_changes(product, data):
                return product, UpsertOutcome.UPDATED
            return product, UpsertOutcome.UNCHANGED

    def upsert_variants(self, product: Product, variants: Iterable[Dict[str, Any]]) -> bool:
        """
        Upsert de variantes por (product, sku); sin SKU se empareja por título

        Returns:
            True si se creó o modificó alguna variante
        """
        changed = False
        with translate_db_errors(f"product_variants[{product.handle}]"):
            for raw in variants:
                data = {key: value for key, value in raw.items() if key != 'product_id'}
                variant = None
                if data.get('sku'):
                    variant = product.variants.filter(sku=data['sku']).first()
                if variant is None:
                    variant = product.variants.filter(title=data['title']).first()

                if variant is None:
                    ProductVariant.objects.create(product=product, **data)
                    changed = True
                elif _save_changes(variant, data):
                    changed = True
        return changed

    def link_categories(self, product: Product, categories: Iterable[Dict[str, Any]]) -> bool:
        """Crea las categorías faltantes y las vincula; no elimina vínculos existentes"""
        changed = False
        with translate_db_errors(f"product_categories[{product.handle}]"):
            for data in categories:
                category, created = ProductCategory.objects.get_or_create(
                    tenant_id=data['tenant_id'],
                    slug=data['slug'],
                    defaults={
                        'name': data['name'],
                        'description': data.get('description', ''),
                    }
                )
                _, linked = ProductCategoryRelation.objects.get_or_create(
                    product=product,
                    category=category
                )
                changed = changed or created or linked
        return changed

    def mirror_legacy_product(self, product: Product, variants: List[Dict[str, Any]]) -> bool:
        """
        Escribe la proyección en `pern_products`

        Corre en su propio savepoint para que un fallo no invalide la
        transacción del producto.
        """
        price = variants[0]['price'] if variants else Decimal('0')
        data = {
            'name': product.name,
            'price': price,
            'description': product.description,
            'image_url': product.featured_image,
        }
        with translate_db_errors(f"pern_products[{product.handle}]"), transaction.atomic():
            legacy = LegacyProduct.objects.filter(slug=product.handle, tenant_id=product.tenant_id).first()
            if legacy is None:
                LegacyProduct.objects.create(slug=product.handle, tenant_id=product.tenant_id, **data)
                return True
            return _save_changes(legacy, data)

    def build_product_map(self, tenant_id: str,
                          external_ids: Optional[Iterable[str]] = None) -> Dict[str, Dict[str, Any]]:
        """
        Mapa external_id -> {'product_id', 'variant_id'} de productos sincronizados
        """
        queryset = Product.objects.filter(
            tenant_id=tenant_id,
            external_source=self.source,
            external_id__isnull=False
        ).prefetch_related('variants')
        if external_ids is not None:
            queryset = queryset.filter(external_id__in=list(external_ids))

        product_map = {}
        for product in queryset:
            variants = list(product.variants.all())
            product_map[product.external_id] = {
                'product_id': product.pk,
                'variant_id': variants[0].pk if variants else None,
            }
        return product_map

    def count_synced_products(self, tenant_id: str) -> int:
        return Product.objects.filter(tenant_id=tenant_id, external_source=self.source).count()

    # Órdenes

    def upsert_order(self, data: Dict[str, Any]) -> Tuple[Order, UpsertOutcome]:
        with translate_db_errors(f"orders[{data.get('external_id')}]"):
            order = Order.objects.filter(
                tenant_id=data['tenant_id'],
                external_id=data['external_id'],
                external_source=self.source
            ).first()
            if order is None:
                order = Order.objects.create(**data)
                return order, UpsertOutcome.CREATED
            if _save_changes(order, data):
                return order, UpsertOutcome.UPDATED
            return order, UpsertOutcome.UNCHANGED

    @staticmethod
    def _item_signature(item) -> Tuple:
        if isinstance(item, dict):
            return (item.get('product_id'), item.get('variant_id'), item['quantity'],
                    Decimal(item['unit_price']), Decimal(item['total_price']))
        return (item.product_id, item.variant_id, item.quantity, item.unit_price, item.total_price)

    def replace_order_items(self, order: Order, items: List[Dict[str, Any]]) -> bool:
        """
        Reemplaza las líneas de la orden si difieren de las almacenadas

        Returns:
            True si las líneas se reescribieron
        """
        with translate_db_errors(f"order_items[{order.order_number}]"):
            current = sorted((self._item_signature(item) for item in order.items.all()), key=repr)
            incoming = sorted((self._item_signature(item) for item in items), key=repr)
            if current == incoming:
                return False

            order.items.all().delete()
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product_id=item.get('product_id'),
                    variant_id=item.get('variant_id'),
                    quantity=item['quantity'],
                    unit_price=item['unit_price'],
                    total_price=item['total_price'],
                )
                for item in items
            ])
        return True

    def count_synced_orders(self, tenant_id: str) -> int:
        return Order.objects.filter(tenant_id=tenant_id, external_source=self.source).count()
