"""
Enumeraciones de estado del catálogo y de las órdenes.

Se mantienen fuera de models.py para que el mapper (funciones puras) pueda
importarlas sin tocar el registro de modelos.
"""

from django.db import models


class ProductStatus(models.TextChoices):
    """Estado interno de un producto publicado en la tienda del tenant"""

    ACTIVE = 'active', 'Activo'
    DRAFT = 'draft', 'Borrador'


class OrderStatus(models.TextChoices):
    """Estado interno de una orden (independiente del estado de producto)"""

    PENDING = 'pending', 'Pendiente'
    PROCESSING = 'processing', 'En proceso'
    ON_HOLD = 'on_hold', 'En espera'
    COMPLETED = 'completed', 'Completada'
    CANCELLED = 'cancelled', 'Cancelada'
    REFUNDED = 'refunded', 'Reembolsada'
    FAILED = 'failed', 'Fallida'


EXTERNAL_SOURCE_WOOCOMMERCE = 'woocommerce'
