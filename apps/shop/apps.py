"""Configuración de la app de tienda"""

from django.apps import AppConfig


class ShopConfig(AppConfig):
    """Configuración de la aplicación de tienda"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.shop'
    verbose_name = 'Tienda'
