"""
Tienda del tenant: productos, variantes, categorías y órdenes.

Es la capa de persistencia sobre la que escribe el motor de sincronización
de catálogo (`apps.catalog_sync`).
"""
