"""
Sincronización de catálogo WooCommerce

Importa productos (con variantes y categorías) y órdenes desde la tienda
WooCommerce de cada tenant hacia las tablas de `apps.shop`.

Entradas:
- Comando `manage.py sync_woocommerce_products`
- Tareas Celery (`tasks.py`)
- API REST bajo /api/v1/woocommerce/
"""
