"""
Motor de sincronización WooCommerce

cliente REST -> mapper -> gateway de persistencia, coordinados por
`CatalogSyncOrchestrator`.
"""
