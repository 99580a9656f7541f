"""
Celery configuration for the catalog sync platform

Las sincronizaciones WooCommerce corren en la cola dedicada 'sync-heavy';
la prueba de conexión es liviana y va a 'default'.
"""

import os
from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('catalog_sync')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

app.conf.task_routes = {
    'apps.catalog_sync.tasks.sync_tenant_products': {'queue': 'sync-heavy'},
    'apps.catalog_sync.tasks.sync_tenant_orders': {'queue': 'sync-heavy'},
    'apps.catalog_sync.tasks.test_tenant_connection': {'queue': 'default'},
}

app.conf.update(
    enable_utc=True,

    # Task execution settings
    task_soft_time_limit=1700,  # 28 minutes soft limit
    task_time_limit=1800,       # 30 minutes hard limit
    task_acks_late=True,        # Acknowledge after task completion
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=3600,

    task_default_queue='default',
    task_default_exchange='default',
    task_default_exchange_type='direct',
    task_default_routing_key='default',
)
