import os

from celery import Celery
from kombu import Queue
from django.conf import settings

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')

app = Celery('subscription_platform')

# Configure Celery using Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks(lambda: settings.INSTALLED_APPS)

app.conf.task_queues = (
    Queue('default'),
    Queue('maintenance'),
)
app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'

# Enforce JSON serialization for security and compatibility
app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']

app.conf.task_routes = {
    'memberships.tasks.*': {
        'queue': 'maintenance'
    },
}

app.conf.task_time_limit = 300
app.conf.task_soft_time_limit = 240
app.conf.result_expires = 3600

app.conf.worker_prefetch_multiplier = 1
app.conf.worker_max_tasks_per_child = 1000

app.conf.task_acks_late = True
app.conf.task_reject_on_worker_lost = True

app.conf.broker_transport_options = {
    'visibility_timeout': 3600,  # 1 hour
    'socket_connect_timeout': 5,
    'retry_on_timeout': True,
}
