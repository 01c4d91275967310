import logging
from datetime import datetime

from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from django.http import JsonResponse
from django.utils import timezone
from django.utils.cache import add_never_cache_headers
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from celery import current_app as celery_app
from redis import Redis

from backend.apps.accounts.permissions import IsAdmin

logger = logging.getLogger(__name__)

HEALTHY = ('ok', 'skipped')


# ----------------------------------------------------------------------
# Liveness probe (public)
# ----------------------------------------------------------------------
@require_GET
@never_cache
def liveness(request):
    """Answers as long as the process can serve requests."""
    return JsonResponse({'status': 'ok', 'timestamp': timezone.now().isoformat()})


# ----------------------------------------------------------------------
# Component checks
# ----------------------------------------------------------------------
def check_database():
    details = {}
    try:
        db_conn = connections['default']
        with db_conn.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        details['connection'] = 'ok'
        details['backend'] = db_conn.vendor
        return {'status': 'ok', 'details': details}
    except OperationalError as e:
        logger.exception('Database health check failed')
        return {'status': 'unavailable', 'details': {'error': str(e)}}


def check_cache():
    """Ping Redis when the cache lives there, then round-trip a key through the cache."""
    details = {}
    backend = settings.CACHES['default']['BACKEND']
    status = 'ok'
    if 'redis' in backend.lower():
        try:
            redis_client = Redis.from_url(
                settings.REDIS_URL,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            redis_client.ping()
            info = redis_client.info()
            details['ping'] = 'pong'
            details['version'] = info.get('redis_version', 'unknown')
            details['used_memory_human'] = info.get('used_memory_human', 'unknown')
        except Exception as e:
            logger.warning(f'Redis health check failed: {e}')
            return {'status': 'unavailable', 'details': {'error': str(e)}}
    else:
        details['backend'] = backend

    try:
        cache.set('health_check_key', 'ok', timeout=5)
        details['cache_operation'] = 'ok' if cache.get('health_check_key') == 'ok' else 'degraded'
    except Exception as e:
        details['cache_operation'] = 'failed'
        details['cache_error'] = str(e)
    if details['cache_operation'] != 'ok':
        status = 'degraded'
    return {'status': status, 'details': details}


def check_celery():
    """Broker reachability plus a worker ping."""
    if getattr(settings, 'CELERY_TASK_ALWAYS_EAGER', False):
        return {'status': 'skipped', 'details': {'note': 'Tasks run eagerly; no broker in use.'}}
    details = {}
    try:
        conn = celery_app.connection()
        conn.ensure_connection(max_retries=1)
        details['broker'] = {'status': 'ok', 'url': celery_app.conf.broker_url}
        conn.close()

        workers = celery_app.control.inspect(timeout=1).ping()
        if not workers:
            details['workers'] = {'status': 'no_workers', 'note': 'No active workers found.'}
            return {'status': 'degraded', 'details': details}
        details['workers'] = {'count': len(workers), 'hostnames': list(workers.keys()), 'status': 'ok'}
        return {'status': 'ok', 'details': details}
    except Exception as e:
        logger.warning(f'Celery health check failed: {e}')
        return {'status': 'unavailable', 'details': {'error': str(e)}}


def collect_health_data(request=None):
    """
    Run every component check and summarise them.
    Overall status is 'ok' only when no component reports a problem.
    """
    start_time = datetime.now()
    components = {
        'database': check_database(),
        'cache': check_cache(),
        'celery': check_celery(),
    }
    overall_status = 'ok' if all(c['status'] in HEALTHY for c in components.values()) else 'degraded'

    health_data = {
        'timestamp': timezone.now().isoformat(),
        'status': overall_status,
        'components': components,
        'summary': {
            'response_time_ms': round((datetime.now() - start_time).total_seconds() * 1000, 2),
            'environment': 'production' if not settings.DEBUG else 'development',
        }
    }
    if request is not None and request.user.is_authenticated:
        health_data['summary']['requested_by'] = request.user.email
    return health_data


# ----------------------------------------------------------------------
# Dependency report (admins only)
# ----------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def health_report(request):
    """JSON endpoint for monitoring tools."""
    health_data = collect_health_data(request)
    if health_data['status'] != 'ok':
        logger.warning(f"Health check degraded: {health_data['components']}")
    status_code = 200 if health_data['status'] == 'ok' else 503
    response = Response(health_data, status=status_code)
    add_never_cache_headers(response)
    return response
