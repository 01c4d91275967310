"""
Settings package for the Subscription Platform.
Uses modular approach with base/dev/prod/testing settings, selected by DJANGO_ENV.
"""
import os

DJANGO_ENV = os.environ.get('DJANGO_ENV', 'development')

if DJANGO_ENV == 'production':
    from .production import *
elif DJANGO_ENV == 'testing':
    from .testing import *
else:
    from .development import *
