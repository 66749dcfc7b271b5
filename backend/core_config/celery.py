"""
Celery configuration for the marketer verification backend
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core_config.settings')

app = Celery('marketer_verification')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    result_expires=3600,  # 1 hour
    worker_prefetch_multiplier=1,
    task_acks_late=True,

    beat_schedule={
        'release-withheld-balances': {
            'task': 'wallet.tasks.release_withheld_balances',
            'schedule': crontab(minute=0, hour=0, day_of_month=1),  # Midnight on the 1st
        },
    },
)
