import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'teamup.settings')

app = Celery('teamup')

# All CELERY_* Django settings configure the app
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
