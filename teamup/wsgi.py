"""WSGI config for the TeamUp project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "teamup.settings")

application = get_wsgi_application()
