"""
WSGI config for hr_appraisal project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hr_appraisal.settings")

application = get_wsgi_application()
