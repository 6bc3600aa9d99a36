# api/index.py
# Serverless entry point: the platform calls `handler(event, context)` per request.
import os
import sys
from pathlib import Path

from serverless_wsgi import handle_request

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hr_appraisal.settings")

from hr_appraisal.wsgi import application  # noqa: E402


def handler(event, context):
    return handle_request(application, event, context)
