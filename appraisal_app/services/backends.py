"""
Submission backends.

A backend receives the route name and the finished evaluation payload and
either accepts it (returning the backend's response as a dict) or raises
SubmissionBackendError with a message that is shown to the evaluator as-is.
The active backend is the dotted path in settings.APPRAISAL_SUBMISSION_BACKEND.
"""
import logging

import requests
from django.conf import settings
from django.utils.module_loading import import_string

from appraisal_app.exceptions import SubmissionBackendError
from appraisal_app.models import Evaluation, SubmissionRecord

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "appraisal_app.services.backends.LocalSubmissionBackend"


class SubmissionBackend:
    def submit(self, route: str, payload: dict) -> dict:
        raise NotImplementedError


class LocalSubmissionBackend(SubmissionBackend):
    """Stores the payload as a SubmissionRecord next to the evaluation."""

    def submit(self, route, payload):
        try:
            evaluation = Evaluation.objects.get(pk=payload["evaluation_id"])
        except (KeyError, Evaluation.DoesNotExist):
            raise SubmissionBackendError("Evaluation not found.")

        record, _ = SubmissionRecord.objects.update_or_create(
            evaluation=evaluation,
            defaults={"route": route, "payload": payload},
        )
        return {"submission_id": str(record.submission_id), "route": route}


class HttpSubmissionBackend(SubmissionBackend):
    """POSTs the payload as JSON to APPRAISAL_BACKEND_URL/<route>/<employee_id>."""

    def __init__(self, base_url=None, timeout=None):
        self.base_url = (base_url or getattr(settings, "APPRAISAL_BACKEND_URL", "")).rstrip("/")
        self.timeout = timeout or getattr(settings, "APPRAISAL_BACKEND_TIMEOUT", 15)

    def url_for(self, route, payload):
        return f"{self.base_url}/{route}/{payload.get('employee_id')}"

    def submit(self, route, payload):
        if not self.base_url:
            raise SubmissionBackendError("Submission backend URL is not configured.")

        url = self.url_for(route, payload)
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Submission POST to %s failed: %s", url, exc)
            raise SubmissionBackendError(f"Failed to reach submission service: {exc}")

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            message = ""
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or data.get("detail") or ""
            raise SubmissionBackendError(message or f"Submission service responded with {response.status_code}.")

        return data if isinstance(data, dict) else {"response": data}


def get_backend() -> SubmissionBackend:
    path = getattr(settings, "APPRAISAL_SUBMISSION_BACKEND", "") or DEFAULT_BACKEND
    return import_string(path)()
