"""Client for the school REST API endpoints used by the grade workflow."""

from typing import Any, Iterable
from urllib.parse import quote
import logging

import requests

from .classes import class_folder
from .errors import TransportError
from .excel_generator import XLSX_MIME
from .models import StudentRecord

logger = logging.getLogger(__name__)


class GradingApiClient:
    """
    Thin wrapper over ``requests`` for templates, uploads and grade reports.
    
    Every failure (network error, non-2xx status, ``success: false``) is
    raised as TransportError.
    """

    def __init__(self, base_url: str, timeout: float = 30, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.exception("%s %s failed", method, url)
            raise TransportError(f"Network error: {exc}") from exc
        
        if not response.ok:
            message = _error_message(response) or f"Request failed with status {response.status_code}"
            logger.error("%s %s returned %s: %s", method, url, response.status_code, message)
            raise TransportError(message, response.status_code)
        return response

    def _json(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        response = self._request(method, path, **kwargs)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Invalid JSON response", response.status_code) from exc
        
        if isinstance(payload, dict) and payload.get("success") is False:
            raise TransportError(payload.get("message") or "Request failed", response.status_code)
        return payload

    def list_templates(self, class_name: str) -> list[str]:
        """Return the .xlsx template names available for a class."""
        folder = quote(class_folder(class_name))
        payload = self._json("GET", f"/api/grading-templates/{folder}")
        return [t for t in payload.get("templates", []) if t.endswith(".xlsx")]

    def fetch_template(self, class_name: str, template_file: str) -> bytes:
        folder = quote(class_folder(class_name))
        response = self._request("GET", f"/grading-templates/{folder}/{quote(template_file)}")
        return response.content

    def upload_grade_sheet(
        self,
        file_name: str,
        content: bytes,
        related_id: str,
        uploaded_by: str
    ) -> dict[str, Any]:
        """Upload a filled grade workbook as a ``grading`` file."""
        files = {"file": (file_name, content, XLSX_MIME)}
        data = {
            "relatedType": "grading",
            "relatedId": related_id,
            "uploadedBy": uploaded_by,
        }
        payload = self._json("POST", "/api/file-uploads", files=files, data=data)
        logger.info("Uploaded %s (%d bytes)", file_name, len(content))
        return payload

    def list_uploads(self, uploaded_by: str) -> list[dict[str, Any]]:
        """Return the grading files a teacher has uploaded, newest first as served."""
        payload = self._json(
            "GET",
            "/api/file-uploads",
            params={"uploadedBy": uploaded_by, "relatedType": "grading"},
        )
        return payload.get("fileUploads") or []

    def delete_upload(self, file_id: str) -> None:
        self._json("DELETE", f"/api/file-uploads/{quote(str(file_id))}")
        logger.info("Deleted upload %s", file_id)

    def share_upload(self, file_id: str, recipient_email: str, message: str = "") -> None:
        """Notify a colleague by e-mail that an uploaded sheet is shared with them."""
        self._json(
            "POST",
            "/api/file-uploads/share",
            json={"fileId": file_id, "recipientEmail": recipient_email, "message": message},
        )
        logger.info("Shared upload %s with %s", file_id, recipient_email)

    def close(self) -> None:
        self.session.close()

    def add_student_grades(self, report_id: str, records: Iterable[StudentRecord]) -> int:
        """Post each record to a grade report; returns how many were created."""
        created = 0
        for record in records:
            self._json(
                "POST",
                f"/api/grade-reports/{quote(str(report_id))}/grades",
                json=record.to_api_dict(),
            )
            created += 1
        return created


def _error_message(response: requests.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error")
    return None
