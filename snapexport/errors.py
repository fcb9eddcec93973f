# /snapexport/errors.py
from typing import Optional


class SnapExportError(Exception):
    """Base class for snapexport errors"""


class MalformedEventError(SnapExportError):
    """The inbound notification payload is missing or has an invalid resource reference"""


class ExportServiceRejection(SnapExportError):
    """The export service refused to start an export task"""

    def __init__(self, job_identifier: str, code: str, message: Optional[str] = None):
        self.job_identifier = job_identifier
        self.code = code
        self.message = message or ""
        super().__init__(f"Export task {job_identifier} rejected ({code}): {self.message}")
