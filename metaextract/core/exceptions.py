"""
Extraction error taxonomy

Every terminal failure of an extraction is one of these. The extraction
service turns them into ``ExtractionResult(success=False)``; HTTP routes
that call the validator directly map ``ConfigurationError`` to 400.
"""
from typing import Optional


class ExtractionError(Exception):
    """Base class for extraction failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExtractionError):
    """Invalid extraction request, detected before any network call"""


class UpstreamApiError(ExtractionError):
    """Error reported by (or while reaching) the Graph API"""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class UpstreamRateLimitError(UpstreamApiError):
    """Throttling error; retried with backoff until the budget is spent"""


class PersistenceWarning(ExtractionError):
    """Extraction history could not be written"""
