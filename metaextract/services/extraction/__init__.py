# Configurable extraction engine

from metaextract.services.extraction.extract_service import ConfigurableExtractService
from metaextract.services.extraction.history import ExtractionHistoryRepository

__all__ = [
    "ConfigurableExtractService",
    "ExtractionHistoryRepository",
]
