"""
Saved report templates
"""
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from metaextract.core.database import SessionLocal
from metaextract.core.exceptions import ConfigurationError
from metaextract.models.report_template import SavedReportTemplate
from metaextract.schemas.catalog import SavedTemplateCreate
from metaextract.services.extraction.validator import validate_selection

logger = logging.getLogger(__name__)


class ReportTemplateRepository:
    """Stores user templates; every template is checked against the catalogs first"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def create(self, payload: SavedTemplateCreate) -> SavedReportTemplate:
        """
        Save a template.

        Raises:
            ConfigurationError: blank name, or a field/breakdown selection
                that could not be extracted at the template's level
        """
        name = payload.name.strip()
        if not name:
            raise ConfigurationError("Template name is required")

        validate_selection(payload.level, payload.selected_fields, payload.breakdowns)

        db = self.session_factory()
        try:
            template = SavedReportTemplate(
                name=name,
                description=payload.description,
                level=payload.level,
                selected_fields=list(payload.selected_fields),
                breakdowns=list(payload.breakdowns),
                date_preset=payload.date_preset,
                is_default=payload.is_default,
            )
            db.add(template)
            db.commit()
            db.refresh(template)
            logger.info(f"Saved report template {template.id}: {name}")
            return template
        finally:
            db.close()

    def list_saved(self) -> List[SavedReportTemplate]:
        """Newest first"""
        db = self.session_factory()
        try:
            return (
                db.query(SavedReportTemplate)
                .order_by(SavedReportTemplate.created_at.desc(), SavedReportTemplate.id.desc())
                .all()
            )
        finally:
            db.close()

    def get(self, template_id: Optional[str]) -> Optional[SavedReportTemplate]:
        """Template by id; None for unknown or non-numeric ids"""
        if not template_id or not str(template_id).isdigit():
            return None
        db = self.session_factory()
        try:
            return db.get(SavedReportTemplate, int(template_id))
        finally:
            db.close()
