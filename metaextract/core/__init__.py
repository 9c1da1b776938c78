# Core module - config, database
from metaextract.core.config import settings
from metaextract.core.database import Base
