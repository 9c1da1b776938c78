"""
Run the Meta Extract application
"""
import uvicorn
from metaextract.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "metaextract.main:app",
        host="0.0.0.0",
        port=8201,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
