# Facebook Services Module

from metaextract.services.facebook.fb_api import FacebookAPI, normalize_account_id

__all__ = [
    "FacebookAPI",
    "normalize_account_id",
]
