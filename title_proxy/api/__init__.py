"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from title_proxy.api import app

    uvicorn title_proxy.api:app
"""

from title_proxy.api.app import app

__all__ = ["app"]
