from __future__ import annotations

from . import create_app
from .core.config import get_settings
from .core.logging import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
app = create_app(settings)
