"""Compatibiliteitsmodule voor traditionele ``uvicorn`` commando's.

``uvicorn app:app --reload`` werkt dankzij deze module; de FastAPI-app zelf
staat in :mod:`backend.app`.
"""

from backend.app import app

__all__ = ["app"]
