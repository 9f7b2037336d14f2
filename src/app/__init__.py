"""Application bootstrap helpers for the Learning Core project."""

from .runtime import bootstrap
from .settings import AppSettings

__all__ = ["bootstrap", "AppSettings"]
