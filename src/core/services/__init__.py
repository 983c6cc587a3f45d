"""Core services: reconciliation engine and composition root."""

from core.services.provider import Provider
from core.services.reconciler import Reconciler

__all__ = ["Provider", "Reconciler"]
