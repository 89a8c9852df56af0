"""Middleware for Document Verification service."""

from services.document_verification.app.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
