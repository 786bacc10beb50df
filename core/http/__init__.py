"""
HTTP Client Module

HTTP client with timeout and retry for remote tree data.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
