"""Platform abstraction layer: subprocesses and HTTP."""

from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from .process import ProcessError, run

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "ProcessError",
    "RealHttpClient",
    "run",
]
