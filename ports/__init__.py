from .http import HttpClientPort, HttpResponsePort
from .repos import PersonStorePort

__all__ = [
    "HttpClientPort",
    "HttpResponsePort",
    "PersonStorePort",
]
