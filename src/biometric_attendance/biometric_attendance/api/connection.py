from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import requests

from ..core.constants import DEFAULT_BIOMETRIC_PREFIX, DEFAULT_REQUEST_TIMEOUT_SECONDS


@dataclass
class ApiConfig:
    base_url: str
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    biometric_prefix: str = DEFAULT_BIOMETRIC_PREFIX


class ApiConnection:
    """Singleton-like factory for HTTP sessions against the attendance API.

    Note: One `requests.Session` is reused for connection pooling; tests pass
    their own `session_factory`.
    """

    _instance: Optional["ApiConnection"] = None

    def __init__(self, config: ApiConfig, *, session_factory: Callable[[], requests.Session] = requests.Session):
        self._config = config
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None

    @classmethod
    def get_instance(cls, config: ApiConfig) -> "ApiConnection":
        if cls._instance is None:
            cls._instance = ApiConnection(config)
        return cls._instance

    @property
    def config(self) -> ApiConfig:
        return self._config

    def url(self, path: str) -> str:
        return self._config.base_url.rstrip("/") + "/" + path.lstrip("/")

    def biometric_url(self, path: str) -> str:
        prefix = "/" + self._config.biometric_prefix.strip("/")
        return self.url(prefix + "/" + path.lstrip("/"))

    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self._session_factory()
        return self._session
