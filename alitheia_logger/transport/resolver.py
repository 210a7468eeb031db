"""
Remote Object Resolver
======================

Looks up remote objects by name through the naming service and caches the
references it hands out.

The naming service answers GET {naming_url}/objects/{name} with
{"name": ..., "url": ..., "type_id": ...}.

Author: Alitheia Core Team
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from .log_models import ObjectReference
from ..utils import CacheManager, ErrorHandler, EndpointResolutionError, measure_time
from ..utils.data_utils import parse_json_safely

# Import configuration
from ..config import config


class ObjectResolver:
    """
    Resolves object names to ObjectReference instances
    Lookups are cached for RESOLVER_CACHE_TTL seconds
    """

    def __init__(self, naming_url: str = None, cache: CacheManager = None,
                 session: requests.Session = None, timeout: float = None):
        """
        Initialize the resolver

        Args:
            naming_url (str): Base URL of the naming service (default from config)
            cache (CacheManager): Cache for resolved references
            session (requests.Session): HTTP session to use
            timeout (float): Request timeout in seconds (default from config)
        """
        self.logger = logging.getLogger(__name__)
        self.error_handler = ErrorHandler()

        self.naming_url = (naming_url or config.NAMING_SERVICE_URL).rstrip('/')
        self.timeout = timeout or config.REMOTE_TIMEOUT
        self.cache = cache or CacheManager(default_ttl=config.RESOLVER_CACHE_TTL)
        self._owns_cache = cache is None
        self._session = session or requests.Session()
        self._owns_session = session is None

        self.logger.debug(f"Object resolver initialized for {self.naming_url}")

    def resolve(self, object_name: str) -> ObjectReference:
        """
        Get a reference to a named remote object

        Args:
            object_name (str): Name the object is registered under

        Returns:
            ObjectReference: Reference to the object

        Raises:
            EndpointResolutionError: If the object is unknown or the naming
                service cannot be reached
        """
        if not object_name or not isinstance(object_name, str):
            raise EndpointResolutionError(f"Invalid object name: {object_name!r}")

        cache_key = f"object_ref_{object_name}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self.logger.debug(f"Resolved {object_name} from cache")
            return cached

        reference = self._lookup(object_name)

        self.cache.set(cache_key, reference)
        self.logger.info(f"Resolved {object_name} to {reference.url}")
        return reference

    def invalidate(self, object_name: str) -> bool:
        """
        Forget a cached reference so the next resolve asks the naming service

        Returns:
            bool: True if a cached reference was dropped
        """
        dropped = self.cache.delete(f"object_ref_{object_name}")
        if dropped:
            self.logger.debug(f"Invalidated cached reference for {object_name}")
        return dropped

    @measure_time(category="naming_service")
    def _lookup(self, object_name: str) -> ObjectReference:
        """Query the naming service for one object"""
        url = f"{self.naming_url}/objects/{quote(object_name, safe='')}"

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.error_handler.handle_api_error("NamingService", url, exception=e)
            raise EndpointResolutionError(f"Naming service unreachable at {self.naming_url}", e)

        if response.status_code == 404:
            raise EndpointResolutionError(f"Object {object_name} is not registered with the naming service")

        if response.status_code != 200:
            self.error_handler.handle_api_error(
                "NamingService", url,
                status_code=response.status_code,
                response_text=response.text
            )
            raise EndpointResolutionError(
                f"Naming service returned HTTP {response.status_code} for {object_name}"
            )

        return self._parse_reference(object_name, response.text)

    def _parse_reference(self, object_name: str, body: str) -> ObjectReference:
        """Build an ObjectReference from a naming service reply"""
        data = parse_json_safely(body)
        if not isinstance(data, dict):
            raise EndpointResolutionError(f"Malformed naming service reply for {object_name}")

        url: Optional[str] = data.get("url")
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise EndpointResolutionError(f"Naming service returned no usable URL for {object_name}")

        return ObjectReference(
            name=data.get("name") or object_name,
            url=url.rstrip('/'),
            type_id=data.get("type_id")
        )

    def close(self) -> None:
        """Release the HTTP session and the cache sweeper"""
        if self._owns_session:
            self._session.close()
        if self._owns_cache:
            self.cache.shutdown()
