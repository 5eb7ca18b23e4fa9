import logging
from typing import Any, Dict, NamedTuple, Optional

import requests
from requests.exceptions import RequestException, Timeout

from pokedex_proxy.config import settings
from pokedex_proxy.services.errors import (
    ServiceError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)

# Logger
logger = logging.getLogger(__name__)


class RawResponse(NamedTuple):
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class PokeAPIClient:
    """Transporte HTTP contra la PokeAPI.

    No interpreta los codigos de estado: los devuelve tal cual para que
    el servicio decida. Solo traduce fallos de red y timeouts. Sin reintentos.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.POKEAPI_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.POKEAPI_TIMEOUT

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> RawResponse:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.info(f"Consumiendo PokeAPI: GET {url} con params {params}")

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except Timeout:
            logger.error(f"Timeout al consultar PokeAPI: {url}")
            raise UpstreamTimeoutError("Request timeout - PokeAPI is not responding")
        except RequestException as e:  # Error de red
            logger.error(f"Error de red al consultar PokeAPI: {e}")
            raise UpstreamConnectionError(f"Network error: {e}")

        if not 200 <= response.status_code < 300:
            logger.warning(f"PokeAPI respondio {response.status_code}: {url}")
            return RawResponse(response.status_code, response.text)

        try:
            return RawResponse(response.status_code, response.json())
        except ValueError as e:
            logger.error(f"Respuesta no JSON de PokeAPI: {url}", exc_info=True)
            raise ServiceError(f"Unexpected error: {e}")
