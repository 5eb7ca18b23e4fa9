import logging
import math
import re
from urllib.parse import quote
from typing import Any, Dict, List, Optional

from pokedex_proxy.config import settings
from pokedex_proxy.models import (
    ListingEntry,
    ListMode,
    ListQuery,
    ListResult,
    PokemonSummary,
    SortField,
    resolve_sort_field,
)
from pokedex_proxy.services.cache import TTLCache
from pokedex_proxy.services.errors import NotFoundError, ServiceError
from pokedex_proxy.services.pokeapi_client import PokeAPIClient, RawResponse
from pokedex_proxy.services.transform import to_summary

# Logger
logger = logging.getLogger(__name__)

FULL_LIST_CACHE_KEY = "list:full"

_NUMBER_IN_URL = re.compile(r"/pokemon/(\d+)/")
_NUMERIC_SEARCH = re.compile(r"[0-9]+")


def extract_pokemon_number(url: Optional[str]) -> int:
    # "https://pokeapi.co/api/v2/pokemon/25/" -> 25, si no encaja -> 0
    match = _NUMBER_IN_URL.search(url or "")
    return int(match.group(1)) if match else 0


def annotate_entry(entry: Dict[str, Any]) -> ListingEntry:
    number = entry.get("number")
    if not isinstance(number, int) or number < 0:
        number = extract_pokemon_number(entry.get("url"))
    return ListingEntry(name=entry.get("name", ""), url=entry.get("url", ""), number=number)


def matches_search(entry: ListingEntry, search: str) -> bool:
    term = search.strip().lower()

    # Si es un numero buscamos por ID exacto
    if _NUMERIC_SEARCH.fullmatch(term):
        return str(entry.number) == term

    return term.casefold() in entry.name.casefold()


def apply_sorting(entries: List[ListingEntry], sort: Optional[str]) -> List[ListingEntry]:
    sort_field = resolve_sort_field(sort)
    if sort_field == SortField.NAME:
        return sorted(entries, key=lambda e: e.name)
    return sorted(entries, key=lambda e: e.number)


def paginate(entries: List[ListingEntry], page: int, limit: int) -> ListResult:
    total = len(entries)
    offset = (page - 1) * limit
    return ListResult(
        total=total,
        total_pages=math.ceil(total / limit),
        page=page,
        results=entries[offset:offset + limit],
    )


class PokemonService:
    """Lectura de la PokeAPI con cache.

    Sin busqueda ni orden se pide y cachea una sola pagina. Con busqueda
    u orden se descarga una vez el listado completo y se filtra, ordena
    y pagina en memoria.
    """

    def __init__(
            self,
            client: PokeAPIClient,
            cache: TTLCache,
            max_fetch: Optional[int] = None
    ):
        self.client = client
        self.cache = cache
        self.max_fetch = max_fetch or settings.MAX_POKEMON_FETCH

    def fetch_list(self, query: ListQuery) -> ListResult:
        if query.mode == ListMode.AGGREGATE:
            return self._fetch_list_aggregate(query)
        return self._fetch_list_basic(query)

    def fetch_detail(self, id_or_name: str) -> Dict[str, Any]:
        cache_key = f"detail:{id_or_name}"
        return self.cache.fetch(
            cache_key,
            lambda: self._request(f"/pokemon/{quote(id_or_name, safe='')}")
        )

    def fetch_summary(self, id_or_name: str) -> PokemonSummary:
        return to_summary(self.fetch_detail(id_or_name))

    def _fetch_list_basic(self, query: ListQuery) -> ListResult:
        offset = (query.page - 1) * query.limit
        cache_key = f"list:{query.page}:{query.limit}"

        data = self.cache.fetch(
            cache_key,
            lambda: self._request("/pokemon", {"offset": offset, "limit": query.limit})
        )
        return ListResult(
            total=data.get("count", 0),
            page=query.page,
            results=[annotate_entry(entry) for entry in data.get("results", [])],
        )

    def _fetch_list_aggregate(self, query: ListQuery) -> ListResult:
        all_pokemon = [annotate_entry(entry) for entry in self._fetch_full_list()]

        if query.search and query.search.strip():
            filtered = [p for p in all_pokemon if matches_search(p, query.search)]
        else:
            filtered = all_pokemon

        sorted_entries = apply_sorting(filtered, query.sort)
        result = paginate(sorted_entries, query.page, query.limit)
        logger.info(
            f"Listado search={query.search!r} sort={query.sort!r}: "
            f"{result.total} resultados, pagina {query.page}/{result.total_pages}"
        )
        return result

    def _fetch_full_list(self) -> List[Dict[str, Any]]:
        def load() -> List[Dict[str, Any]]:
            data = self._request("/pokemon", {"offset": 0, "limit": self.max_fetch})
            return data.get("results", [])

        return self.cache.fetch(FULL_LIST_CACHE_KEY, load)

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response: RawResponse = self.client.get(path, params)

        if response.ok:
            return response.body
        if response.status_code == 404:
            logger.warning(f"Not found in PokeAPI: {path}")
            raise NotFoundError("Pokemon not found")
        raise ServiceError(f"PokeAPI returned status {response.status_code}")
