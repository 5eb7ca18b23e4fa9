from fastapi import APIRouter, Depends, Path, Query, Request
from typing import Any, Annotated, Dict, Optional

from pokedex_proxy.auth import get_current_user
from pokedex_proxy.config import settings
from pokedex_proxy.dependencies import get_pokemon_service, limiter
from pokedex_proxy.models import ListQuery, ListResult, PokemonSummary, User
from pokedex_proxy.services.errors import NotFoundError, ServiceError
from pokedex_proxy.services.pokemon_service import PokemonService


router = APIRouter(
    prefix="/api/pokemons",
    tags=["Pokémon (PokeAPI)"]
)


# ENDPOINT de listar pokemon (con busqueda, orden y paginacion)
@router.get("", response_model=ListResult)
@limiter.limit("60/minute")
def list_pokemons(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PokemonService, Depends(get_pokemon_service)],
    page: int = Query(default=1, description="Página (desde 1)"),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, description="Resultados por página"),
    search: Optional[str] = Query(default=None, description="Nombre parcial o número exacto"),
    sort: Optional[str] = Query(default=None, description="'name' o 'number'")
):
    # Los errores del servicio los traducen los handlers de main.py
    query = ListQuery.build(page=page, limit=limit, search=search, sort=sort)
    try:
        return service.fetch_list(query)
    except NotFoundError as e:
        # El listado no tiene 404: cualquier fallo de PokeAPI es un 503
        raise ServiceError(e.message) from e


# ENDPOINT pokemon por id o nombre (JSON de la PokeAPI tal cual)
@router.get("/{id_or_name}", response_model=Dict[str, Any])
@limiter.limit("60/minute")
def get_pokemon_detail(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PokemonService, Depends(get_pokemon_service)],
    id_or_name: str = Path(..., description="ID o nombre del Pokémon (ej: 132 o 'ditto')")
):
    return service.fetch_detail(id_or_name)


# ENDPOINT resumen
@router.get("/{id_or_name}/summary", response_model=PokemonSummary)
@limiter.limit("60/minute")
def get_pokemon_summary(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[PokemonService, Depends(get_pokemon_service)],
    id_or_name: str = Path(..., description="ID o nombre del Pokémon (ej: 132 o 'ditto')")
):
    return service.fetch_summary(id_or_name)
