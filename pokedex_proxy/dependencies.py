from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from pokedex_proxy.services.pokemon_service import PokemonService

# Un solo limiter para toda la app (los tests lo desactivan via app.state)
limiter = Limiter(key_func=get_remote_address)


def get_pokemon_service(request: Request) -> PokemonService:
    # El servicio (con su cache) se crea al arrancar en main.py
    return request.app.state.pokemon_service
