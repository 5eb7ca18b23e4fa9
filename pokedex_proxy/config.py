from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./pokedex.db"
    DATABASE_ECHO: bool = False

    SECRET_KEY: str = "cambiameEnProduccion"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 horas

    # PokeAPI
    POKEAPI_BASE_URL: str = "https://pokeapi.co/api/v2"
    POKEAPI_TIMEOUT: float = 10.0

    # Cache en memoria (1 hora)
    CACHE_TTL_SECONDS: int = 3600
    # Tope para descargar el listado completo (busqueda/orden)
    MAX_POKEMON_FETCH: int = 10_000
    DEFAULT_PAGE_LIMIT: int = 20

    # Usuario creado al arrancar
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin"

    LOG_FILE: str = "pokedex_proxy.log"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    class Config:
        env_file = ".env"

settings = Settings()
