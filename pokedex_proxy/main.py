from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import time

from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlmodel import Session

from pokedex_proxy.config import settings
from pokedex_proxy.database import create_db_and_tables, engine, seed_admin_user
from pokedex_proxy.dependencies import limiter
from pokedex_proxy.routers import pokemons, sessions
from pokedex_proxy.services.cache import TTLCache
from pokedex_proxy.services.errors import InvalidQueryError, NotFoundError, ServiceError
from pokedex_proxy.services.pokeapi_client import PokeAPIClient
from pokedex_proxy.services.pokemon_service import PokemonService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger("pokedex_proxy")


app = FastAPI(
    title="Pokédex proxy",
    description="Listado, búsqueda y detalle de Pokémon sobre la PokeAPI, con cache."
)

# Servicio con su cache; se inyecta en los endpoints via get_pokemon_service
app.state.pokemon_service = PokemonService(
    client=PokeAPIClient(),
    cache=TTLCache(default_ttl=settings.CACHE_TTL_SECONDS)
)


# Loging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"Response: {response.status_code} | "
        f"Duration: {duration:.3f}s"
    )

    return response


# Errores -> {"error": ...}

@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Pokemon not found"}
    )


@app.exception_handler(ServiceError)
def service_error_handler(request: Request, exc: ServiceError):
    logger.error(f"Error de PokeAPI en {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": f"PokeAPI error: {exc.message}"}
    )


@app.exception_handler(InvalidQueryError)
def invalid_query_handler(request: Request, exc: InvalidQueryError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc)}
    )


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid parameters: {fields}"}
    )


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers
    )


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_logger(request: Request, exc: RateLimitExceeded):
    logger.warning(
        f"Rate limit exceeded: "
        f"IP {request.client.host} on path {request.url.path}. "
        f"Limit: {exc.detail}"
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": f"Too many requests: {exc.detail}"}
    )


@app.on_event("startup")
def on_startup():
    create_db_and_tables()
    with Session(engine) as session:
        seed_admin_user(session)
    logger.info("Database iniciada con exito.")

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=3600
)


@app.get("/")
def read_root():
    return {"message": "Bienvenido al proxy de la Pokédex"}

app.include_router(pokemons.router)
app.include_router(sessions.router)

if __name__ == "__main__":
    uvicorn.run("pokedex_proxy.main:app", host="0.0.0.0", port=8000, reload=True)
