import pytest
from fastapi.testclient import TestClient
from sqlmodel import create_engine, SQLModel, Session
from sqlmodel.pool import StaticPool

from pokedex_proxy.auth import create_user
from pokedex_proxy.database import get_session
from pokedex_proxy.dependencies import get_pokemon_service, limiter
from pokedex_proxy.main import app
from pokedex_proxy.services.cache import TTLCache
from pokedex_proxy.services.pokeapi_client import RawResponse
from pokedex_proxy.services.pokemon_service import PokemonService

POKEMON_URL = "https://pokeapi.co/api/v2/pokemon"


def make_entry(name: str, number: int) -> dict:
    return {"name": name, "url": f"{POKEMON_URL}/{number}/"}


# Listado falso, desordenado a proposito
MOCK_LISTING = [
    make_entry("pikachu", 25),
    make_entry("bulbasaur", 1),
    make_entry("charmeleon", 5),
    make_entry("abra", 63),
    make_entry("charmander", 4),
    make_entry("ivysaur", 2),
    make_entry("charizard", 6),
    make_entry("unown-25", 10025),
]

MOCK_BULBASAUR = {
    "id": 1,
    "name": "bulbasaur",
    "height": 7,
    "weight": 69,
    "order": 1,
    "sprites": {
        "front_default": "http://example.com/1.png",
        "other": {"official-artwork": {"front_default": "http://example.com/art/1.png"}}
    },
    "types": [
        {"slot": 1, "type": {"name": "grass", "url": "https://pokeapi.co/api/v2/type/12/"}},
        {"slot": 2, "type": {"name": "poison", "url": "https://pokeapi.co/api/v2/type/4/"}}
    ],
    "stats": [
        {"base_stat": 45, "effort": 0, "stat": {"name": "hp"}},
        {"base_stat": 49, "effort": 0, "stat": {"name": "attack"}}
    ],
    "abilities": [
        {"ability": {"name": "overgrow"}, "is_hidden": False, "slot": 1},
        {"ability": {"name": "chlorophyll"}, "is_hidden": True, "slot": 3}
    ],
    "moves": [
        {"move": {"name": "razor-wind"}},
        {"move": {"name": "swords-dance"}}
    ],
    "forms": [{"name": "bulbasaur"}]
}

MOCK_PIKACHU = {
    "id": 25,
    "name": "pikachu",
    "sprites": {"front_default": "http://example.com/25.png"},
    "types": [{"slot": 1, "type": {"name": "electric"}}],
    "stats": [{"base_stat": 35, "stat": {"name": "hp"}}],
    "abilities": [{"ability": {"name": "static"}}],
    "moves": []
}

MOCK_DETAILS = {
    "1": MOCK_BULBASAUR,
    "bulbasaur": MOCK_BULBASAUR,
    "25": MOCK_PIKACHU,
    "pikachu": MOCK_PIKACHU,
}


class FakePokeAPIClient:
    """Sustituye a PokeAPIClient: sirve datos fijos y apunta cada llamada"""

    def __init__(self, listing, details):
        self.listing = listing
        self.details = details
        self.calls = []
        # Un codigo HTTP o una excepcion para simular fallos
        self.fail_with = None

    def get(self, path, params=None):
        self.calls.append((path, dict(params or {})))

        if isinstance(self.fail_with, Exception):
            raise self.fail_with
        if isinstance(self.fail_with, int):
            return RawResponse(self.fail_with, "Internal Server Error")

        if path == "/pokemon":
            offset = params["offset"]
            limit = params["limit"]
            return RawResponse(200, {
                "count": len(self.listing),
                "next": None,
                "previous": None,
                "results": self.listing[offset:offset + limit]
            })

        identifier = path.rsplit("/", 1)[-1]
        if identifier in self.details:
            return RawResponse(200, self.details[identifier])
        return RawResponse(404, "Not Found")

    def calls_to(self, path):
        return [call for call in self.calls if call[0] == path]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(name="fake_client")
def fake_client_fixture():
    return FakePokeAPIClient(list(MOCK_LISTING), dict(MOCK_DETAILS))


@pytest.fixture(name="clock")
def clock_fixture():
    return FakeClock()


@pytest.fixture(name="cache")
def cache_fixture(clock: FakeClock):
    return TTLCache(default_ttl=3600, clock=clock)


@pytest.fixture(name="service")
def service_fixture(fake_client: FakePokeAPIClient, cache: TTLCache):
    return PokemonService(client=fake_client, cache=cache, max_fetch=10_000)


@pytest.fixture(name="session")
def session_fixture():

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session

    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session, service: PokemonService):

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_pokemon_service] = lambda: service

    # Deshabilita el rate limiting
    app.state.limiter.enabled = False

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
    app.state.limiter.enabled = True


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session):
    create_user(session, "ash", "Pikachu25")
    return {"username": "ash", "password": "Pikachu25"}


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(client: TestClient, test_user: dict):

    response = client.post("/api/login", json=test_user)
    assert response.status_code == 200

    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="rate_limited_client")
def rate_limited_client_fixture(session: Session, service: PokemonService):

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_pokemon_service] = lambda: service

    limiter.reset()
    # Activamos el limiter SOLO para este cliente
    app.state.limiter.enabled = True

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
    app.state.limiter.enabled = False
