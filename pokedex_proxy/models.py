from sqlmodel import SQLModel, Field
from typing import Optional, List, Dict
from datetime import datetime, timezone
from enum import Enum
from pydantic import validator

from pokedex_proxy.services.errors import InvalidQueryError


class User(SQLModel, table=True):
    """Usuario del sistema"""
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, min_length=1, max_length=50)
    hashed_password: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Esquemas usuario

class UserCreate(SQLModel):
    """(Schema Create)"""
    username: str = Field(min_length=1, max_length=50)
    password: str

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 5:
            raise ValueError("La contraseña debe tener al menos 5 caracteres")
        return v

class UserRead(SQLModel):
    """(Schema Read) Nunca incluye la contraseña"""
    id: int
    username: str
    created_at: datetime
    updated_at: datetime

class LoginRequest(SQLModel):
    """(Schema) Cuerpo JSON del login"""
    username: str = ""
    password: str = ""

class LoginResponse(SQLModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"

class SessionRead(SQLModel):
    user: UserRead

class TokenData(SQLModel):
    """(Schema) Para los datos dentro del token"""
    username: Optional[str] = None
    user_id: Optional[int] = None

# --- Schemas de listado ---

class ListMode(str, Enum):
    # basic: una pagina de la PokeAPI; aggregate: listado completo en memoria
    BASIC = "basic"
    AGGREGATE = "aggregate"


class SortField(str, Enum):
    NAME = "name"
    NUMBER = "number"


def select_mode(search: Optional[str], sort: Optional[str]) -> ListMode:
    # Una busqueda vacia ("") tambien cuenta como busqueda
    if search is not None or sort:
        return ListMode.AGGREGATE
    return ListMode.BASIC


def resolve_sort_field(sort: Optional[str]) -> SortField:
    try:
        return SortField(sort)
    except ValueError:
        return SortField.NUMBER


class ListingEntry(SQLModel):
    name: str
    url: str
    number: int = Field(default=0, ge=0)


class ListQuery(SQLModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    search: Optional[str] = None
    sort: Optional[str] = None
    mode: ListMode = ListMode.BASIC

    @classmethod
    def build(
            cls,
            page: int = 1,
            limit: int = 20,
            search: Optional[str] = None,
            sort: Optional[str] = None
    ) -> "ListQuery":
        if page < 1:
            raise InvalidQueryError("page must be greater than or equal to 1")
        if limit < 1:
            raise InvalidQueryError("limit must be greater than or equal to 1")
        return cls(page=page, limit=limit, search=search, sort=sort, mode=select_mode(search, sort))


class ListResult(SQLModel):
    """(Schema Read) Pagina de resultados; total_pages es null en modo basic"""
    total: int
    total_pages: Optional[int] = None
    page: int
    results: List[ListingEntry] = Field(default_factory=list)

# --- Schema de resumen ---

class PokemonSummary(SQLModel):
    """(Schema Read) Vista reducida del detalle de un Pokémon"""
    id: Optional[int] = None
    name: str
    display_name: str
    display_number: str
    sprite: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    stats: Dict[str, int] = Field(default_factory=dict)
    abilities: List[str] = Field(default_factory=list)
    moves: List[str] = Field(default_factory=list)
