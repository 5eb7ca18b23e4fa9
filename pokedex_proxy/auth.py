from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select, func
from typing import Annotated, Optional

from pokedex_proxy.config import settings
from pokedex_proxy.models import User, UserCreate, TokenData
from pokedex_proxy.database import get_session

# Configuración de Hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


# Funciones de Hashing

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


#Funciones de JWT

def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


# Usuarios

def get_user_by_username(session: Session, username: str) -> User | None:
    # Busqueda sin distinguir mayusculas
    statement = select(User).where(func.lower(User.username) == username.lower())
    return session.exec(statement).first()


def authenticate_user(session: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(session, username)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(session: Session, username: str, password: str) -> User:
    user_create = UserCreate(username=username, password=password)
    db_user = User(
        username=user_create.username,
        hashed_password=get_password_hash(user_create.password)
    )
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


# Dependencia de Usuario

def get_current_user(
        token: Annotated[Optional[str], Depends(oauth2_scheme)],
        session: Annotated[Session, Depends(get_session)]
) -> User:

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception

        token_data = TokenData(username=username, user_id=payload.get("user_id"))

    except JWTError:
        # Token caducado o manipulado
        raise credentials_exception

    user = get_user_by_username(session, token_data.username)
    if user is None:
        raise credentials_exception
    return user
