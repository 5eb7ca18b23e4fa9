from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlmodel import Session
from typing import Annotated
import logging

from pokedex_proxy.auth import authenticate_user, create_access_token, get_current_user
from pokedex_proxy.database import get_session
from pokedex_proxy.dependencies import limiter
from pokedex_proxy.models import LoginRequest, LoginResponse, SessionRead, User, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Autenticación"]
)


# LOGIN (JSON: username y password)
@router.post("/login", response_model=LoginResponse, summary="Iniciar sesion")
@limiter.limit("10/minute")
def login(
        request: Request,
        credentials: LoginRequest,
        session: Annotated[Session, Depends(get_session)]
):
    if not credentials.username.strip() or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required"
        )

    user = authenticate_user(session, credentials.username, credentials.password)
    if user is None:
        logger.warning(f"Login fallido para '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": user.username, "user_id": user.id})
    return LoginResponse(user=UserRead.model_validate(user), access_token=access_token)


# LOGOUT: el token no guarda estado, el cliente lo descarta
@router.post("/logout", summary="Cerrar sesion")
def logout():
    return {"message": "Logged out successfully"}


# SESION actual
@router.get("/session", response_model=SessionRead, summary="Sesion actual")
def read_session(current_user: Annotated[User, Depends(get_current_user)]):
    return SessionRead(user=UserRead.model_validate(current_user))
