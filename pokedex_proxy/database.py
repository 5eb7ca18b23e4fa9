import logging

from sqlmodel import create_engine, SQLModel, Session
from pokedex_proxy.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False},
    echo=settings.DATABASE_ECHO
)


def create_db_and_tables():
    # Creamos tablas y base de datos
    SQLModel.metadata.create_all(engine)


def get_session():
    # Crea y cierra sesion con cada petición
    with Session(engine) as session:
        yield session


def seed_admin_user(session: Session) -> None:
    # Idempotente: solo crea el admin si no existe
    from pokedex_proxy.auth import create_user, get_user_by_username

    if get_user_by_username(session, settings.ADMIN_USERNAME):
        logger.info("El usuario admin ya existe")
        return

    create_user(session, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    logger.info(f"Usuario admin creado (username: {settings.ADMIN_USERNAME})")
