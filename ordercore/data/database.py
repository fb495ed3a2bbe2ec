# ordercore/data/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ordercore.domain.errors import InternalError
from ordercore.utils.settings import DATABASE_URL
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Jedna operacja = jedna transakcja.
    commit przy sukcesie, rollback przy kazdym wyjatku;
    bledy bazy nie wychodza na zewnatrz - zamieniamy je na InternalError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Blad bazy danych, transakcja wycofana")
        raise InternalError("storage failure") from e
    except Exception:
        db.rollback()
        raise
