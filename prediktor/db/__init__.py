from .database import init_db, get_db, get_db_dependency, engine, SessionLocal
from .models import Base, UserAccount, UserProfileRecord, DocumentRecord

__all__ = [
    "init_db", "get_db", "get_db_dependency", "engine", "SessionLocal",
    "Base", "UserAccount", "UserProfileRecord", "DocumentRecord",
]
