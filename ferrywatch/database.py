from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import settings

DATABASE_URL = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args, echo=settings.SQLALCHEMY_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


# Database Models
class PredictionFeedback(Base):
    """A user's answer to "did we predict your ferry right?" """
    __tablename__ = "prediction_feedback"

    id = Column(Integer, primary_key=True, index=True)
    terminal = Column(String, index=True, nullable=False)
    ferry_name = Column(String, nullable=False)
    correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime, default=_utcnow)


# Create tables
def init_db():
    Base.metadata.create_all(bind=engine)


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
