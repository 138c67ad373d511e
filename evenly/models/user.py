from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from evenly.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # subject claim issued by the auth service
    auth_service_id = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
