from sqlalchemy import Column, Integer, String

from app.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="CUSTOMER")  # CUSTOMER, SELLER, ADMIN
