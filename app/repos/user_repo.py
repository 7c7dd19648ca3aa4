from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from app.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_username(self, username: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.username == username)
        ).scalar_one_or_none()

    def get_emails(self, user_ids: Iterable[int]) -> dict:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(UserModel.id, UserModel.email).where(UserModel.id.in_(ids))
        ).all()
        return {uid: email for uid, email in rows}

    def get_sellers(self, username: Optional[str] = None) -> List[UserModel]:
        stmt = select(UserModel).where(UserModel.role.in_(("SELLER", "ADMIN")))
        if username:
            stmt = stmt.where(UserModel.username == username)
        return list(self.db.execute(stmt.order_by(UserModel.id)).scalars().all())

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
