from sqlalchemy.orm import Session
from app.data.models.user import UserModel
from app.domain.errors import UserNotFoundError
from app.repos.user_repo import UserRepo
from app.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        if self.repo.get_by_username(payload.username):
            raise ValueError(f"Username {payload.username} is already taken")

        user = UserModel(
            id=payload.id,
            username=payload.username,
            email=payload.email,
            role=payload.role.value,
        )
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return UserRead.model_validate(user)
