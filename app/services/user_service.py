from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.data.models.user import UserModel
from app.domain.errors import NotFoundError, InvalidInputError
from app.repos.user_repo import UserRepo
from app.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_by_username(payload.username)
        if existing:
            raise InvalidInputError("Username already taken")

        user = UserModel(username=payload.username, email=payload.email)
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            #rownolegla rejestracja z tym samym username (unique w bazie)
            self.repo.rollback()
            raise InvalidInputError("Username already taken")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
