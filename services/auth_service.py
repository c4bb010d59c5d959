import uuid
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from core.exceptions import MalformedInputError, NotFoundError, StorageError
from models.users import User
from utils.hashing import get_password_hash
from utils.logger import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.lower().strip()


class AuthService:
    """
    Reads and writes user credentials. The only code that touches the
    email and hashed_password columns.
    """

    @staticmethod
    def create_user(email: str, password: str, db: Session) -> User:
        """
        Creates a new user.

        Raises:
            MalformedInputError: email already registered
            StorageError: insert failed
        """
        email = normalize_email(email)
        if AuthService.get_user_by_email(email, db):
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": email}
            )
            raise MalformedInputError("Email already registered")

        model = User(email=email, hashed_password=get_password_hash(password))

        try:
            db.add(model)
            db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            db.rollback()
            raise MalformedInputError("Email already registered") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't create user") from e

        db.refresh(model)
        return model

    @staticmethod
    def get_user_by_email(email: str, db: Session) -> User | None:
        try:
            return db.query(User).filter(User.email == normalize_email(email)).one_or_none()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't look up user") from e

    @staticmethod
    def get_user_by_id(user_id: uuid.UUID, db: Session) -> User | None:
        try:
            return db.query(User).filter(User.id == user_id).one_or_none()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't look up user") from e

    @staticmethod
    def set_credentials(user_id: uuid.UUID, email: str, hashed_password: str, db: Session) -> User:
        """
        Replaces a user's email and password hash.

        Raises:
            NotFoundError: no user with that id
            MalformedInputError: email belongs to another user
            StorageError: update failed
        """
        email = normalize_email(email)
        model = AuthService.get_user_by_id(user_id, db)
        if model is None:
            raise NotFoundError("User not found")

        owner = AuthService.get_user_by_email(email, db)
        if owner is not None and owner.id != user_id:
            raise MalformedInputError("Email already registered")

        model.email = email
        model.hashed_password = hashed_password

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise MalformedInputError("Email already registered") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't update user") from e

        db.refresh(model)
        return model

    @staticmethod
    def delete_all_users(db: Session) -> int:
        """Deletes every user together with their chirps and refresh tokens."""
        try:
            users = db.query(User).all()
            for user in users:
                db.delete(user)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Failed to delete users") from e

        return len(users)
