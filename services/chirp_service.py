import uuid
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.exceptions import ForbiddenError, MalformedInputError, NotFoundError, StorageError
from models.chirps import Chirp, MAX_CHIRP_LENGTH
from utils.logger import get_logger

logger = get_logger(__name__)

BAD_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})


def clean_body(body: str, bad_words=BAD_WORDS) -> str:
    """Replaces each space-separated word found in bad_words (any case) with ****."""
    words = body.split(" ")
    return " ".join("****" if word.lower() in bad_words else word for word in words)


def parse_uuid(value: str, field: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError, TypeError) as e:
        raise MalformedInputError(f"Invalid {field}") from e


class ChirpService:

    @staticmethod
    def create_chirp(user_id: uuid.UUID, body: str, db: Session) -> Chirp:
        if len(body) > MAX_CHIRP_LENGTH:
            raise MalformedInputError("Chirp is too long")

        model = Chirp(body=clean_body(body), user_id=user_id)

        try:
            db.add(model)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't create chirp") from e

        db.refresh(model)
        return model

    @staticmethod
    def list_chirps(db: Session, author_id: str | None = None, sort: str = "asc") -> list[Chirp]:
        """
        All chirps, or one author's, ordered by created_at.
        Any sort value other than "desc" means ascending.
        """
        query = db.query(Chirp)
        if author_id:
            query = query.filter(Chirp.user_id == parse_uuid(author_id, "author_id"))

        order = Chirp.created_at.desc() if sort == "desc" else Chirp.created_at.asc()

        try:
            return query.order_by(order).all()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't get chirps") from e

    @staticmethod
    def get_chirp(chirp_id: str, db: Session) -> Chirp:
        chirp_uuid = parse_uuid(chirp_id, "chirp ID")

        try:
            model = db.query(Chirp).filter(Chirp.id == chirp_uuid).one_or_none()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't get chirp") from e

        if model is None:
            raise NotFoundError("Chirp not found")
        return model

    @staticmethod
    def delete_chirp(chirp_id: str, user_id: uuid.UUID, db: Session) -> None:
        model = ChirpService.get_chirp(chirp_id, db)

        if model.user_id != user_id:
            logger.warning(
                "Chirp delete denied - not the author",
                extra={"chirp_id": str(model.id), "user_id": str(user_id)}
            )
            raise ForbiddenError("You don't own this chirp")

        try:
            db.delete(model)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("Couldn't delete chirp") from e
