from contextlib import contextmanager
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import secrets
import string
from typing import Iterator, List, Optional, Tuple
from src.app.core.config import settings, logger
from src.app.core.exceptions import (
    CodeGenerationExhausted,
    InternalError,
    InvalidInput,
    NotFound,
)
from src.app.models.url import URL

ALPHABET = string.ascii_lowercase + string.digits


def generate_short_code(length: int = 6) -> str:
    """
    Generate a random short code of specified length.

    Args:
        length: Length of the short code to generate, defaults to 6

    Returns:
        A random string of lowercase letters and digits
    """
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def validate_long_url(long_url: Optional[str]) -> str:
    """
    Check that a URL is present and starts with http.

    Raises:
        InvalidInput: If the URL is missing, empty or has another scheme
    """
    if not long_url or not long_url.startswith("http"):
        raise InvalidInput()
    return long_url


def build_short_url(base_url: str, short_code: str) -> str:
    return f"{base_url.rstrip('/')}/{short_code}"


def serialize_url(url: URL) -> dict:
    return {
        "id": url.id,
        "short_code": url.short_code,
        "long_url": url.long_url,
        "created_at": url.created_at,
        "clicks": url.clicks,
    }


@contextmanager
def store_errors(db: Session, action: str) -> Iterator[None]:
    """
    Roll back and re-raise database failures as InternalError.

    Args:
        db: Database session
        action: Short description of the operation, used in the log line
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while {action}: {e}")
        raise InternalError() from e


def get_url_by_short_code(db: Session, short_code: str) -> Optional[URL]:
    return db.query(URL).filter(URL.short_code == short_code).first()


def get_url_by_long_url(db: Session, long_url: str) -> Optional[URL]:
    return db.query(URL).filter(URL.long_url == long_url).first()


def allocate_short_code(db: Session) -> str:
    """
    Generate a short code that is not yet taken.

    The check and the later insert are not atomic; the unique constraint on
    short_code rejects a concurrent create that picked the same code.

    Args:
        db: Database session

    Returns:
        A free short code

    Raises:
        CodeGenerationExhausted: If every attempt collided
    """
    attempts = settings.CODE_GENERATION_ATTEMPTS
    for attempt in range(1, attempts + 1):
        short_code = generate_short_code(settings.SHORT_CODE_LENGTH)
        if get_url_by_short_code(db, short_code) is None:
            return short_code
        logger.warning(f"Short code collision on {short_code} (attempt {attempt}/{attempts})")

    logger.error(f"Could not generate a unique short code after {attempts} attempts")
    raise CodeGenerationExhausted()


def shorten_url(db: Session, long_url: Optional[str]) -> Tuple[URL, bool]:
    """
    Create a short code for a URL, or return the existing one.

    Args:
        db: Database session
        long_url: URL to shorten, must start with http

    Returns:
        Tuple of the URL record and whether it was newly created

    Raises:
        InvalidInput: If the URL is missing or does not start with http
        CodeGenerationExhausted: If no free short code could be generated
        InternalError: If the database fails, including a lost insert race
    """
    long_url = validate_long_url(long_url)

    with store_errors(db, "shortening URL"):
        existing = get_url_by_long_url(db, long_url)
        if existing:
            return existing, False

        short_code = allocate_short_code(db)

        db_url = URL(short_code=short_code, long_url=long_url, clicks=0)
        db.add(db_url)
        try:
            db.commit()
        except IntegrityError:
            logger.error(f"Short code {short_code} was taken by a concurrent request")
            raise
        db.refresh(db_url)

    logger.info(f"Created short code {short_code} for {long_url}")
    return db_url, True


def list_urls(db: Session, limit: Optional[int] = None) -> List[URL]:
    """
    Get the most recently created URLs, newest first.

    Args:
        db: Database session
        limit: Maximum number of results, defaults to URL_LIST_LIMIT

    Returns:
        List of URL objects
    """
    with store_errors(db, "listing URLs"):
        return (
            db.query(URL)
            .order_by(URL.created_at.desc(), URL.id.desc())
            .limit(settings.URL_LIST_LIMIT if limit is None else limit)
            .all()
        )


def get_url(db: Session, short_code: str) -> URL:
    """
    Get a URL by its short code.

    Raises:
        NotFound: If no URL has this short code
    """
    with store_errors(db, f"fetching {short_code}"):
        db_url = get_url_by_short_code(db, short_code)
    if not db_url:
        raise NotFound()
    return db_url


def update_url(db: Session, short_code: str, long_url: Optional[str]) -> URL:
    """
    Replace the long URL behind a short code.

    Only long_url changes; short_code, created_at and clicks are untouched.

    Args:
        db: Database session
        short_code: Short code of URL to update
        long_url: Replacement URL, must start with http

    Returns:
        Updated URL object

    Raises:
        InvalidInput: If the replacement URL is invalid
        NotFound: If no URL has this short code
    """
    long_url = validate_long_url(long_url)

    with store_errors(db, f"updating {short_code}"):
        db_url = db.scalars(
            update(URL)
            .where(URL.short_code == short_code)
            .values(long_url=long_url)
            .returning(URL)
            .execution_options(synchronize_session=False)
        ).one_or_none()
        db.commit()

    if not db_url:
        raise NotFound()

    logger.info(f"Updated {short_code} -> {long_url}")
    return db_url


def delete_url(db: Session, short_code: str) -> str:
    """
    Delete a URL by short code.

    Returns:
        The deleted short code

    Raises:
        NotFound: If no URL has this short code
    """
    with store_errors(db, f"deleting {short_code}"):
        deleted = db.execute(
            delete(URL)
            .where(URL.short_code == short_code)
            .returning(URL.short_code)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()
        db.commit()

    if deleted is None:
        raise NotFound()

    logger.info(f"Deleted {short_code}")
    return deleted


def resolve_and_count(db: Session, short_code: str) -> str:
    """
    Increment the click counter of a short code and return its long URL.

    Increment and read happen in a single UPDATE ... RETURNING statement, so
    concurrent redirects never lose a count.

    Args:
        db: Database session
        short_code: Short code taken from the request path

    Returns:
        The long URL to redirect to

    Raises:
        NotFound: If no URL has this short code
    """
    with store_errors(db, f"redirecting {short_code}"):
        long_url = db.execute(
            update(URL)
            .where(URL.short_code == short_code)
            .values(clicks=URL.clicks + 1)
            .returning(URL.long_url)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()
        db.commit()

    if long_url is None:
        raise NotFound("Short URL not found")
    return long_url
