"""Short confirmation codes handed to buyers, sellers and couriers."""

import secrets
import string

from protean.utils.globals import current_domain

from marketplace.config import CODE_GENERATION_ATTEMPTS, CONFIRMATION_CODE_LENGTH
from marketplace.errors import ConflictError
from marketplace.order.order import Order

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code(length: int = CONFIRMATION_CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _code_in_use(code: str) -> bool:
    dao = current_domain.repository_for(Order)._dao
    return bool(
        dao.query.filter(delivery_code=code).all().items or dao.query.filter(pickup_code=code).all().items
    )


def unique_code(exclude: tuple[str, ...] = ()) -> str:
    """A code not used as a delivery or pickup code by any stored order."""
    for _ in range(CODE_GENERATION_ATTEMPTS):
        code = generate_code()
        if code not in exclude and not _code_in_use(code):
            return code
    raise ConflictError({"code": ["Could not generate a unique confirmation code"]})


def issue_codes() -> tuple[str, str]:
    """A ``(delivery_code, pickup_code)`` pair, distinct from each other and from existing orders."""
    delivery_code = unique_code()
    pickup_code = unique_code(exclude=(delivery_code,))
    return delivery_code, pickup_code
