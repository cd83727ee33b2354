import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import get_settings

logger = logging.getLogger(__name__)


def _serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(settings.secret_key, salt="ledger-identity")


def issue_identity_token(owner_id: str) -> str:
    if not owner_id:
        raise ValueError("owner_id is required")
    return _serializer().dumps({"o": owner_id})


def read_identity_token(
    token: str, max_age_hours: Optional[int] = None
) -> Optional[str]:
    """Return the owner id carried by ``token``, or None if it is not valid."""
    if not token:
        return None
    if max_age_hours is None:
        max_age_hours = get_settings().token_max_age_hours
    try:
        data = _serializer().loads(token, max_age=max_age_hours * 3600)
    except SignatureExpired:
        logger.warning("identity_rejected: reason=expired")
        return None
    except BadSignature:
        logger.warning("identity_rejected: reason=bad_signature")
        return None

    owner_id = data.get("o") if isinstance(data, dict) else None
    if not isinstance(owner_id, str) or not owner_id:
        return None
    return owner_id
