from datetime import datetime, timezone

from fastapi import Request

from signage_cms.errors import UnauthorizedError

# Identity headers are set by the authenticating proxy in front of this service.
CUSTOMER_HEADER = "X-Customer-ID"
USER_HEADER = "X-User-ID"
PLAYER_HEADER = "X-Player-ID"


def _header_int(request: Request, name: str) -> int | None:
    raw = (request.headers.get(name) or "").strip()
    if not raw:
        return None
    if not raw.isdigit():
        raise UnauthorizedError(f"Invalid {name} header")
    return int(raw)


def require_customer_id(request: Request) -> int:
    customer_id = _header_int(request, CUSTOMER_HEADER)
    if customer_id is None:
        raise UnauthorizedError(f"Missing {CUSTOMER_HEADER} header")
    return customer_id


def optional_user_id(request: Request) -> int | None:
    return _header_int(request, USER_HEADER)


def require_player_id(request: Request) -> int:
    player_id = _header_int(request, PLAYER_HEADER)
    if player_id is None:
        raise UnauthorizedError(f"Missing {PLAYER_HEADER} header")
    return player_id


def get_clock() -> datetime:
    return datetime.now(timezone.utc)
