"""FastAPI dependency: get_current_buyer_id.

Usage in any protected router:
    from src.mp_gateway.auth.dependencies import get_current_buyer_id

    @router.get("/protected")
    async def protected(buyer_id: str = Depends(get_current_buyer_id)):
        ...
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.mp_common.errors import InvalidCredentialsError
from src.mp_gateway.auth.jwt_handler import decode_access_token

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_buyer_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Validate the Bearer token and return the buyer id from ``sub``.

    Raises InvalidCredentialsError (401, ``WWW-Authenticate: Bearer``) if the
    token is missing, invalid, or expired.
    """
    if credentials is None:
        raise InvalidCredentialsError()
    payload = decode_access_token(credentials.credentials)

    buyer_id = payload.get("sub")
    if not buyer_id:
        raise InvalidCredentialsError()
    return buyer_id
