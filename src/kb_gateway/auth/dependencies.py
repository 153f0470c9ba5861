"""FastAPI dependency: get_current_seller.

Usage in any tenant-scoped router:
    from src.kb_gateway.auth.dependencies import get_current_seller

    @router.get("/customers")
    async def list_customers(seller: SellerContext = Depends(get_current_seller)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import get_db_session
from src.kb_common.errors import InvalidTokenError, SellerDisabledError
from src.kb_common.tenant import SellerContext
from src.kb_gateway.auth.jwt_handler import decode_access_token
from src.kb_gateway.seller.db_models import SellerModel

# tokenUrl points Swagger UI at the seller sign-in service
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_seller(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> SellerContext:
    """Validate the Bearer token and return the seller it belongs to.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown seller. Raises SellerDisabledError (403) for deactivated sellers.
    """
    try:
        payload = decode_access_token(token)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(SellerModel).where(SellerModel.id == payload["sub"]))
    seller = result.scalar_one_or_none()
    if seller is None:
        raise _CREDENTIALS_EXCEPTION

    if not seller.is_active:
        raise SellerDisabledError()

    return seller.to_context()
