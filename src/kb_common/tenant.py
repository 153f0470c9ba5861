"""The authenticated seller, as seen by application services.

Every service method that touches customer, product or ledger rows takes the
seller id from here; routers never accept a seller id from the request body.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SellerContext:
    id: str
    name: str
    business_name: str
    language: str = "en"
    notifications_enabled: bool = True
