"""Domain models for kb_product — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Product:
    id: str
    seller_id: str
    name: str
    unit: str                  # ProductUnit value
    description: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
