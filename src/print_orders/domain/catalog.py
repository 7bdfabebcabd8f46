"""Print size catalog models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PrintSize:
    """Catalog entry for an orderable print size."""

    size_code: str
    display_name: str
    unit_price: Decimal
    is_active: bool
    min_pixel_width: int
    min_pixel_height: int
    recommended_pixel_width: int = 0
    recommended_pixel_height: int = 0
    sort_order: int = 1
    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class PriceQuote:
    """Price captured for a size at selection time."""

    size_code: str
    display_name: str
    unit_price: Decimal


@dataclass(frozen=True)
class PrintSizeRecommendation:
    """Quality rating of a photo for one print size."""

    print_size: PrintSize
    quality_rating: int
    description: str

    @property
    def is_recommended(self) -> bool:
        return self.quality_rating >= 3
