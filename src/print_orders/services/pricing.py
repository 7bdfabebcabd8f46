"""Print size catalog access and price snapshots."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol

from print_orders.domain.catalog import PriceQuote, PrintSize, PrintSizeRecommendation
from print_orders.domain.photos import PhotoDimensions
from print_orders.errors import (
    DuplicatePrintSizeError,
    PrintSizeInactiveError,
    PrintSizeNotFoundError,
    ValidationFailedError,
)

_logger = logging.getLogger(__name__)


class PrintSizeRepository(Protocol):
    """Persistence interface for the print size catalog."""

    def get_by_code(self, size_code: str) -> PrintSize | None:
        """Return a print size by code, if present."""

    def list_print_sizes(self, include_inactive: bool) -> list[PrintSize]:
        """Return catalog entries."""

    def create_print_size(self, print_size: PrintSize) -> PrintSize:
        """Create a catalog entry and return it."""

    def update_print_size(self, print_size: PrintSize) -> PrintSize:
        """Replace a catalog entry and return it."""


@dataclass
class PricingService:
    """Resolves current prices and manages the catalog."""

    repository: PrintSizeRepository

    def resolve(self, size_code: str) -> PriceQuote:
        """Return the current price for an orderable size."""
        print_size = self.repository.get_by_code(size_code)
        if print_size is None:
            raise PrintSizeNotFoundError(size_code)
        if not print_size.is_active:
            raise PrintSizeInactiveError(size_code)
        return PriceQuote(
            size_code=print_size.size_code,
            display_name=print_size.display_name,
            unit_price=print_size.unit_price,
        )

    def list_active(self) -> list[PrintSize]:
        """Return orderable sizes in display order."""
        sizes = self.repository.list_print_sizes(include_inactive=False)
        return sorted(
            (size for size in sizes if size.is_active),
            key=lambda size: (size.sort_order, size.size_code),
        )

    def list_all(self) -> list[PrintSize]:
        """Return every size, including disabled ones."""
        sizes = self.repository.list_print_sizes(include_inactive=True)
        return sorted(sizes, key=lambda size: (size.sort_order, size.size_code))

    def create_print_size(self, print_size: PrintSize, updated_by: str) -> PrintSize:
        """Add a new size to the catalog."""
        _validate_price(print_size.unit_price)
        if self.repository.get_by_code(print_size.size_code) is not None:
            raise DuplicatePrintSizeError(print_size.size_code)
        created = self.repository.create_print_size(
            replace(
                print_size,
                updated_at=datetime.now(tz=UTC),
                updated_by=updated_by,
            )
        )
        _logger.info("Print size %s created by %s", created.size_code, updated_by)
        return created

    def update_print_size(
        self,
        size_code: str,
        *,
        unit_price: Decimal,
        is_active: bool,
        sort_order: int,
        updated_by: str,
    ) -> PrintSize:
        """Change price, availability and ordering of a size.

        Existing cart lines and orders keep the price they captured.
        """
        _validate_price(unit_price)
        current = self.repository.get_by_code(size_code)
        if current is None:
            raise PrintSizeNotFoundError(size_code)
        updated = self.repository.update_print_size(
            replace(
                current,
                unit_price=unit_price,
                is_active=is_active,
                sort_order=sort_order,
                updated_at=datetime.now(tz=UTC),
                updated_by=updated_by,
            )
        )
        _logger.info(
            "Print size %s updated by %s: price=%s active=%s",
            size_code,
            updated_by,
            unit_price,
            is_active,
        )
        return updated

    def recommend(self, dimensions: PhotoDimensions) -> list[PrintSizeRecommendation]:
        """Rate every active size for a photo, best first."""
        recommendations = [
            _rate(dimensions, size) for size in self.list_active()
        ]
        return sorted(
            recommendations,
            key=lambda rec: (-rec.quality_rating, rec.print_size.sort_order),
        )


def _validate_price(unit_price: Decimal) -> None:
    if unit_price <= 0:
        raise ValidationFailedError("Unit price must be positive")


def _rate(dimensions: PhotoDimensions, size: PrintSize) -> PrintSizeRecommendation:
    rating, description = _quality(dimensions, size)
    return PrintSizeRecommendation(
        print_size=size, quality_rating=rating, description=description
    )


def _quality(dimensions: PhotoDimensions, size: PrintSize) -> tuple[int, str]:
    width = dimensions.width
    height = dimensions.height
    if width <= 0 or height <= 0:
        return 1, "Poor quality - Resolution too low for good print quality"
    recommended_w = size.recommended_pixel_width or size.min_pixel_width
    recommended_h = size.recommended_pixel_height or size.min_pixel_height
    if width >= recommended_w and height >= recommended_h:
        return 5, "Excellent quality - High resolution recommended for this print size"
    min_w = size.min_pixel_width
    min_h = size.min_pixel_height
    if width >= min_w * 1.5 and height >= min_h * 1.5:
        return 4, "Very good quality - Well above minimum requirements"
    if width >= min_w and height >= min_h:
        return 3, "Good quality - Meets minimum requirements"
    if width >= min_w * 0.8 and height >= min_h * 0.8:
        return 2, "Fair quality - Slightly below minimum, may show some pixelation"
    return 1, "Poor quality - Resolution too low for good print quality"
