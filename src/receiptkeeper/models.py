"""Data models for receipt OCR extraction and processing."""

from datetime import date
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Line items priced outside (MIN_ITEM_PRICE, MAX_ITEM_PRICE) are OCR noise
MIN_ITEM_PRICE = 0.0
MAX_ITEM_PRICE = 10000.0

# OCR confidence (0-100) below which an extraction should be reviewed by hand
LOW_CONFIDENCE_THRESHOLD = 70.0


class RawDocument(BaseModel):
    """Text and confidence returned by the OCR engine for a single image."""

    model_config = ConfigDict(frozen=True)

    text: str
    confidence: float = Field(ge=0.0, le=100.0)


class LineItem(BaseModel):
    """A purchased item inferred from one receipt line.

    Attributes:
        name: Item description, trimmed
        quantity: Count token found on the line, 1 if there was none
        unit_price: Price found on the line
        total_price: Currently always equal to unit_price
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0)
    unit_price: float = Field(..., gt=MIN_ITEM_PRICE, lt=MAX_ITEM_PRICE)
    total_price: float


class ExtractionResult(BaseModel):
    """Structured fields extracted from a receipt's OCR text."""

    model_config = ConfigDict(frozen=True)

    raw_text: str
    confidence: float
    merchant_name: str | None = None
    total_amount: float | None = None
    tax_amount: float | None = None
    purchase_date: date | None = None
    line_items: tuple[LineItem, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def needs_review(self) -> bool:
        """Whether the OCR confidence is too low to trust the fields blindly."""
        return self.confidence < LOW_CONFIDENCE_THRESHOLD


class OCRStatus(StrEnum):
    """Processing state of a single receipt image."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingResult(BaseModel):
    """Outcome of running one image through OCR and field extraction."""

    file_name: str
    image_path: Path
    status: OCRStatus = OCRStatus.PROCESSING
    extraction: ExtractionResult | None = None
    error: str | None = None
