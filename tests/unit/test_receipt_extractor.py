"""Unit tests for the receipt extraction orchestrator."""

from datetime import date
from unittest.mock import Mock

import pytest

from receiptkeeper.extraction.receipt import ReceiptExtractor, extract_fields
from receiptkeeper.integrations.ocr import OCREngine, OCREngineError
from receiptkeeper.models import LineItem, RawDocument

pytestmark = pytest.mark.unit

HARDWARE_RECEIPT = """Joe's Hardware
123 Main St
555-123-4567
Hammer          $12.99
Nails 2 x $3.50
Subtotal        $19.99
Tax             $1.60
Total           $21.59
"""


class FakeEngine:
    """In-memory stand-in for the Vision OCR engine."""

    def __init__(self, document: RawDocument) -> None:
        self.document = document
        self.calls: list[tuple[str, str]] = []

    def recognize(self, image_path: str, language: str) -> RawDocument:
        self.calls.append((image_path, language))
        return self.document


class TestExtractFields:
    """Test assembling a result from OCR text."""

    def test_hardware_receipt(self):
        result = extract_fields(RawDocument(text=HARDWARE_RECEIPT, confidence=93.2))

        assert result.raw_text == HARDWARE_RECEIPT
        assert result.confidence == 93.2
        assert result.merchant_name == "Joe's Hardware"
        assert result.total_amount == 21.59
        assert result.tax_amount == 1.60
        assert result.purchase_date is None
        assert result.line_items == (
            LineItem(name="Hammer", quantity=1, unit_price=12.99, total_price=12.99),
            LineItem(name="Nails", quantity=2, unit_price=3.50, total_price=3.50),
        )

    def test_dated_receipt_with_blank_lines(self):
        text = "\n\n   \nCorner Cafe\nDate: 01/15/2024\nLatte 4.50\nTOTAL: 4.50\n"
        result = extract_fields(RawDocument(text=text, confidence=80.0))

        assert result.merchant_name == "Corner Cafe"
        assert result.purchase_date == date(2024, 1, 15)
        assert result.total_amount == 4.50
        assert result.tax_amount is None
        assert [item.name for item in result.line_items] == ["Latte"]

    def test_blank_leading_lines_do_not_consume_merchant_window(self):
        text = "\n\n\n\n\n\nCorner Cafe\nLatte 4.50"
        result = extract_fields(RawDocument(text=text, confidence=80.0))
        assert result.merchant_name == "Corner Cafe"

    def test_empty_text_resolves_every_field_to_none(self):
        result = extract_fields(RawDocument(text="", confidence=0.0))

        assert result.merchant_name is None
        assert result.total_amount is None
        assert result.tax_amount is None
        assert result.purchase_date is None
        assert result.line_items == ()
        assert result.needs_review is True

    def test_garbage_text_does_not_raise(self):
        text = "~~~ %%%\n$$$ ,,, ...\nTotal: ,\n99/99/9999\n||||"
        result = extract_fields(RawDocument(text=text, confidence=5.0))

        assert result.total_amount is None
        assert result.purchase_date is None
        assert result.line_items == ()


class TestReceiptExtractor:
    """Test the OCR-backed extraction flow."""

    @pytest.mark.asyncio
    async def test_extract_receipt_calls_engine_once(self):
        engine = FakeEngine(RawDocument(text=HARDWARE_RECEIPT, confidence=88.0))
        extractor = ReceiptExtractor(engine, language="eng")

        result = await extractor.extract_receipt("receipts/joe.jpg")

        assert engine.calls == [("receipts/joe.jpg", "eng")]
        assert result.merchant_name == "Joe's Hardware"
        assert result.total_amount == 21.59
        assert result.confidence == 88.0
        assert len(result.line_items) == 2

    @pytest.mark.asyncio
    async def test_extract_receipt_passes_language_hint(self, tmp_path):
        engine = FakeEngine(RawDocument(text="", confidence=0.0))
        extractor = ReceiptExtractor(engine, language="deu")

        await extractor.extract_receipt(tmp_path / "beleg.png")

        assert engine.calls == [(str(tmp_path / "beleg.png"), "deu")]

    @pytest.mark.asyncio
    async def test_engine_failure_propagates_unchanged(self):
        mock_engine = Mock(spec=OCREngine)
        error = OCREngineError("Vision API failed for bad.jpg: Bad image data.")
        mock_engine.recognize.side_effect = error
        extractor = ReceiptExtractor(mock_engine)

        with pytest.raises(OCREngineError) as exc_info:
            await extractor.extract_receipt("bad.jpg")

        assert exc_info.value is error
        mock_engine.recognize.assert_called_once_with("bad.jpg", "eng")

    @pytest.mark.asyncio
    async def test_progress_events_are_reported(self):
        events = []
        engine = FakeEngine(RawDocument(text=HARDWARE_RECEIPT, confidence=88.0))
        extractor = ReceiptExtractor(
            engine, on_progress=lambda event, message: events.append((event, message))
        )

        await extractor.extract_receipt("joe.jpg")

        assert [event for event, _ in events] == [
            "ocr_start",
            "ocr_success",
            "extraction_success",
        ]
        assert "88.0% confidence" in events[1][1]
        assert "merchant=Joe's Hardware" in events[2][1]
        assert "total=$21.59" in events[2][1]
        assert "items=2" in events[2][1]

    @pytest.mark.asyncio
    async def test_no_success_events_after_engine_failure(self):
        events = []
        mock_engine = Mock(spec=OCREngine)
        mock_engine.recognize.side_effect = FileNotFoundError("missing.jpg")
        extractor = ReceiptExtractor(
            mock_engine, on_progress=lambda event, message: events.append(event)
        )

        with pytest.raises(FileNotFoundError):
            await extractor.extract_receipt("missing.jpg")

        assert events == ["ocr_start"]
