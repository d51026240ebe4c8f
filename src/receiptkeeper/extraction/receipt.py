"""Receipt extraction: one OCR call, then independent field extractors."""

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from receiptkeeper.extraction.line_items import extract_line_items
from receiptkeeper.extraction.merchant import extract_merchant_name
from receiptkeeper.extraction.patterns import extract_date, extract_tax, extract_total
from receiptkeeper.models import ExtractionResult, RawDocument


class TextRecognizer(Protocol):
    """Anything that can turn an image into text plus a 0-100 confidence."""

    def recognize(self, image_path: str, language: str) -> RawDocument: ...


def extract_fields(document: RawDocument) -> ExtractionResult:
    """Run every field extractor over an OCR document and assemble the result.

    Each extractor is independent and absence-tolerant, so this never fails
    for well-formed documents.
    """
    raw_text = document.text
    lines = [line.strip() for line in raw_text.split("\n") if line.strip()]

    return ExtractionResult(
        raw_text=raw_text,
        confidence=document.confidence,
        merchant_name=extract_merchant_name(lines),
        total_amount=extract_total(raw_text),
        tax_amount=extract_tax(raw_text),
        purchase_date=extract_date(raw_text),
        line_items=tuple(extract_line_items(raw_text)),
    )


class ReceiptExtractor:
    """
    Extracts structured purchase data from receipt images.

    The OCR engine is injected so that tests and alternative engines can be
    substituted for Google Vision.
    """

    def __init__(
        self,
        engine: TextRecognizer,
        language: str = "eng",
        on_progress: Callable[[str, str], None] | None = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            engine: OCR engine used to recognize text in images
            language: Language code passed to the engine (default: eng)
            on_progress: Optional callback for progress updates (event_type, message)
        """
        self.engine = engine
        self.language = language
        self.on_progress = on_progress

    def _report(self, event_type: str, message: str) -> None:
        if self.on_progress:
            self.on_progress(event_type, message)

    async def extract_receipt(self, image_path: str | Path) -> ExtractionResult:
        """
        Recognize a receipt image and extract its fields.

        The engine is called exactly once, without retries or a timeout.
        Callers needing bounded latency should wrap this call in a deadline.

        Args:
            image_path: Path to the receipt image

        Returns:
            ExtractionResult with every field that could be inferred

        Raises:
            Exception: Whatever the OCR engine raised, unchanged
        """
        path = str(image_path)
        self._report("ocr_start", f"Processing image: {path}")

        # OCR is synchronous, so we run it in an executor to keep the loop free
        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(
            None, self.engine.recognize, path, self.language
        )
        self._report(
            "ocr_success",
            f"Completed {Path(path).name} with {document.confidence:.1f}% confidence",
        )

        result = extract_fields(document)
        total = (
            f"${result.total_amount:.2f}" if result.total_amount is not None else "n/a"
        )
        self._report(
            "extraction_success",
            f"Extracted {Path(path).name}: merchant={result.merchant_name or 'n/a'}, "
            f"total={total}, items={len(result.line_items)}",
        )
        return result
