"""Receipt field extraction module."""

from receiptkeeper.extraction.line_items import extract_line_items, parse_line_item
from receiptkeeper.extraction.merchant import extract_merchant_name
from receiptkeeper.extraction.patterns import extract_date, extract_tax, extract_total
from receiptkeeper.extraction.receipt import (
    ReceiptExtractor,
    TextRecognizer,
    extract_fields,
)

__all__ = [
    "ReceiptExtractor",
    "TextRecognizer",
    "extract_date",
    "extract_fields",
    "extract_line_items",
    "extract_merchant_name",
    "extract_tax",
    "extract_total",
    "parse_line_item",
]
