"""Example usage of the receipt extractor.

This example runs a receipt image through Google Vision OCR and prints the
fields inferred from its text.
"""

import asyncio
import sys

from receiptkeeper.extraction import ReceiptExtractor
from receiptkeeper.integrations import OCREngine


async def main(image_path: str):
    """Example of extracting receipt fields from an image."""
    extractor = ReceiptExtractor(
        OCREngine(),
        language="eng",
        on_progress=lambda event, message: print(f"[{event}] {message}"),
    )

    try:
        result = await extractor.extract_receipt(image_path)
    except Exception as e:
        print(f"Error during extraction: {e}")
        return

    print(f"Merchant: {result.merchant_name}")
    print(f"Date: {result.purchase_date}")
    print(f"Total: {result.total_amount}")
    print(f"Tax: {result.tax_amount}")
    print(f"Confidence: {result.confidence:.1f}%")
    if result.needs_review:
        print("Low confidence, check the fields by hand")

    print("\nItems:")
    for item in result.line_items:
        print(f"  - {item.name} x{item.quantity}: {item.unit_price:.2f}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "receipt.jpg"))
