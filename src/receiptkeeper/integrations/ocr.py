"""OCR Engine using Google Cloud Vision API for receipt text recognition."""

import threading
from pathlib import Path

from google.cloud import vision

from receiptkeeper.models import RawDocument

# Language codes accepted by the engine, mapped to Vision language hints
SUPPORTED_LANGUAGES = {
    "eng": "en",
    "spa": "es",
    "fra": "fr",
    "deu": "de",
}


class OCREngineError(Exception):
    """Raised when the Vision API reports a failure for an image."""


class UnsupportedLanguageError(OCREngineError, ValueError):
    """Raised when a language code has no Vision language hint."""


class OCREngine:
    """
    OCR Engine for recognizing receipt text using Google Vision API.

    Uses document text detection, which reports a per-page confidence in
    addition to the full text.
    """

    def __init__(self, client: vision.ImageAnnotatorClient | None = None) -> None:
        """
        Initialize the OCR Engine.

        Args:
            client: Optional pre-configured ImageAnnotatorClient.
                   If None, a default client will be created lazily on first use.
        """
        self._client = client
        self._client_initialized = client is not None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        """Lazily initialize and return the Vision API client.

        Uses double-check locking since recognize() runs in executor threads.

        Returns:
            The Google Cloud Vision ImageAnnotatorClient
        """
        if not self._client_initialized:
            with self._client_lock:
                if not self._client_initialized:
                    self._client = vision.ImageAnnotatorClient()
                    self._client_initialized = True
        return self._client  # type: ignore[return-value]

    def recognize(self, image_path: str, language: str = "eng") -> RawDocument:
        """
        Recognize text in an image file using Google Vision API.

        Args:
            image_path: Path to the image file to process.
            language: Language code of the receipt (eng, spa, fra or deu).

        Returns:
            RawDocument with the full text and a 0-100 confidence. Both are
            empty/zero when no text is found.

        Raises:
            UnsupportedLanguageError: If the language code is not supported.
            FileNotFoundError: If the image file does not exist.
            OCREngineError: If Vision reports an error for the image.
            google.api_core.exceptions.GoogleAPIError: If the API call fails.
        """
        hint = SUPPORTED_LANGUAGES.get(language)
        if hint is None:
            raise UnsupportedLanguageError(
                f"Unsupported OCR language: {language}. "
                f"Expected one of: {', '.join(SUPPORTED_LANGUAGES)}"
            )

        path = Path(image_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Image file not found: {image_path}")

        with path.open("rb") as image_file:
            content = image_file.read()

        # vision.Image content expects bytes,
        # but type hints sometimes incorrectly expect a dict
        image = vision.Image(content=content)  # type: ignore

        # document_text_detection is a dynamic method added at runtime,
        # which static analysis may not resolve
        response = self.client.document_text_detection(  # type: ignore
            image=image,
            image_context={"language_hints": [hint]},
        )

        if response.error.message:
            raise OCREngineError(
                f"Vision API failed for {path.name}: {response.error.message}"
            )

        annotation = response.full_text_annotation
        pages = list(annotation.pages)
        if not annotation.text or not pages:
            return RawDocument(text="", confidence=0.0)

        # Vision reports confidence per page in [0, 1]
        confidence = sum(page.confidence for page in pages) / len(pages)
        return RawDocument(text=annotation.text, confidence=round(confidence * 100, 2))
