# src/buybox/adapters/document_extractor.py
from __future__ import annotations

from dataclasses import dataclass

from buybox.adapters.logging_utils import get_logger
from buybox.domain.ports import ExtractedFinancials, ExtractedRentRoll

logger = get_logger(__name__)


@dataclass
class NullDocumentExtractor:
    """
    Always-available extractor that never errors and never guesses numbers.
    Stands in until a real OCR / statement parser is wired up; callers then
    fall back to the figures the user typed in.
    """

    def extract_t12(self, content: bytes, filename: str) -> ExtractedFinancials:
        logger.info(
            "t12 extraction skipped",
            extra={"context": {"file_name": filename, "size": len(content)}},
        )
        return ExtractedFinancials()

    def extract_rent_roll(self, content: bytes, filename: str) -> ExtractedRentRoll:
        logger.info(
            "rent roll extraction skipped",
            extra={"context": {"file_name": filename, "size": len(content)}},
        )
        return ExtractedRentRoll()
