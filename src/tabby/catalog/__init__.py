# ABOUTME: Catalog package: candidate types, HTTP access, and the scan/search stages.
# ABOUTME: Exports the data types and the two pipeline stages used by tabby.core.

from tabby.catalog.ingestion import ImageIngestion
from tabby.catalog.resolver import CandidateResolver, ResolutionResult
from tabby.catalog.types import Candidate, RecognizedBook, ScanMode

__all__ = [
    "Candidate",
    "CandidateResolver",
    "ImageIngestion",
    "RecognizedBook",
    "ResolutionResult",
    "ScanMode",
]
