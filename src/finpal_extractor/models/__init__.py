"""Data models for statement transactions, categories and results."""

from finpal_extractor.models.category import Category, CategoryResult, Taxonomy
from finpal_extractor.models.report import (
    InspectionReport,
    ProcessingResult,
    ProcessingSummary,
    StatementMetadata,
)
from finpal_extractor.models.transaction import (
    Candidate,
    CategoryMethod,
    Confidence,
    SourceTag,
    Transaction,
    TransactionType,
)

__all__ = [
    "Candidate",
    "Category",
    "CategoryMethod",
    "CategoryResult",
    "Confidence",
    "InspectionReport",
    "ProcessingResult",
    "ProcessingSummary",
    "SourceTag",
    "StatementMetadata",
    "Taxonomy",
    "Transaction",
    "TransactionType",
]
