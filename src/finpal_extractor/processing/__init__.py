"""Statement processing pipeline components."""

from finpal_extractor.processing.categorizer import Categorizer
from finpal_extractor.processing.deduplicator import Deduplicator, dedupe
from finpal_extractor.processing.normalizer import NormalizationResult, Normalizer, SkipReason
from finpal_extractor.processing.pipeline import StatementPipeline, default_strategies
from finpal_extractor.processing.report_generator import calculate_confidence, generate_summary
from finpal_extractor.processing.strategy import ExtractionStrategy, StrategyOutput

__all__ = [
    "Categorizer",
    "Deduplicator",
    "dedupe",
    "NormalizationResult",
    "Normalizer",
    "SkipReason",
    "StatementPipeline",
    "default_strategies",
    "calculate_confidence",
    "generate_summary",
    "ExtractionStrategy",
    "StrategyOutput",
]
