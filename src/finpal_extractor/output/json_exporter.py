"""JSON writer for processing results."""

import json
from pathlib import Path
from typing import Optional

from finpal_extractor.models.report import ProcessingResult
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


def results_to_json(
    results: list[ProcessingResult],
    errors: Optional[dict[str, str]] = None,
    ai_usage: Optional[dict[str, int]] = None,
) -> str:
    """Serialize results to the JSON document returned to callers.

    A single result without errors serializes as that result's object;
    otherwise a ``{"results": [...], "errors": {...}}`` envelope is used.

    Args:
        results: Processing results in input order.
        errors: File name to error message for files that failed.
        ai_usage: AI usage counters to include, if any.

    Returns:
        JSON text.
    """
    if len(results) == 1 and not errors and ai_usage is None:
        payload: object = results[0].to_dict()
    else:
        envelope: dict[str, object] = {
            "results": [r.to_dict() for r in results],
            "errors": dict(errors or {}),
        }
        if ai_usage is not None:
            envelope["aiUsage"] = ai_usage
        payload = envelope
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_json(
    output_path: Path,
    results: list[ProcessingResult],
    errors: Optional[dict[str, str]] = None,
    ai_usage: Optional[dict[str, int]] = None,
) -> Path:
    """Write results as JSON.

    Args:
        output_path: Destination file.
        results: Processing results.
        errors: File name to error message for files that failed.
        ai_usage: AI usage counters to include, if any.

    Returns:
        Path to created file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(results_to_json(results, errors, ai_usage), encoding="utf-8")
    logger.info(f"Wrote {len(results)} results to {output_path}")
    return output_path
