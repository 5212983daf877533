"""Output generation for JSON and CSV exports."""

from finpal_extractor.output.csv_exporter import CSVExporter
from finpal_extractor.output.json_exporter import results_to_json, write_json

__all__ = ["CSVExporter", "results_to_json", "write_json"]
