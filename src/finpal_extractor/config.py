"""Configuration loading and validation for the statement extractor."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from finpal_extractor.models.category import Category, Taxonomy
from finpal_extractor.tables import CATEGORY_ALIASES, OTHERS_CATEGORY, SPECIAL_PATTERNS
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def _number(
    data: dict[str, object],
    key: str,
    default: float,
    minimum: float = 0,
    cast: type = int,
) -> float:
    """Read a numeric setting, rejecting wrong types and values below minimum."""
    value = data.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be a number, got {value!r}") from e
    if number < minimum:
        raise ConfigError(f"'{key}' must be at least {minimum}, got {number}")
    return number


@dataclass
class ExtractionSettings:
    """Thresholds for the text-mining strategies and upload limits.

    Attributes:
        min_line_amount: Line-pattern amounts must exceed this.
        min_context_amount: Amount-context lower bound (exclusive).
        max_context_amount: Amount-context upper bound (exclusive).
        context_window: Characters of text taken either side of an amount.
        max_context_candidates: Cap on amount-context transactions.
        emergency_min_amount: Emergency fallback lower bound (inclusive).
        emergency_max_amount: Emergency fallback upper bound (inclusive).
        emergency_limit: Cap on emergency transactions.
        description_max_length: Maximum stored description length.
        deduplicate: Collapse same-day same-amount candidates.
        max_file_size_mb: Upload size limit enforced by the CLI.
    """

    min_line_amount: float = 10
    min_context_amount: float = 50
    max_context_amount: float = 1_000_000
    context_window: int = 100
    max_context_candidates: int = 15
    emergency_min_amount: int = 100
    emergency_max_amount: int = 100_000
    emergency_limit: int = 10
    description_max_length: int = 200
    deduplicate: bool = True
    max_file_size_mb: float = 10

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ExtractionSettings":
        """Create from dictionary."""
        settings = cls(
            min_line_amount=_number(data, "min_line_amount", 10, cast=float),
            min_context_amount=_number(data, "min_context_amount", 50, cast=float),
            max_context_amount=_number(data, "max_context_amount", 1_000_000, cast=float),
            context_window=int(_number(data, "context_window", 100)),
            max_context_candidates=int(_number(data, "max_context_candidates", 15, minimum=1)),
            emergency_min_amount=int(_number(data, "emergency_min_amount", 100)),
            emergency_max_amount=int(_number(data, "emergency_max_amount", 100_000)),
            emergency_limit=int(_number(data, "emergency_limit", 10)),
            description_max_length=int(_number(data, "description_max_length", 200, minimum=10)),
            deduplicate=bool(data.get("deduplicate", True)),
            max_file_size_mb=_number(data, "max_file_size_mb", 10, minimum=0.001, cast=float),
        )
        if settings.min_context_amount >= settings.max_context_amount:
            raise ConfigError("'min_context_amount' must be below 'max_context_amount'")
        if settings.emergency_min_amount > settings.emergency_max_amount:
            raise ConfigError("'emergency_min_amount' must not exceed 'emergency_max_amount'")
        return settings

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


@dataclass
class AISettings:
    """Configuration for the AI categorization fallback.

    Attributes:
        enabled: Whether tier 4 runs at all.
        model: Anthropic model name.
        timeout_seconds: Logical timeout per classification.
        max_concurrency: Parallel AI calls per file.
        max_calls: AI classifications allowed per file.
        max_retries: Transport retries on rate limits and server errors.
        max_tokens: Response token cap.
    """

    enabled: bool = True
    model: str = "claude-3-5-haiku-latest"
    timeout_seconds: float = 10
    max_concurrency: int = 4
    max_calls: int = 200
    max_retries: int = 2
    max_tokens: int = 50

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "AISettings":
        """Create from dictionary."""
        return cls(
            enabled=bool(data.get("enabled", True)),
            model=str(data.get("model", "claude-3-5-haiku-latest")),
            timeout_seconds=_number(data, "timeout_seconds", 10, minimum=0.1, cast=float),
            max_concurrency=int(_number(data, "max_concurrency", 4, minimum=1)),
            max_calls=int(_number(data, "max_calls", 200)),
            max_retries=int(_number(data, "max_retries", 2)),
            max_tokens=int(_number(data, "max_tokens", 50, minimum=1)),
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file, or None for console only.
    """

    level: str = "INFO"
    file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        level = str(data.get("level", "INFO")).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError(f"Invalid log level: {level}")
        log_file = data.get("file")
        return cls(level=level, file=str(log_file) if log_file else None)


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        extraction: Strategy thresholds and upload limits.
        ai: AI fallback configuration.
        logging: Logging configuration.
        taxonomy: Immutable category taxonomy shared by all categorizers.
    """

    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    ai: AISettings = field(default_factory=AISettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    taxonomy: Taxonomy = field(default_factory=Taxonomy.default)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If file is invalid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_settings(path: Path) -> tuple[ExtractionSettings, AISettings, LoggingConfig]:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Tuple of (ExtractionSettings, AISettings, LoggingConfig).
    """
    data = load_yaml_file(path)
    return (
        ExtractionSettings.from_dict(_section(data, "extraction")),
        AISettings.from_dict(_section(data, "ai")),
        LoggingConfig.from_dict(_section(data, "logging")),
    )


def load_taxonomy(path: Path) -> Taxonomy:
    """Load a category taxonomy from categories.yaml.

    The file replaces the built-in categories and aliases. Special
    patterns come from the file when given, else the built-in table.

    Args:
        path: Path to categories.yaml.

    Returns:
        Immutable Taxonomy.

    Raises:
        ConfigError: If the file is malformed.
    """
    data = load_yaml_file(path)

    cat_list = data.get("categories")
    if not isinstance(cat_list, list) or not cat_list:
        raise ConfigError("'categories' must be a non-empty list")

    categories: list[Category] = []
    for cat_data in cat_list:
        if not isinstance(cat_data, dict) or "name" not in cat_data:
            raise ConfigError(f"Category entry must be a mapping with a 'name': {cat_data!r}")
        for key in ("merchants", "keywords"):
            if cat_data.get(key) is not None and not isinstance(cat_data[key], list):
                raise ConfigError(f"'{key}' of category '{cat_data['name']}' must be a list")
        categories.append(Category.from_dict(cat_data))

    aliases = data.get("aliases", CATEGORY_ALIASES)
    if not isinstance(aliases, dict):
        raise ConfigError(f"'aliases' must be a mapping, got {type(aliases).__name__}")

    special_patterns: list[tuple[str, str]] = list(SPECIAL_PATTERNS)
    if data.get("special_patterns") is not None:
        raw_patterns = data["special_patterns"]
        if not isinstance(raw_patterns, list):
            raise ConfigError("'special_patterns' must be a list")
        special_patterns = []
        for entry in raw_patterns:
            if not isinstance(entry, dict) or "category" not in entry or "pattern" not in entry:
                raise ConfigError(f"Special pattern needs 'category' and 'pattern': {entry!r}")
            special_patterns.append((str(entry["category"]), str(entry["pattern"])))

    default_category = str(data.get("default_category", OTHERS_CATEGORY))

    return Taxonomy.build(
        categories=categories,
        aliases={str(k): str(v) for k, v in aliases.items()},
        special_patterns=special_patterns,
        default_category=default_category,
    )


def load_config(
    settings_path: Optional[Path] = None,
    categories_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load complete configuration.

    Both files are optional; missing ones fall back to built-in defaults.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        categories_path: Path to categories.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If a present file is invalid.
    """
    if config_dir is None:
        config_dir = Path("config")

    if settings_path is None:
        settings_path = config_dir / "settings.yaml"
    if categories_path is None:
        categories_path = config_dir / "categories.yaml"

    config = Config()

    if settings_path.exists():
        config.extraction, config.ai, config.logging = load_settings(settings_path)
        logger.info(f"Loaded settings from {settings_path}")
    else:
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    if categories_path.exists():
        config.taxonomy = load_taxonomy(categories_path)
        logger.info(
            f"Loaded {len(config.taxonomy.categories)} categories from {categories_path}"
        )
    else:
        logger.debug(f"Categories file not found: {categories_path}, using built-in taxonomy")

    return config
