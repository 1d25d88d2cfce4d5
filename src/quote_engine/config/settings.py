"""
Centralized settings and path configuration for the quote engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_EXCHANGE_RATES = {
    'INR': 1.0,
    'USD': 0.012,
    'EUR': 0.011,
    'GBP': 0.0095,
}


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Rate catalog inputs
    rate_templates_csv: Path
    rate_features_csv: Path
    currency_preferences_csv: Path
    rate_workbook: Optional[Path] = None

    # Money
    base_currency: str = 'INR'
    exchange_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES))
    tax_rate: float = 0.18  # GST

    # Quotes
    quote_number_prefix: str = 'WN-Q'
    quote_validity_days: int = 30

    log_level: str = 'INFO'

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = get_project_root()
        env_dir = os.environ.get('QUOTE_ENGINE_DATA_DIR')
        data = Path(data_dir or env_dir or Path(__file__).resolve().parent.parent / 'data')

        workbook = data / 'rate_catalog.xlsx'

        return cls(
            project_root=root,
            data_dir=data,
            rate_templates_csv=data / 'rate_templates.csv',
            rate_features_csv=data / 'rate_features.csv',
            currency_preferences_csv=data / 'currency_preferences.csv',
            rate_workbook=workbook if workbook.exists() else None,
            tax_rate=float(os.environ.get('QUOTE_ENGINE_TAX_RATE', 0.18)),
            log_level=os.environ.get('QUOTE_ENGINE_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
