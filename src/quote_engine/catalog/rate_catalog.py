"""
Rate Catalog - operator-maintained rate templates and client currency preferences.

Templates are read from CSV files (or an Excel workbook with the same
columns, one sheet per table) and are read-only to the engine.
"""
import hashlib
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.models import Complexity, DesignType, Feature, RateTemplate, Timeline

logger = logging.getLogger(__name__)

TEMPLATES_SHEET = 'Rate Templates'
FEATURES_SHEET = 'Features'
PREFERENCES_SHEET = 'Currency Preferences'

TEMPLATE_COLUMNS = ['category', 'name', 'base_price', 'is_active']
FEATURE_COLUMNS = ['category', 'name', 'price']


def get_file_hash(path: Optional[Path]) -> str:
    """Get short SHA256 hash of a file."""
    if not path or not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def parse_bool(value) -> bool:
    """Parse a boolean from a CSV/Excel cell."""
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def _optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return float(value)


def _optional_str(value) -> Optional[str]:
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return str(value).strip()


def _multiplier_table(row: pd.Series, prefix: str, tiers) -> dict[str, float]:
    """Collect `<prefix>_<tier>` columns; blank cells leave the tier out."""
    table = {}
    for tier in tiers:
        value = _optional_float(row.get(f'{prefix}_{tier.value}'))
        if value is not None:
            table[tier.value] = value
    return table


def _require_columns(df: pd.DataFrame, columns: list[str], source: str):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{source} is missing columns: {', '.join(missing)}")


def templates_from_frames(templates_df: pd.DataFrame, features_df: pd.DataFrame) -> list[RateTemplate]:
    """Build RateTemplate records from the templates and features tables."""
    templates_df = _normalize(templates_df)
    features_df = _normalize(features_df)
    _require_columns(templates_df, TEMPLATE_COLUMNS, 'Rate templates table')
    if not features_df.empty:
        _require_columns(features_df, FEATURE_COLUMNS, 'Features table')

    templates = []
    for _, row in templates_df.iterrows():
        category = str(row['category']).strip()
        features = []
        if not features_df.empty:
            rows = features_df[features_df['category'] == category]
            for _, f in rows.iterrows():
                features.append(Feature(
                    name=str(f['name']).strip(),
                    price=float(f['price']),
                    estimated_hours=_optional_float(f.get('estimated_hours')),
                    is_required=parse_bool(f.get('is_required', 'false')),
                    description=_optional_str(f.get('description')),
                    category=_optional_str(f.get('feature_category')),
                ))

        templates.append(RateTemplate(
            category=category,
            name=str(row['name']).strip(),
            base_price=float(row['base_price']),
            features=features,
            complexity_multipliers=_multiplier_table(row, 'complexity', Complexity),
            timeline_multipliers=_multiplier_table(row, 'timeline', Timeline),
            design_multipliers=_multiplier_table(row, 'design', DesignType),
            is_active=parse_bool(row['is_active']),
        ))
    return templates


def _normalize(df: pd.DataFrame) -> pd.DataFrame:
    """Strip headers and string cells."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        if pd.api.types.is_string_dtype(df[col]):
            df[col] = df[col].str.strip()
    return df


class RateCatalog:
    """
    Read-only store of rate templates keyed by project category.

    Only active templates are visible through find_active_template().
    """

    def __init__(
        self,
        templates: list[RateTemplate],
        currency_preferences: Optional[dict[str, str]] = None,
        default_currency: str = 'INR',
        source_hash: str = ""
    ):
        self._templates: dict[str, RateTemplate] = {}
        for template in templates:
            if template.category in self._templates:
                raise ValueError(f"Duplicate rate template for category '{template.category}'")
            self._templates[template.category] = template
        self._preferences = dict(currency_preferences or {})
        self.default_currency = default_currency
        self.source_hash = source_hash

    @classmethod
    def load(cls, settings: Optional[Settings] = None) -> 'RateCatalog':
        """Load the catalog from the configured workbook or CSV files."""
        settings = settings or get_settings()

        if settings.rate_workbook and settings.rate_workbook.exists():
            sheets = pd.read_excel(settings.rate_workbook, sheet_name=None, dtype=str)
            if TEMPLATES_SHEET not in sheets:
                raise ValueError(f"'{TEMPLATES_SHEET}' sheet not found in {settings.rate_workbook}")
            templates_df = sheets[TEMPLATES_SHEET]
            features_df = sheets.get(FEATURES_SHEET, pd.DataFrame())
            prefs_df = sheets.get(PREFERENCES_SHEET, pd.DataFrame())
            source_hash = get_file_hash(settings.rate_workbook)
            source = settings.rate_workbook
        else:
            if not settings.rate_templates_csv.exists():
                raise FileNotFoundError(
                    f"Rate templates not found at {settings.rate_templates_csv}."
                )
            templates_df = pd.read_csv(settings.rate_templates_csv, dtype=str)
            features_df = pd.DataFrame()
            if settings.rate_features_csv.exists():
                features_df = pd.read_csv(settings.rate_features_csv, dtype=str)
            prefs_df = pd.DataFrame()
            if settings.currency_preferences_csv.exists():
                prefs_df = pd.read_csv(settings.currency_preferences_csv, dtype=str)
            source_hash = get_file_hash(settings.rate_templates_csv) + get_file_hash(settings.rate_features_csv)
            source = settings.rate_templates_csv

        preferences = {}
        if not prefs_df.empty:
            prefs_df = _normalize(prefs_df)
            _require_columns(prefs_df, ['client_id', 'currency'], 'Currency preferences table')
            preferences = {
                str(r['client_id']): str(r['currency']).upper()
                for _, r in prefs_df.dropna(subset=['client_id', 'currency']).iterrows()
            }

        templates = templates_from_frames(templates_df, features_df)
        logger.info(
            "Loaded %d rate templates (%d active) from %s",
            len(templates), sum(t.is_active for t in templates), source
        )
        return cls(
            templates,
            currency_preferences=preferences,
            default_currency=settings.base_currency,
            source_hash=source_hash,
        )

    def find_active_template(self, category: str) -> Optional[RateTemplate]:
        """Template for a category, or None when missing or inactive."""
        template = self._templates.get(str(category or '').strip())
        if template is None or not template.is_active:
            return None
        return template

    def list_active_templates(self) -> list[RateTemplate]:
        return [t for t in self._templates.values() if t.is_active]

    def get_preferred_currency(self, client_id: str) -> str:
        """Client's display currency, defaulting to the base currency."""
        return self._preferences.get(str(client_id), self.default_currency)

    def set_preferred_currency(self, client_id: str, currency: str):
        self._preferences[str(client_id)] = str(currency).upper()

    def __len__(self) -> int:
        return len(self._templates)
