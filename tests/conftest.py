import pytest

from quote_engine.catalog import RateCatalog
from quote_engine.config.settings import Settings
from quote_engine.engine import Feature, PricingEngine, RateTemplate
from quote_engine.quotes import QuoteService


def make_template(category="webapp", **overrides) -> RateTemplate:
    """Template from the worked pricing example: 10000 base, one 2000 feature."""
    fields = dict(
        category=category,
        name="Web Application",
        base_price=10000,
        features=[Feature(name="auth", price=2000, estimated_hours=10)],
        complexity_multipliers={"medium": 1.5},
        timeline_multipliers={"normal": 1},
        design_multipliers={"custom": 1.5},
    )
    fields.update(overrides)
    return RateTemplate(**fields)


@pytest.fixture
def template():
    return make_template()


@pytest.fixture
def template_factory():
    return make_template


@pytest.fixture
def settings():
    return Settings.load()


@pytest.fixture
def catalog():
    return RateCatalog(
        [
            make_template(),
            make_template(
                category="mobile",
                name="Mobile App",
                base_price=50000,
                features=[
                    Feature(name="push", price=5000, estimated_hours=8),
                    Feature(name="offline", price=12000),
                ],
                complexity_multipliers={"simple": 1, "medium": 1.5, "complex": 2.5, "enterprise": 4},
                timeline_multipliers={"rush": 1.8, "normal": 1, "flexible": 1.2},
                design_multipliers={"template": 1, "custom": 1.5, "premium": 2.2},
            ),
            make_template(category="maintenance", name="Maintenance", is_active=False),
        ],
        currency_preferences={"client-usd": "USD", "client-odd": "JPY"},
    )


@pytest.fixture
def engine(catalog, settings):
    return PricingEngine(catalog, settings)


@pytest.fixture
def service(engine):
    return QuoteService(engine)
