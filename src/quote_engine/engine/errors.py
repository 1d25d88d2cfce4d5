"""
Domain errors raised by the pricing engine and the quote lifecycle.
"""


class QuoteEngineError(Exception):
    """Base class for all engine-level failures."""


class TemplateNotFound(QuoteEngineError):
    """No active rate template exists for the requested category."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Pricing calculator not available for this project type: {category}")


class QuoteNotFound(QuoteEngineError):
    """Quote does not exist or belongs to another client."""

    def __init__(self, quote_number: str):
        self.quote_number = quote_number
        super().__init__(f"Quote '{quote_number}' not found")


class InvalidTransition(QuoteEngineError):
    """Lifecycle action attempted from a state that does not allow it."""

    def __init__(self, quote_number: str, action: str, status: str):
        self.quote_number = quote_number
        self.action = action
        self.status = status
        super().__init__(f"Quote '{quote_number}' cannot be {action} while {status}")
