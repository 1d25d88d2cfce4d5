import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware

from quote_engine import __version__
from quote_engine.config.settings import get_settings
from quote_engine.engine import InvalidTransition, PricingEngine, QuoteNotFound, TemplateNotFound
from quote_engine.quotes import QuoteService
from quote_engine.api.schemas import BudgetRequest, QuoteRequest, RejectRequest
from quote_engine.api.state import get_engine, get_quote_service
from quote_engine.utils.logger import setup_logging

setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quote Engine API",
    description="Cost estimates and milestone quotes for software projects",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def require_client(x_client_id: Optional[str] = Header(default=None)) -> str:
    """Trusted client identity, set by the auth gateway."""
    if not x_client_id:
        raise HTTPException(status_code=401, detail="Not authorized")
    return x_client_id


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@app.get("/")
async def root():
    return {"status": "online", "message": "Quote Engine API Active"}


@app.post("/api/budget/calculate")
def calculate_budget(
    req: BudgetRequest,
    x_client_id: Optional[str] = Header(default=None),
    engine: PricingEngine = Depends(get_engine)
):
    try:
        breakdown = engine.estimate(req.category, req.to_selection(), client_id=x_client_id)
    except TemplateNotFound as e:
        raise _not_found(e)
    return {"success": True, "data": breakdown.to_estimate_dict()}


@app.get("/api/budget/templates")
def get_budget_templates(engine: PricingEngine = Depends(get_engine)):
    templates = engine.catalog.list_active_templates()
    return {"success": True, "data": [t.to_dict() for t in templates]}


@app.post("/api/quotes/generate", status_code=201)
def generate_quote(
    req: QuoteRequest,
    client_id: str = Depends(require_client),
    service: QuoteService = Depends(get_quote_service)
):
    try:
        quote = service.generate_quote(
            client_id=client_id,
            project_details=req.projectDetails.to_model(),
            timeline=req.timeline.to_model(),
            add_ons=req.add_ons(),
            discounts=req.discount_models(),
            custom_requirements=req.customRequirements,
            status=req.status,
        )
    except TemplateNotFound as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": jsonable_encoder(quote.to_dict())}


@app.get("/api/quotes")
def get_user_quotes(
    client_id: str = Depends(require_client),
    service: QuoteService = Depends(get_quote_service)
):
    quotes = service.list_quotes(client_id)
    return {"success": True, "data": [jsonable_encoder(q.to_dict()) for q in quotes]}


@app.get("/api/quotes/{quote_number}")
def get_quote(
    quote_number: str,
    client_id: str = Depends(require_client),
    service: QuoteService = Depends(get_quote_service)
):
    try:
        quote = service.get_quote(quote_number, client_id)
    except QuoteNotFound as e:
        raise _not_found(e)
    return {"success": True, "data": jsonable_encoder(quote.to_dict())}


@app.put("/api/quotes/{quote_number}/accept")
def accept_quote(
    quote_number: str,
    client_id: str = Depends(require_client),
    service: QuoteService = Depends(get_quote_service)
):
    try:
        quote = service.accept(quote_number, client_id)
    except QuoteNotFound as e:
        raise _not_found(e)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"success": True, "data": jsonable_encoder(quote.to_dict()), "message": "Quote accepted successfully"}


@app.put("/api/quotes/{quote_number}/reject")
def reject_quote(
    quote_number: str,
    req: Optional[RejectRequest] = None,
    client_id: str = Depends(require_client),
    service: QuoteService = Depends(get_quote_service)
):
    try:
        quote = service.reject(quote_number, client_id, reason=req.reason if req else None)
    except QuoteNotFound as e:
        raise _not_found(e)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"success": True, "data": jsonable_encoder(quote.to_dict()), "message": "Quote rejected"}


@app.put("/api/admin/quotes/{quote_number}/send")
def send_quote(quote_number: str, service: QuoteService = Depends(get_quote_service)):
    try:
        quote = service.send(quote_number)
    except QuoteNotFound as e:
        raise _not_found(e)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"success": True, "data": jsonable_encoder(quote.to_dict())}


@app.get("/system/status")
def get_status(
    engine: PricingEngine = Depends(get_engine),
    service: QuoteService = Depends(get_quote_service)
):
    return {
        "engine_active": True,
        "templates_count": len(engine.catalog),
        "active_templates": len(engine.catalog.list_active_templates()),
        "catalog_hash": engine.catalog.source_hash,
        "quotes_stored": len(service.store),
    }
