"""
Opportunity API Server

Endpoints:
    GET  /health   - Health check
    POST /search   - Catalog-first opportunity search with web fallback
    POST /import   - Import a portal CSV export into the catalog
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bidfinder.api.schemas import (
    HealthResponse,
    ImportRequest,
    ImportResponse,
    SearchRequest,
    SearchResponseOut,
)
from bidfinder.core.errors import (
    ImportFailedError,
    InputContractError,
    UpstreamUnavailableError,
)
from bidfinder.core.settings import get_settings
from bidfinder.ingest.catalog_importer import CatalogImporter
from bidfinder.search.orchestrator import SearchOrchestrator
from bidfinder.search.web_search import OpenAIWebSearch, SearchCapability
from bidfinder.storage.opportunity_store import OpportunityStore


# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Opportunity Search API",
    version="1.0.0",
    description="Import government bid exports and search them against a business profile.",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Shared clients (initialized on first use)
_store: Optional[OpportunityStore] = None
_web_search: Optional[SearchCapability] = None
_web_search_disabled = False


def get_store() -> OpportunityStore:
    global _store
    if _store is None:
        _store = OpportunityStore(get_settings().db_path)
    return _store


def get_web_search() -> Optional[SearchCapability]:
    """Web fallback client, or None when no API key is configured."""
    global _web_search, _web_search_disabled
    if _web_search is None and not _web_search_disabled:
        try:
            _web_search = OpenAIWebSearch()
        except ValueError as e:
            logger.warning(f"Web fallback disabled: {e}")
            _web_search_disabled = True
    return _web_search


def get_orchestrator(
    store: OpportunityStore = Depends(get_store),
    web_search: Optional[SearchCapability] = Depends(get_web_search),
) -> SearchOrchestrator:
    return SearchOrchestrator(store, web_search)


def get_importer(store: OpportunityStore = Depends(get_store)) -> CatalogImporter:
    return CatalogImporter(store)


# -----------------------------------------------------------------------------
# Error mapping
# -----------------------------------------------------------------------------

@app.exception_handler(InputContractError)
async def input_contract_error(request: Request, exc: InputContractError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(UpstreamUnavailableError)
async def upstream_unavailable(request: Request, exc: UpstreamUnavailableError):
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": "Service temporarily unavailable"})


@app.exception_handler(ImportFailedError)
async def import_failed(request: Request, exc: ImportFailedError):
    return JSONResponse(status_code=500, content={"error": "Import failed", "source": exc.source})


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------

@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", catalog=get_settings().db_path)


@app.post("/search", response_model=SearchResponseOut)
async def search(req: SearchRequest, orchestrator: SearchOrchestrator = Depends(get_orchestrator)):
    if not req.query or not req.query.strip():
        raise InputContractError("Missing query")

    response = await orchestrator.search(
        req.query,
        req.to_profile(),
        source_filter=req.source_filter,
    )
    return SearchResponseOut.from_response(response)


@app.post("/import", response_model=ImportResponse)
def import_opportunities(req: ImportRequest, importer: CatalogImporter = Depends(get_importer)):
    if not req.source or not req.csv_data:
        raise InputContractError("Missing source or csvData")

    result = importer.import_payload(req.source, req.csv_data)
    return ImportResponse.from_result(result)
