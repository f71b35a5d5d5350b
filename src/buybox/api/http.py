# src/buybox/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from starlette.concurrency import run_in_threadpool

from buybox.adapters.config import config
from buybox.adapters.document_extractor import NullDocumentExtractor
from buybox.adapters.logging_utils import bind, get_logger
from buybox.adapters.market_data import StaticMarketDataProvider
from buybox.adapters.memory_repo import InMemoryDealRepository
from buybox.adapters.sql_repo import SqlDealRepository
from buybox.domain.ports import DealRecord, DealRepository, DocumentExtractor, MarketDataProvider
from buybox.domain.property import Property
from buybox.services.deal_analyzer import RecordNotFound, analyze_deal, analyze_saved_deal
from buybox.services.validation import validate_upload
from .schemas import (
    AnalyzeDealRequest,
    AnalyzeRequest,
    AnalyzeResponse,
    DashboardStats,
    DealCreate,
    DealItem,
    DealResults,
    DocumentType,
    DocumentUploaded,
    PropertyCreate,
    PropertyCreated,
)

logger = get_logger(__name__)

app = FastAPI(title="buybox")


def _build_repo() -> DealRepository:
    if config.STORAGE_BACKEND == "memory":
        return InMemoryDealRepository()
    return SqlDealRepository(config.DB_URI)


# -------------------------------------------------------------------
# Collaborators (single init at startup)
# -------------------------------------------------------------------
_deal_repo: DealRepository = _build_repo()
_market_data: MarketDataProvider = StaticMarketDataProvider()
_extractor: DocumentExtractor = NullDocumentExtractor()


def _deal_item(rec: DealRecord) -> DealItem:
    prop = _deal_repo.get_property(rec["property_id"])
    return DealItem(
        deal_id=rec["deal_id"],
        property_id=rec["property_id"],
        status=rec["status"],
        ts=rec["ts"],
        cash_on_cash_return=rec.get("cash_on_cash_return"),
        processing_time_seconds=rec.get("processing_time_seconds"),
        property=prop,
    )


# -----------------------------
# Dashboard
# -----------------------------
@app.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats() -> DashboardStats:
    return DashboardStats(**_deal_repo.dashboard_stats())


# -----------------------------
# Properties & deals
# -----------------------------
@app.post("/properties", response_model=PropertyCreated)
def create_property(body: PropertyCreate) -> PropertyCreated:
    prop = Property(**body.model_dump())
    property_id = _deal_repo.create_property(prop)
    return PropertyCreated(property_id=property_id, property=prop)


@app.post("/deals", response_model=DealItem)
def create_deal(body: DealCreate) -> DealItem:
    if _deal_repo.get_property(body.property_id) is None:
        raise HTTPException(status_code=404, detail=f"Property {body.property_id} not found")
    deal_id = _deal_repo.create_deal(body.property_id)
    rec = _deal_repo.get_deal(deal_id)
    return _deal_item(rec)  # type: ignore[arg-type]


@app.get("/deals", response_model=list[DealItem])
def list_deals(limit: int = Query(50, ge=1, le=1000)) -> list[DealItem]:
    return [_deal_item(r) for r in _deal_repo.list_recent(limit=limit)]


@app.get("/deals/recent", response_model=list[DealItem])
def recent_deals(limit: int | None = Query(None, ge=1, le=100)) -> list[DealItem]:
    rows = _deal_repo.list_recent(limit=limit or config.RECENT_DEALS_LIMIT)
    return [_deal_item(r) for r in rows]


@app.get("/deals/{deal_id}/results", response_model=DealResults)
def deal_results(deal_id: int) -> DealResults:
    rec = _deal_repo.get_deal(deal_id)
    if rec is None:
        raise HTTPException(status_code=404, detail=f"Deal {deal_id} not found")
    item = _deal_item(rec)
    return DealResults(
        deal=item,
        property=item.property,
        buy_box=_deal_repo.get_criteria(deal_id),
        analysis=rec.get("result") or {},
        market_comps=_deal_repo.list_comparables(deal_id),
        documents=[dict(d) for d in _deal_repo.list_documents(deal_id)],
    )


# -----------------------------
# Documents
# -----------------------------
def _store_document(deal_id: int, file_type: DocumentType, filename: str, content: bytes) -> DocumentUploaded:
    extracted: dict[str, Any]
    if file_type == "t12":
        extracted = dict(_extractor.extract_t12(content, filename))
    else:
        extracted = dict(_extractor.extract_rent_roll(content, filename))

    document_id = _deal_repo.add_document(
        deal_id,
        {
            "file_name": filename,
            "file_type": file_type,
            "file_size": len(content),
            "extracted_data": extracted,
        },
    )
    bind(logger, deal_id=deal_id).info(
        "document stored",
        extra={"context": {"document_id": document_id, "file_type": file_type}},
    )
    return DocumentUploaded(document_id=document_id, extracted_data=extracted)


@app.post("/deals/{deal_id}/documents", response_model=DocumentUploaded)
async def upload_document(
    deal_id: int,
    request: Request,
    file_type: DocumentType = Query(..., description="t12|rent_roll"),
    filename: str = Query(..., description="Original file name"),
) -> DocumentUploaded:
    """
    Raw-body upload: send the file bytes with their MIME type as Content-Type.
    Repository and extractor calls run in the threadpool, off the event loop.
    """
    if await run_in_threadpool(_deal_repo.get_deal, deal_id) is None:
        raise HTTPException(status_code=404, detail=f"Deal {deal_id} not found")

    content = await request.body()
    try:
        validate_upload(filename, request.headers.get("content-type"), len(content))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return await run_in_threadpool(_store_document, deal_id, file_type, filename, content)


# -----------------------------
# Analysis
# -----------------------------
@app.post("/analyze", response_model=AnalyzeResponse)
def analyze_endpoint(payload: AnalyzeRequest) -> AnalyzeResponse:
    """
    One-shot analysis. With save=false this is a pure preview: nothing is written.
    """
    try:
        result = analyze_deal(
            raw_inputs=payload.inputs.model_dump(exclude_none=True),
            criteria=payload.buy_box,
            property=payload.property,
            market_data=_market_data if payload.include_market_data else None,
            repo=_deal_repo,
            save=payload.save,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return AnalyzeResponse(**result)


@app.post("/deals/{deal_id}/analyze", response_model=AnalyzeResponse)
def analyze_deal_endpoint(deal_id: int, payload: AnalyzeDealRequest) -> AnalyzeResponse:
    try:
        result = analyze_saved_deal(
            deal_id,
            raw_inputs=payload.inputs.model_dump(exclude_none=True),
            criteria=payload.buy_box,
            repo=_deal_repo,
            market_data=_market_data if payload.include_market_data else None,
        )
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return AnalyzeResponse(**result)
