# src/buybox/adapters/sql_repo.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.pool import StaticPool
from sqlmodel import JSON, Column, Field, Session, SQLModel, create_engine, select

from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.metrics import dashboard_stats
from buybox.domain.ports import DealRecord, DealStatus, DocumentRecord, RentComparable
from buybox.domain.property import Property


# ---------- Tables ----------

class PropertyRow(SQLModel, table=True):
    __tablename__ = "properties"

    id: int | None = Field(default=None, primary_key=True)
    ts: datetime = Field(default_factory=datetime.utcnow, index=True)

    address: str
    property_type: str = Field(index=True)
    total_units: int | None = None
    year_built: int | None = None


class DealRow(SQLModel, table=True):
    __tablename__ = "deals"

    id: int | None = Field(default=None, primary_key=True)
    ts: datetime = Field(default_factory=datetime.utcnow, index=True)

    property_id: int = Field(foreign_key="properties.id", index=True)
    status: str = Field(default="analyzing", index=True)

    cash_on_cash_return: float | None = None
    processing_time_seconds: float | None = None

    inputs: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    result: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class BuyBoxCriteriaRow(SQLModel, table=True):
    __tablename__ = "buy_box_criteria"

    id: int | None = Field(default=None, primary_key=True)
    deal_id: int = Field(foreign_key="deals.id", index=True)

    min_cash_on_cash_return: float
    min_cap_rate: float
    year_built_threshold: int
    target_hold_period: int


class DocumentUploadRow(SQLModel, table=True):
    __tablename__ = "document_uploads"

    id: int | None = Field(default=None, primary_key=True)
    deal_id: int = Field(foreign_key="deals.id", index=True)
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)

    file_name: str
    file_type: str
    file_size: int | None = None
    extracted_data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class MarketComparableRow(SQLModel, table=True):
    __tablename__ = "market_comparables"

    id: int | None = Field(default=None, primary_key=True)
    deal_id: int = Field(foreign_key="deals.id", index=True)

    property_name: str
    rent_per_sqft: float | None = None
    cap_rate: float | None = None
    source: str


def _deal_to_record(row: DealRow) -> DealRecord:
    return DealRecord(
        deal_id=int(row.id),  # type: ignore[arg-type]
        property_id=row.property_id,
        status=row.status,  # type: ignore[typeddict-item]
        ts=row.ts.isoformat(),
        inputs=dict(row.inputs or {}),
        result=dict(row.result or {}),
        cash_on_cash_return=row.cash_on_cash_return,
        processing_time_seconds=row.processing_time_seconds,
    )


def _make_engine(uri: str):
    if uri.startswith("sqlite"):
        # FastAPI serves sync handlers from a thread pool
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if uri in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(uri, echo=False, **kwargs)
    return create_engine(uri, echo=False)


class SqlDealRepository:
    def __init__(self, uri: str = "sqlite:///buybox.db"):
        self.engine = _make_engine(uri)
        SQLModel.metadata.create_all(self.engine)

    # ---------- properties ----------

    def create_property(self, prop: Property) -> int:
        row = PropertyRow(**prop.model_dump())
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def get_property(self, property_id: int) -> Property | None:
        with Session(self.engine) as session:
            row = session.get(PropertyRow, property_id)
            if row is None:
                return None
            return Property(
                address=row.address,
                property_type=row.property_type,  # type: ignore[arg-type]
                total_units=row.total_units,
                year_built=row.year_built,
            )

    # ---------- deals ----------

    def create_deal(self, property_id: int) -> int:
        row = DealRow(property_id=property_id, status="analyzing", inputs={}, result={})
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def get_deal(self, deal_id: int) -> DealRecord | None:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            return _deal_to_record(row) if row is not None else None

    def save_analysis(
        self,
        deal_id: int,
        *,
        status: DealStatus,
        inputs: dict[str, Any],
        result: dict[str, Any],
        processing_time_seconds: float,
    ) -> None:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            if row is None:
                raise KeyError(f"deal {deal_id} not found")
            row.status = status
            row.inputs = inputs
            row.result = result
            row.cash_on_cash_return = (result.get("results") or {}).get("cash_on_cash_return")
            row.processing_time_seconds = processing_time_seconds
            session.add(row)
            session.commit()

    def list_recent(self, limit: int = 50) -> list[DealRecord]:
        with Session(self.engine) as session:
            stmt = select(DealRow).order_by(DealRow.ts.desc(), DealRow.id.desc()).limit(limit)
            return [_deal_to_record(r) for r in session.exec(stmt)]

    # ---------- criteria ----------

    def save_criteria(self, deal_id: int, criteria: BuyBoxCriteria) -> None:
        row = BuyBoxCriteriaRow(deal_id=deal_id, **criteria.model_dump())
        with Session(self.engine) as session:
            session.add(row)
            session.commit()

    def get_criteria(self, deal_id: int) -> BuyBoxCriteria | None:
        with Session(self.engine) as session:
            stmt = (
                select(BuyBoxCriteriaRow)
                .where(BuyBoxCriteriaRow.deal_id == deal_id)
                .order_by(BuyBoxCriteriaRow.id.desc())
            )
            row = session.exec(stmt).first()
            if row is None:
                return None
            return BuyBoxCriteria(
                min_cash_on_cash_return=row.min_cash_on_cash_return,
                min_cap_rate=row.min_cap_rate,
                year_built_threshold=row.year_built_threshold,
                target_hold_period=row.target_hold_period,
            )

    # ---------- documents ----------

    def add_document(self, deal_id: int, document: DocumentRecord) -> int:
        row = DocumentUploadRow(
            deal_id=deal_id,
            file_name=document.get("file_name", ""),
            file_type=document.get("file_type", "t12"),
            file_size=document.get("file_size"),
            extracted_data=dict(document.get("extracted_data") or {}),
        )
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def list_documents(self, deal_id: int) -> list[DocumentRecord]:
        with Session(self.engine) as session:
            stmt = (
                select(DocumentUploadRow)
                .where(DocumentUploadRow.deal_id == deal_id)
                .order_by(DocumentUploadRow.id)
            )
            return [
                DocumentRecord(
                    document_id=int(r.id),  # type: ignore[arg-type]
                    deal_id=r.deal_id,
                    file_name=r.file_name,
                    file_type=r.file_type,  # type: ignore[typeddict-item]
                    file_size=r.file_size or 0,
                    extracted_data=dict(r.extracted_data or {}),
                    uploaded_at=r.uploaded_at.isoformat(),
                )
                for r in session.exec(stmt)
            ]

    # ---------- market comparables ----------

    def add_comparables(self, deal_id: int, comps: list[RentComparable], source: str) -> int:
        with Session(self.engine) as session:
            for comp in comps:
                session.add(
                    MarketComparableRow(
                        deal_id=deal_id,
                        property_name=comp["property_name"],
                        rent_per_sqft=comp.get("rent_per_sqft"),
                        cap_rate=comp.get("cap_rate"),
                        source=source,
                    )
                )
            session.commit()
        return len(comps)

    def list_comparables(self, deal_id: int) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = (
                select(MarketComparableRow)
                .where(MarketComparableRow.deal_id == deal_id)
                .order_by(MarketComparableRow.id)
            )
            return [
                {
                    "comparable_id": r.id,
                    "deal_id": r.deal_id,
                    "property_name": r.property_name,
                    "rent_per_sqft": r.rent_per_sqft,
                    "cap_rate": r.cap_rate,
                    "source": r.source,
                }
                for r in session.exec(stmt)
            ]

    # ---------- stats ----------

    def dashboard_stats(self) -> dict[str, float]:
        with Session(self.engine) as session:
            records = [_deal_to_record(r) for r in session.exec(select(DealRow))]
        return dashboard_stats(records)
