from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.metrics import dashboard_stats
from buybox.domain.ports import DealRecord, DealRepository, DealStatus, DocumentRecord, RentComparable
from buybox.domain.property import Property


class InMemoryDealRepository(DealRepository):
    def __init__(self) -> None:
        self._properties: dict[int, Property] = {}
        self._deals: dict[int, DealRecord] = {}
        self._criteria: dict[int, BuyBoxCriteria] = {}
        self._documents: dict[int, list[DocumentRecord]] = {}
        self._comparables: dict[int, list[dict[str, Any]]] = {}

        self._next_property_id = 1
        self._next_deal_id = 1
        self._next_document_id = 1
        self._next_comparable_id = 1

    # ---------- properties ----------

    def create_property(self, prop: Property) -> int:
        pid = self._next_property_id
        self._next_property_id += 1
        self._properties[pid] = prop
        return pid

    def get_property(self, property_id: int) -> Property | None:
        return self._properties.get(property_id)

    # ---------- deals ----------

    def create_deal(self, property_id: int) -> int:
        did = self._next_deal_id
        self._next_deal_id += 1
        self._deals[did] = DealRecord(
            deal_id=did,
            property_id=property_id,
            status="analyzing",
            ts=datetime.utcnow().isoformat(),
            inputs={},
            result={},
            cash_on_cash_return=None,
            processing_time_seconds=None,
        )
        return did

    def get_deal(self, deal_id: int) -> DealRecord | None:
        rec = self._deals.get(deal_id)
        return copy.deepcopy(rec) if rec is not None else None

    def save_analysis(
        self,
        deal_id: int,
        *,
        status: DealStatus,
        inputs: dict[str, Any],
        result: dict[str, Any],
        processing_time_seconds: float,
    ) -> None:
        rec = self._deals.get(deal_id)
        if rec is None:
            raise KeyError(f"deal {deal_id} not found")
        rec["status"] = status
        rec["inputs"] = copy.deepcopy(inputs)
        rec["result"] = copy.deepcopy(result)
        rec["cash_on_cash_return"] = (result.get("results") or {}).get("cash_on_cash_return")
        rec["processing_time_seconds"] = processing_time_seconds

    def list_recent(self, limit: int = 50) -> list[DealRecord]:
        rows = sorted(self._deals.values(), key=lambda r: (r["ts"], r["deal_id"]), reverse=True)
        return [copy.deepcopy(r) for r in rows[:limit]]

    # ---------- criteria ----------

    def save_criteria(self, deal_id: int, criteria: BuyBoxCriteria) -> None:
        self._criteria[deal_id] = criteria

    def get_criteria(self, deal_id: int) -> BuyBoxCriteria | None:
        return self._criteria.get(deal_id)

    # ---------- documents ----------

    def add_document(self, deal_id: int, document: DocumentRecord) -> int:
        doc_id = self._next_document_id
        self._next_document_id += 1
        rec = DocumentRecord(**copy.deepcopy(document))
        rec["document_id"] = doc_id
        rec["deal_id"] = deal_id
        rec.setdefault("uploaded_at", datetime.utcnow().isoformat())
        self._documents.setdefault(deal_id, []).append(rec)
        return doc_id

    def list_documents(self, deal_id: int) -> list[DocumentRecord]:
        return copy.deepcopy(self._documents.get(deal_id, []))

    # ---------- market comparables ----------

    def add_comparables(self, deal_id: int, comps: list[RentComparable], source: str) -> int:
        bucket = self._comparables.setdefault(deal_id, [])
        for comp in comps:
            bucket.append(
                {
                    "comparable_id": self._next_comparable_id,
                    "deal_id": deal_id,
                    "property_name": comp["property_name"],
                    "rent_per_sqft": comp.get("rent_per_sqft"),
                    "cap_rate": comp.get("cap_rate"),
                    "source": source,
                }
            )
            self._next_comparable_id += 1
        return len(comps)

    def list_comparables(self, deal_id: int) -> list[dict[str, Any]]:
        return copy.deepcopy(self._comparables.get(deal_id, []))

    # ---------- stats ----------

    def dashboard_stats(self) -> dict[str, float]:
        return dashboard_stats(self._deals.values())
