import pytest

from buybox.adapters.memory_repo import InMemoryDealRepository
from buybox.adapters.sql_repo import SqlDealRepository
from fixtures.deals import property_1962, property_1995, scenario_b_criteria


@pytest.fixture(params=["memory", "sql"])
def repo(request, tmp_path):
    if request.param == "memory":
        return InMemoryDealRepository()
    return SqlDealRepository(f"sqlite:///{tmp_path / 'deals.db'}")


def _finish(repo, deal_id, status, coc, seconds):
    repo.save_analysis(
        deal_id,
        status=status,
        inputs={"purchase_price": 1.0},
        result={"status": status, "results": {"cash_on_cash_return": coc}},
        processing_time_seconds=seconds,
    )


def test_property_round_trip(repo):
    pid = repo.create_property(property_1995())

    assert repo.get_property(pid) == property_1995()
    assert repo.get_property(pid + 100) is None


def test_new_deal_starts_analyzing(repo):
    pid = repo.create_property(property_1995())
    deal_id = repo.create_deal(pid)

    deal = repo.get_deal(deal_id)
    assert deal["status"] == "analyzing"
    assert deal["property_id"] == pid
    assert deal["cash_on_cash_return"] is None


def test_save_analysis_updates_deal(repo):
    deal_id = repo.create_deal(repo.create_property(property_1995()))

    _finish(repo, deal_id, "pass", 9.5, 0.25)

    deal = repo.get_deal(deal_id)
    assert deal["status"] == "pass"
    assert deal["cash_on_cash_return"] == 9.5
    assert deal["result"]["results"]["cash_on_cash_return"] == 9.5
    assert deal["processing_time_seconds"] == 0.25


def test_save_analysis_unknown_deal(repo):
    with pytest.raises(KeyError):
        _finish(repo, 404, "pass", 1.0, 0.0)


def test_criteria_latest_wins(repo):
    deal_id = repo.create_deal(repo.create_property(property_1995()))
    assert repo.get_criteria(deal_id) is None

    repo.save_criteria(deal_id, scenario_b_criteria())
    tighter = scenario_b_criteria().model_copy(update={"min_cap_rate": 6.5})
    repo.save_criteria(deal_id, tighter)

    assert repo.get_criteria(deal_id) == tighter


def test_documents_and_comparables(repo):
    deal_id = repo.create_deal(repo.create_property(property_1962()))

    doc_id = repo.add_document(
        deal_id,
        {"file_name": "t12.pdf", "file_type": "t12", "file_size": 10, "extracted_data": {"operating_expenses": 5.0}},
    )
    n = repo.add_comparables(
        deal_id,
        [{"property_name": "A", "address": "1 A St", "rent_per_sqft": 1.5, "cap_rate": None, "distance": 0.1}],
        source="static",
    )

    docs = repo.list_documents(deal_id)
    assert [d["document_id"] for d in docs] == [doc_id]
    assert docs[0]["extracted_data"] == {"operating_expenses": 5.0}
    assert n == 1
    comps = repo.list_comparables(deal_id)
    assert comps[0]["property_name"] == "A"
    assert comps[0]["cap_rate"] is None
    assert comps[0]["source"] == "static"
    assert repo.list_documents(deal_id + 1) == []


def test_list_recent_newest_first(repo):
    pid = repo.create_property(property_1995())
    ids = [repo.create_deal(pid) for _ in range(3)]

    recent = repo.list_recent(limit=2)

    assert [d["deal_id"] for d in recent] == [ids[2], ids[1]]


def test_dashboard_stats(repo):
    pid = repo.create_property(property_1995())
    a, b, _ = (repo.create_deal(pid) for _ in range(3))
    _finish(repo, a, "pass", 10.0, 1.0)
    _finish(repo, b, "fail", 4.0, 3.0)

    stats = repo.dashboard_stats()

    assert stats["deals_analyzed"] == 3
    assert stats["passed_deals"] == 1
    # third deal is still analyzing and stays out of the averages
    assert stats["avg_coc_return"] == pytest.approx(7.0)
    assert stats["avg_processing_time"] == pytest.approx(2.0)
