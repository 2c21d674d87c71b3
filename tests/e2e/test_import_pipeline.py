"""
End-to-end tests for the import pipeline.

Tests the complete flow: stubbed openFDA API → transform → PostgreSQL → CSV
"""

from datetime import date

import httpx
import pandas as pd
import pytest
from fastapi.testclient import TestClient

from fda_importer.api import create_app
from fda_importer.batch import ImportPipeline
from fda_importer.config import PipelineSettings, Settings
from fda_importer.core.models import SubmissionCategory
from fda_importer.warehouse import DeviceQuery


PMA_PAGE = [
    {
        "pma_number": "P200012",
        "applicant": "Acme Corp",
        "device_name": "Implantable Cardiac Pacemaker",
        "decision_code": "APPR",
        "decision_date": "2024-02-14",
        "product_code": "DXY",
    },
    {
        "pma_number": "P200012",
        "supplement_number": "S001",
        "applicant": "Acme Corp",
        "device_name": "Implantable Cardiac Pacemaker",
        "decision_code": "APPR",
        "decision_date": "2024-02-20",
        "product_code": "DXY",
    },
]

K510_PAGE = [
    {
        "k_number": "K240202",
        "applicant": "Initech Diagnostics",
        "device_name": "Blood Pressure Cuff",
        "decision_code": "SE",
        "decision_date": "2024-03-05",
        "product_code": "DXN",
        "regulation_number": "870.1130",
    },
]


@pytest.mark.e2e
@pytest.mark.integration
def test_full_run_deduplicates_and_exports(clean_db, make_source, paged_handler, tmp_path):
    """
    Two PMA records sharing a number and one 510(k) record end up as two rows.

    Steps:
    1. Run the pipeline against the stubbed API
    2. Verify the store holds one row per submission number
    3. Verify the CSV export has a header and one line per row
    """
    requests = []
    source = make_source(paged_handler({"pma.json": [PMA_PAGE], "510k.json": [K510_PAGE]}, requests))
    pipeline = ImportPipeline(clean_db, source, PipelineSettings())
    export_path = tmp_path / "fda_device_export.csv"

    summary = pipeline.run(export_path=export_path, today=date(2024, 3, 31))

    pma, k510 = summary.categories
    assert (pma.category, pma.fetched, pma.transformed, pma.added, pma.skipped) == (
        SubmissionCategory.PMA, 2, 2, 1, 1
    )
    assert (k510.category, k510.fetched, k510.added, k510.skipped) == (SubmissionCategory.K510, 1, 1, 0)
    assert summary.approved_count == 1

    assert DeviceQuery(clean_db).count() == 2

    assert summary.export.written
    assert summary.export.records_written == 2
    lines = export_path.read_text().splitlines()
    assert lines[0].startswith("submission_number,device_name,submission_type,decision")
    assert len(lines) == 3

    frame = pd.read_csv(export_path, dtype=str, keep_default_na=False)
    assert set(frame["submission_number"]) == {"P200012", "K240202"}
    stored_pma = frame[frame["submission_number"] == "P200012"].iloc[0]
    assert stored_pma["decision_date"] == "2024-02-14"

    k510_requests = [r for r in requests if r.url.path.endswith("510k.json")]
    assert k510_requests[0].url.params["search"] == "decision_date:[2024-01-01+TO+2024-03-31]"
    assert int(k510_requests[0].url.params["limit"]) == 100
    pma_requests = [r for r in requests if r.url.path.endswith("pma.json")]
    assert int(pma_requests[0].url.params["limit"]) == 50
    assert "search" not in pma_requests[0].url.params


@pytest.mark.e2e
@pytest.mark.integration
def test_rerun_skips_everything(clean_db, make_source, paged_handler, tmp_path):
    pages = {"pma.json": [PMA_PAGE[:1]], "510k.json": [K510_PAGE]}

    ImportPipeline(clean_db, make_source(paged_handler(pages))).run(export_path=tmp_path / "first.csv")
    summary = ImportPipeline(clean_db, make_source(paged_handler(pages))).run(export_path=tmp_path / "second.csv")

    assert summary.total_added == 0
    assert summary.total_skipped == 2
    assert DeviceQuery(clean_db).count() == 2


@pytest.mark.e2e
@pytest.mark.integration
def test_api_failure_does_not_abort_run(clean_db, make_source, tmp_path):
    """A failing 510(k) endpoint still lets PMA data be stored and exported"""

    def handler(request):
        if request.url.path.endswith("510k.json"):
            raise httpx.ConnectTimeout("timed out", request=request)
        skip = int(request.url.params["skip"])
        return httpx.Response(200, json={"results": PMA_PAGE[:1] if skip == 0 else []})

    summary = ImportPipeline(clean_db, make_source(handler)).run(export_path=tmp_path / "out.csv")

    pma, k510 = summary.categories
    assert pma.added == 1
    assert k510.fetched == 0
    assert k510.fetch_error
    assert summary.export.records_written == 1


@pytest.mark.e2e
@pytest.mark.integration
def test_empty_api_exports_nothing(clean_db, make_source, paged_handler, tmp_path):
    export_path = tmp_path / "out.csv"

    summary = ImportPipeline(clean_db, make_source(paged_handler({"pma.json": [], "510k.json": []}))).run(
        export_path=export_path
    )

    assert summary.approved_count == 0
    assert not summary.export.written
    assert not export_path.exists()


@pytest.mark.e2e
@pytest.mark.integration
def test_http_export_runs_pipeline(clean_db, make_source, paged_handler, tmp_path):
    source = make_source(paged_handler({"pma.json": [PMA_PAGE], "510k.json": [K510_PAGE]}))
    settings = Settings(pipeline=PipelineSettings(export_dir=tmp_path / "exports"))

    with TestClient(create_app(settings, pool=clean_db, source=source)) as client:
        response = client.get("/export/csv")
        devices = client.get("/devices", params={"applicant": "INITECH"})

    assert response.status_code == 200
    assert "fda_device_export_" in response.headers["content-disposition"]
    assert len(response.text.splitlines()) == 3
    assert [d["submission_number"] for d in devices.json()["devices"]] == ["K240202"]
    # The injected pool stays open for the rest of the session
    assert clean_db.is_open
