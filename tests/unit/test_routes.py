"""
API tests through the FastAPI test client.

Every test starts from fresh in-memory stores (singletons are reset in
conftest).
"""

CSV_HEADER = "UniqueID,Location Code,Customer,Fabric Type,GPU Model"


def upload(client, rows: list[str], filename: str = "orders.csv"):
    content = "\n".join([CSV_HEADER] + rows).encode("utf-8")
    return client.post("/api/uploads", files={"file": (filename, content, "text/csv")})


class TestHealth:
    """Health and root endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["storage"]["backend"] == "memory"

    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.json()["endpoints"]["snapshots"] == "/api/snapshots"


class TestUploads:
    """POST /api/uploads."""

    def test_upload_csv(self, test_client):
        response = upload(test_client, ["1,LOC001,Acme,Cotton,RTX 3080", "2,LOC002,Tech,Wool,RTX 4090"])

        assert response.status_code == 201
        body = response.json()
        assert body["new_count"] == 2
        assert body["snapshot"]["row_count"] == 2

    def test_upload_sample(self, test_client):
        response = test_client.post("/api/uploads/sample")

        assert response.status_code == 201
        assert response.json()["new_count"] == 7

    def test_missing_columns(self, test_client):
        content = b"UniqueID,Customer\n1,Acme\n"
        response = test_client.post("/api/uploads", files={"file": ("orders.csv", content, "text/csv")})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "MISSING_COLUMNS"
        assert test_client.get("/api/snapshots").json()["total"] == 0

    def test_empty_file(self, test_client):
        response = test_client.post("/api/uploads", files={"file": ("orders.csv", b"", "text/csv")})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "EMPTY_DATASET"

    def test_unsupported_type(self, test_client):
        response = test_client.post("/api/uploads", files={"file": ("orders.pdf", b"%PDF", "application/pdf")})
        assert response.status_code == 415


class TestSnapshotRoutes:
    """GET /api/snapshots/..."""

    def test_list_and_get(self, test_client):
        snapshot_id = upload(test_client, ["1,LOC001,Acme,Cotton,RTX 3080"]).json()["snapshot"]["id"]

        listing = test_client.get("/api/snapshots").json()
        single = test_client.get(f"/api/snapshots/{snapshot_id}")
        records = test_client.get(f"/api/snapshots/{snapshot_id}/records").json()

        assert listing["total"] == 1
        assert single.status_code == 200
        assert records["data"][0]["identifier"] == 1

    def test_unknown_snapshot(self, test_client):
        response = test_client.get("/api/snapshots/0000000000000")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SNAPSHOT_NOT_FOUND"

    def test_latest(self, test_client):
        assert test_client.get("/api/snapshots/latest").json() == {"snapshot": None, "records": []}

        upload(test_client, ["1,LOC001,Acme,Cotton,RTX 3080"])
        latest = test_client.get("/api/snapshots/latest").json()

        assert len(latest["records"]) == 1

    def test_compare_and_history(self, test_client):
        base = upload(test_client, [
            "1,LOC001,Acme,Cotton,RTX 3080",
            "2,LOC001,Acme,Cotton,RTX 3080",
            "3,LOC001,Acme,Cotton,RTX 3080",
        ]).json()["snapshot"]["id"]
        target = upload(test_client, [
            "2,LOC001,Acme,Wool,RTX 3080",
            "3,LOC001,Acme,Cotton,RTX 3080",
            "4,LOC001,Acme,Cotton,RTX 3080",
        ]).json()["snapshot"]["id"]

        result = test_client.get("/api/snapshots/compare", params={"base": base, "target": target}).json()
        history = test_client.get("/api/snapshots/history").json()

        assert (result["new_count"], result["removed_count"], result["modified_count"]) == (1, 1, 1)
        assert result["changes"]["2"][0]["field"] == "Fabric Type"
        assert [h["snapshot_id"] for h in history] == [base, target]

    def test_compare_unknown_snapshot(self, test_client):
        target = upload(test_client, ["1,LOC001,Acme,Cotton,RTX 3080"]).json()["snapshot"]["id"]

        response = test_client.get("/api/snapshots/compare", params={"base": "0000000000000", "target": target})

        assert response.status_code == 404


class TestRecordRoutes:
    """/api/records/..."""

    def test_queries(self, test_client):
        test_client.post("/api/uploads/sample")

        filtered = test_client.post("/api/records/filter", json={"criteria": {"Location Code": ["LOC001"]}}).json()
        search = test_client.get("/api/records/search", params={"q": "datasystems"}).json()
        distinct = test_client.get("/api/records/distinct/Location Code").json()
        grouped = test_client.get("/api/records/grouped/GPU Model").json()
        summary = test_client.get("/api/records/summary").json()
        location = test_client.get("/api/records/locations/LOC003").json()

        assert filtered["total"] == 2
        assert search["total"] == 2
        assert distinct["values"] == ["LOC001", "LOC002", "LOC003", "LOC004"]
        assert grouped[0] == {"value": "RTX 3080", "count": 2}
        assert summary["total_records"] == 7
        assert location["customers"] == ["DataSystems"]

    def test_record_and_history(self, test_client):
        upload(test_client, ["1,LOC001,Acme,Cotton,RTX 3080"])
        upload(test_client, ["1,LOC002,Acme,Cotton,RTX 3080"])

        record = test_client.get("/api/records/1").json()
        history = test_client.get("/api/records/1/history").json()

        assert record["status"] == "updated"
        assert record["fields"]["Location Code"] == "LOC002"
        assert history["total"] == 2

    def test_unknown_record(self, test_client):
        assert test_client.get("/api/records/999").status_code == 404
        assert test_client.get("/api/records/999/history").status_code == 404


class TestSettingsAndData:
    """/api/settings and /api/data."""

    def test_settings_crud(self, test_client):
        assert test_client.get("/api/settings/defaultView").status_code == 404

        put = test_client.put("/api/settings/defaultView", json={"value": "chart"})
        got = test_client.get("/api/settings/defaultView").json()
        listing = test_client.get("/api/settings").json()

        assert put.status_code == 200
        assert got == {"key": "defaultView", "value": "chart"}
        assert listing["total"] == 1

    def test_clear_data_keeps_settings(self, test_client):
        test_client.put("/api/settings/defaultView", json={"value": "table"})
        test_client.post("/api/uploads/sample")

        response = test_client.delete("/api/data")

        assert response.json() == {"status": "cleared"}
        assert test_client.get("/api/snapshots").json()["total"] == 0
        assert test_client.get("/api/records/summary").json()["total_records"] == 0
        assert test_client.get("/api/settings/defaultView").json()["value"] == "table"
