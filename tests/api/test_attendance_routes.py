from tests.fakes import OTHER


def _record(client, **overrides):
    body = {"workerId": 1, "projectId": 10, "date": "2026-03-02", "status": "Present", "checkIn": "07:30", "checkOut": "16:30"}
    body.update(overrides)
    return client.post("/api/attendance", json=body)


def test_record_and_get(logged_in):
    resp = _record(logged_in)
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["checkIn"] == "07:30:00"
    assert data["date"] == "2026-03-02"

    got = logged_in.get(f"/api/attendance/{data['attendanceId']}").get_json()["data"]
    assert got["status"] == "Present"


def test_duplicate_record_is_409(logged_in):
    _record(logged_in)
    resp = _record(logged_in)
    assert resp.status_code == 409


def test_bad_date_is_validation_error(logged_in):
    resp = _record(logged_in, date="02/03/2026")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_update_maps_camel_case_and_drops_unknown_fields(logged_in):
    attendance_id = _record(logged_in).get_json()["data"]["attendanceId"]

    resp = logged_in.put(
        f"/api/attendance/{attendance_id}",
        json={"checkOut": "17:00", "rating": 4, "userId": 99, "workerId": 2},
    )
    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["checkOut"] == "17:00:00"
    assert data["rating"] == 4
    assert data["userId"] == 1
    assert data["workerId"] == 1

    resp = logged_in.put(f"/api/attendance/{attendance_id}", json={"userId": 99})
    assert resp.status_code == 400


def test_update_and_delete_by_other_user_are_forbidden(logged_in):
    attendance_id = _record(logged_in).get_json()["data"]["attendanceId"]

    with logged_in.session_transaction() as sess:
        sess["user_id"] = OTHER

    assert logged_in.put(f"/api/attendance/{attendance_id}", json={"status": "Absent"}).status_code == 403
    assert logged_in.delete(f"/api/attendance/{attendance_id}").status_code == 403
    assert logged_in.get(f"/api/attendance/{attendance_id}").status_code == 404


def test_mark_rating_list_and_stats(logged_in):
    _record(logged_in)
    resp = logged_in.post(
        "/api/attendance/mark-rating",
        json={"workerId": 1, "projectId": 10, "date": "2026-03-02", "status": "Late", "rating": 5},
    )
    assert resp.status_code == 200
    _record(logged_in, date="2026-03-03", status="Absent", checkIn=None, checkOut=None)

    body = logged_in.get("/api/attendance?status=Late").get_json()
    assert body["pagination"]["totalCount"] == 1
    assert body["data"][0]["workerName"] == "Nguyen Van A"

    stats = logged_in.get("/api/attendance/stats").get_json()["data"]
    assert stats["totalRecords"] == 2
    assert stats["lateCount"] == 1
    assert stats["attendanceRate"] == 50.0
    assert stats["averageRating"] == 5.0


def test_worker_summary(logged_in):
    _record(logged_in)

    data = logged_in.get("/api/attendance/worker/1/summary").get_json()["data"]
    assert data["worker"]["fullname"] == "Nguyen Van A"
    assert data["stats"]["totalRecords"] == 1
    assert len(data["recentRecords"]) == 1

    assert logged_in.get("/api/attendance/worker/3/summary").status_code == 404


def test_bad_status_filter_is_validation_error(logged_in):
    resp = logged_in.get("/api/attendance?status=Holiday")
    assert resp.status_code == 400


def test_non_string_comments_is_validation_error(logged_in):
    resp = logged_in.post(
        "/api/attendance/mark-rating",
        json={"workerId": 1, "projectId": 10, "date": "2026-03-02", "status": "Present", "rating": 4, "comments": 5},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"
