def test_create_and_list_classes(client, user_headers):
    for name in ("7c", "5a", "6b"):
        r = client.post("/api/classes", json={"name": name}, headers=user_headers())
        assert r.status_code == 201, r.text
        assert r.json()["data"]["participant_count"] == 0

    r = client.get("/api/classes", params={"limit": 2}, headers=user_headers())
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 3
    assert [c["name"] for c in body["results"]] == ["5a", "6b"]


def test_duplicate_class_is_a_conflict(client, user_headers, school_class):
    r = client.post("/api/classes", json={"name": " 5a "}, headers=user_headers())
    assert r.status_code == 409
    assert r.json()["error"] == "Class already exists"


def test_class_name_required(client, user_headers):
    r = client.post("/api/classes", json={"name": "  "}, headers=user_headers())
    assert r.status_code == 400
    assert r.json()["error"] == "Class name is required"


def test_classes_need_sign_in(client):
    assert client.get("/api/classes").status_code == 401
