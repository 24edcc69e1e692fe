NEW_LAPTOP = {
    "model_number": "AS-4000",
    "category": "ULTRABOOK",
    "price": 799.0,
    "discount": 0.15,
    "available": True,
    "release_date": "2024-01-15",
    "homepage": "https://aspire.example.com/",
    "features": ["LIGHTWEIGHT"],
    "brand": {"name": "Aspire", "series": "Swift"},
    "images": [{"caption": "Front", "content_type": "image/png"}],
}

UPDATE = {
    "model_number": "ZB-1000",
    "price": 899.0,
}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_get_by_id(client, laptops):
    response = await client.get("/rest/1")

    assert response.status_code == 200
    assert response.headers["etag"] == '"0"'
    body = response.json()
    assert body["model_number"] == "ZB-1000"
    assert body["price"] == 999.99
    assert body["brand"]["name"] == "Zenbook"
    assert body["features"] == ["TOUCHSCREEN", "LIGHTWEIGHT"]


async def test_get_by_id_not_modified(client, laptops):
    response = await client.get("/rest/1", headers={"If-None-Match": '"0"'})

    assert response.status_code == 304


async def test_get_by_id_other_etag(client, laptops):
    response = await client.get("/rest/1", headers={"If-None-Match": '"5"'})

    assert response.status_code == 200


async def test_get_by_unknown_or_invalid_id(client, laptops):
    assert (await client.get("/rest/999")).status_code == 404
    assert (await client.get("/rest/abc")).status_code == 404


async def test_search_with_page_envelope(client, laptops):
    response = await client.get("/rest", params={"size": 2, "page": 1})

    assert response.status_code == 200
    body = response.json()
    assert [laptop["id"] for laptop in body["content"]] == [3]
    assert body["page"] == {"size": 2, "number": 1, "total_elements": 3, "total_pages": 2}


async def test_search_by_criteria(client, laptops):
    response = await client.get("/rest", params={"brand": "zen", "touchscreen": "true"})

    assert response.status_code == 200
    assert [laptop["model_number"] for laptop in response.json()["content"]] == ["ZB-1000"]


async def test_search_invalid_criteria_is_not_found(client, laptops):
    assert (await client.get("/rest", params={"color": "red"})).status_code == 404
    assert (await client.get("/rest", params={"category": "TABLET"})).status_code == 404
    assert (await client.get("/rest", params={"brand": "nobody"})).status_code == 404
    assert (await client.get("/rest", params={"id": "99999999999999999999999"})).status_code == 404
    assert (await client.get("/rest", params={"available": "yes"})).status_code == 404


async def test_create(client, laptops, admin_headers, mail_service):
    response = await client.post("/rest", json=NEW_LAPTOP, headers=admin_headers)

    assert response.status_code == 201
    assert response.headers["location"] == "http://test/rest/4"
    assert mail_service.sent[0][0] == "New laptop 4"

    created = (await client.get("/rest/4")).json()
    assert created["brand"] == {"name": "Aspire", "series": "Swift"}
    assert created["discount"] == 0.15


async def test_create_as_user(client, laptops, user_headers):
    response = await client.post("/rest", json=NEW_LAPTOP, headers=user_headers)

    assert response.status_code == 201


async def test_create_invalid_body(client, laptops, admin_headers):
    invalid = {**NEW_LAPTOP, "price": -1, "discount": 1.5}

    response = await client.post("/rest", json=invalid, headers=admin_headers)

    assert response.status_code == 400


async def test_create_duplicate_features(client, laptops, admin_headers):
    invalid = {**NEW_LAPTOP, "features": ["LIGHTWEIGHT", "LIGHTWEIGHT"]}

    response = await client.post("/rest", json=invalid, headers=admin_headers)

    assert response.status_code == 400


async def test_create_duplicate_model_number(client, laptops, admin_headers):
    duplicate = {**NEW_LAPTOP, "model_number": "PB-2000"}

    response = await client.post("/rest", json=duplicate, headers=admin_headers)

    assert response.status_code == 422


async def test_create_requires_token(client, laptops, guest_headers):
    assert (await client.post("/rest", json=NEW_LAPTOP)).status_code == 401
    assert (await client.post("/rest", json=NEW_LAPTOP, headers={"Authorization": "Bearer broken"})).status_code == 401
    assert (await client.post("/rest", json=NEW_LAPTOP, headers=guest_headers)).status_code == 403


async def test_update(client, laptops, admin_headers):
    headers = {**admin_headers, "If-Match": '"0"'}

    response = await client.put("/rest/1", json=UPDATE, headers=headers)

    assert response.status_code == 204
    assert response.headers["etag"] == '"1"'

    laptop = await client.get("/rest/1")
    assert laptop.headers["etag"] == '"1"'
    assert laptop.json()["price"] == 899.0
    assert laptop.json()["category"] == "ULTRABOOK"


async def test_update_without_if_match(client, laptops, admin_headers):
    response = await client.put("/rest/1", json=UPDATE, headers=admin_headers)

    assert response.status_code == 428


async def test_update_with_invalid_if_match(client, laptops, admin_headers):
    for version in ("abc", "0", '"abcd"'):
        response = await client.put("/rest/1", json=UPDATE, headers={**admin_headers, "If-Match": version})
        assert response.status_code == 412


async def test_update_lost_update_is_rejected(client, laptops, admin_headers, user_headers):
    first = await client.put("/rest/1", json=UPDATE, headers={**admin_headers, "If-Match": '"0"'})
    assert first.status_code == 204

    second = await client.put(
        "/rest/1",
        json={**UPDATE, "price": 949.0},
        headers={**user_headers, "If-Match": '"0"'}
    )
    assert second.status_code == 412


async def test_update_unknown_laptop(client, laptops, admin_headers):
    response = await client.put("/rest/999", json=UPDATE, headers={**admin_headers, "If-Match": '"0"'})

    assert response.status_code == 404


async def test_update_invalid_body(client, laptops, admin_headers):
    response = await client.put(
        "/rest/1",
        json={"model_number": "ZB-1000", "price": "cheap"},
        headers={**admin_headers, "If-Match": '"0"'}
    )

    assert response.status_code == 400


async def test_upload_and_download_file(client, laptops, admin_headers):
    files = {"file": ("front.png", b"\x89PNG fake", "image/png")}

    response = await client.post("/rest/1", files=files, headers=admin_headers)

    assert response.status_code == 204
    assert response.headers["location"] == "http://test/rest/file/1"

    download = await client.get("/rest/file/1")
    assert download.status_code == 200
    assert download.content == b"\x89PNG fake"
    assert download.headers["content-type"] == "image/png"
    assert "front.png" in download.headers["content-disposition"]


async def test_upload_for_unknown_laptop(client, laptops, admin_headers):
    files = {"file": ("front.png", b"data", "image/png")}

    response = await client.post("/rest/999", files=files, headers=admin_headers)

    assert response.status_code == 404


async def test_download_without_file(client, laptops):
    assert (await client.get("/rest/file/2")).status_code == 404


async def test_delete(client, laptops, admin_headers):
    response = await client.delete("/rest/2", headers=admin_headers)

    assert response.status_code == 204
    assert (await client.get("/rest/2")).status_code == 404


async def test_delete_unknown_laptop(client, laptops, admin_headers):
    assert (await client.delete("/rest/999", headers=admin_headers)).status_code == 204
    assert (await client.delete("/rest/abc", headers=admin_headers)).status_code == 204


async def test_delete_requires_admin(client, laptops, user_headers):
    assert (await client.delete("/rest/1")).status_code == 401
    assert (await client.delete("/rest/1", headers=user_headers)).status_code == 403


async def test_create_without_features_reads_empty_list(client, laptops, admin_headers):
    laptop = {key: value for key, value in NEW_LAPTOP.items() if key != "features"}

    response = await client.post("/rest", json=laptop, headers=admin_headers)
    assert response.status_code == 201

    assert (await client.get("/rest/4")).json()["features"] == []
    search = await client.get("/rest", params={"model_number": "AS-4000"})
    assert search.json()["content"][0]["features"] == []
