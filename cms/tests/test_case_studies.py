"""Tests for the case study endpoints and public work pages."""

import uuid


async def _create(client, admin_headers, data):
    response = await client.post("/api/case-studies", json=data, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()["caseStudy"]


async def test_create_returns_camel_case_record(client, admin_headers, case_study_data):
    response = await client.post(
        "/api/case-studies", json=case_study_data, headers=admin_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    record = body["caseStudy"]
    uuid.UUID(record["id"])
    assert record["roleDescription"] == "Interim CTO"
    assert record["featured"] is False
    assert record["treeHouseAttribution"] is None
    assert "createdAt" in record and "updatedAt" in record


async def test_client_may_be_empty(client, admin_headers, case_study_data):
    record = await _create(client, admin_headers, {**case_study_data, "client": ""})

    assert record["client"] == ""


async def test_missing_required_fields(client, admin_headers, case_study_data):
    del case_study_data["client"]
    case_study_data["challenge"] = "   "

    response = await client.post(
        "/api/case-studies", json=case_study_data, headers=admin_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid case study data"
    assert {"client", "challenge"} <= set(body["errors"])


async def test_attribution_checkbox_is_stored_as_text(
    client, admin_headers, case_study_data
):
    record = await _create(
        client, admin_headers, {**case_study_data, "treeHouseAttribution": True}
    )
    assert record["treeHouseAttribution"] == "true"

    page = await client.get(f"/work/{record['slug']}")
    assert "Tree House" in page.text


async def test_image_accepts_uploaded_path_and_rejects_junk(
    client, admin_headers, case_study_data
):
    ok = await client.post(
        "/api/case-studies",
        json={**case_study_data, "image": "/case-study-images/1-2.png"},
        headers=admin_headers,
    )
    bad = await client.post(
        "/api/case-studies",
        json={**case_study_data, "slug": "other", "image": "javascript:alert(1)"},
        headers=admin_headers,
    )

    assert ok.status_code == 201
    assert bad.status_code == 400
    assert "image" in bad.json()["errors"]


async def test_duplicate_slug_is_conflict(client, admin_headers, case_study_data):
    await _create(client, admin_headers, case_study_data)

    response = await client.post(
        "/api/case-studies", json=case_study_data, headers=admin_headers
    )

    assert response.status_code == 409


async def test_update_keeps_slug_fixed(client, admin_headers, case_study_data):
    record = await _create(client, admin_headers, case_study_data)
    url = f"/api/case-studies/{record['id']}"

    same_slug = await client.put(
        url,
        json={"slug": record["slug"], "impact": "Stock-outs down 25%."},
        headers=admin_headers,
    )
    new_slug = await client.put(url, json={"slug": "renamed"}, headers=admin_headers)

    assert same_slug.status_code == 200
    assert same_slug.json()["caseStudy"]["impact"] == "Stock-outs down 25%."
    assert new_slug.status_code == 400
    assert new_slug.json()["errors"] == {
        "slug": ["Slug cannot be changed after creation"]
    }
    fetched = await client.get(f"/api/case-studies/{record['slug']}")
    assert fetched.status_code == 200


async def test_update_unknown_id_is_404(client, admin_headers):
    response = await client.patch(
        f"/api/case-studies/{uuid.uuid4()}",
        json={"title": "x"},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Case study not found"


async def test_list_and_featured_filter(client, admin_headers, case_study_data):
    await _create(client, admin_headers, case_study_data)
    await _create(
        client, admin_headers, {**case_study_data, "slug": "second", "featured": True}
    )

    all_records = (await client.get("/api/case-studies")).json()
    featured = (await client.get("/api/case-studies?featured=true")).json()

    assert [r["slug"] for r in all_records] == ["second", "retail-data-platform"]
    assert [r["slug"] for r in featured] == ["second"]


async def test_delete(client, admin_headers, case_study_data):
    record = await _create(client, admin_headers, case_study_data)

    response = await client.delete(
        f"/api/case-studies/{record['id']}", headers=admin_headers
    )
    missing = await client.delete(
        f"/api/case-studies/{uuid.uuid4()}", headers=admin_headers
    )

    assert response.json()["message"] == "Case study deleted successfully"
    assert missing.status_code == 404
    assert (await client.get("/api/case-studies")).json() == []


async def test_preview_and_public_page(client, admin_headers, case_study_data):
    preview = await client.post(
        "/api/case-studies/preview",
        json={"title": "Draft study", "treeHouseAttribution": "With thanks to <b>TH</b>"},
        headers=admin_headers,
    )
    assert preview.status_code == 200
    assert "noindex" in preview.text
    assert "With thanks to &lt;b&gt;TH&lt;/b&gt;" in preview.text

    record = await _create(client, admin_headers, case_study_data)
    page = await client.get(f"/work/{record['slug']}")
    assert page.status_code == 200
    assert "Retail Data Platform" in page.text
    assert (await client.get("/work/unknown")).status_code == 404


async def test_preview_requires_admin_session(client):
    response = await client.post("/api/case-studies/preview", json={"title": "x"})

    assert response.status_code == 401
