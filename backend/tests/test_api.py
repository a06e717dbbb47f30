"""
CafeStaff Backend — API Endpoint Tests
========================================

What:  End-to-end requests through the FastAPI app (middleware, exception
       handlers, routes, services) against a per-test SQLite database.

What we test:
    ✅ Cafe create (multipart, with/without logo), list, update, delete
    ✅ Logo served back with its media type
    ✅ Employee create/update/delete and tenure listing
    ✅ Alternative names: `image` upload field, `cafeName` filter
    ✅ Error mapping: 400, 404, 422 and the shared error body
    ✅ X-Request-ID and X-Total-Count headers
    ✅ Health check
"""

import re

import pytest

ID_PATTERN = re.compile(r"^UI[A-Z0-9]{7}$")


async def _create_cafe(client, name="Cafe A", location="Lahore", logo=None):
    files = {"logo": ("logo.jpg", logo, "image/jpeg")} if logo else None
    response = await client.post(
        "/api/cafes",
        data={"name": name, "description": "Cozy", "location": location},
        files=files,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _create_employee(client, name="Jane", cafe_id=None):
    body = {
        "name": name,
        "email_address": f"{name.lower()}@example.com",
        "phone_number": "098-765-4321",
        "gender": "Female",
    }
    if cafe_id:
        body["cafe_id"] = cafe_id
    response = await client.post("/api/employees", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCafeEndpoints:
    """Tests for /api/cafes."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, test_client):
        """Created cafes are listed with their employee_count."""
        cafe = await _create_cafe(test_client)
        await _create_employee(test_client, cafe_id=cafe["id"])

        response = await test_client.get("/api/cafes")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        [listed] = response.json()
        assert listed["id"] == cafe["id"]
        assert listed["employee_count"] == 1

    @pytest.mark.asyncio
    async def test_location_filter_without_match(self, test_client):
        await _create_cafe(test_client)

        response = await test_client.get("/api/cafes", params={"location": "Nowhere"})

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_create_with_logo_and_fetch_it(self, test_client, sample_image_bytes):
        """The logo_url in the response serves the uploaded bytes."""
        cafe = await _create_cafe(test_client, logo=sample_image_bytes)

        response = await test_client.get(cafe["logo_url"])

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_logo_accepted_as_image_field(self, test_client, sample_image_bytes):
        """`image` is accepted as the upload field name too."""
        response = await test_client.post(
            "/api/cafes",
            data={"name": "Cafe A", "location": "Lahore"},
            files={"image": ("logo.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 201
        logo = await test_client.get(response.json()["logo_url"])
        assert logo.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, test_client):
        """Business validation uses the shared error body."""
        response = await test_client.post(
            "/api/cafes", data={"name": "   ", "location": "Lahore"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "name"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_bad_logo_type_is_400(self, test_client):
        response = await test_client.post(
            "/api/cafes",
            data={"name": "Cafe A", "location": "Lahore"},
            files={"logo": ("logo.gif", b"GIF89a", "image/gif")},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update(self, test_client):
        cafe = await _create_cafe(test_client)

        response = await test_client.put(
            f"/api/cafes/{cafe['id']}", data={"name": "Cafe A Renamed"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Cafe A Renamed"
        assert body["location"] == "Lahore"
        assert body["warnings"] == []

    @pytest.mark.asyncio
    async def test_update_unknown_is_404(self, test_client):
        response = await test_client.put("/api/cafes/no-such-cafe", data={"name": "X"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_cascades(self, test_client):
        """Cafe A with 3 employees: afterwards none of them are listed."""
        cafe = await _create_cafe(test_client)
        staff = [
            (await _create_employee(test_client, name=name, cafe_id=cafe["id"]))["id"]
            for name in ("Ann", "Bob", "Cy")
        ]

        response = await test_client.delete(f"/api/cafes/{cafe['id']}")

        assert response.status_code == 200
        assert sorted(response.json()["deleted_employee_ids"]) == sorted(staff)
        employees = (await test_client.get("/api/employees")).json()
        assert not {e["id"] for e in employees} & set(staff)

    @pytest.mark.asyncio
    async def test_missing_logo_is_404(self, test_client):
        response = await test_client.get("/api/cafes/logos/2024/01/01/missing.png")

        assert response.status_code == 404


class TestEmployeeEndpoints:
    """Tests for /api/employees."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_cafe(self, test_client):
        cafe = await _create_cafe(test_client)

        employee = await _create_employee(test_client, cafe_id=cafe["id"])

        assert ID_PATTERN.match(employee["id"])
        assert employee["cafe_id"] == cafe["id"]
        assert employee["start_date"] is not None

    @pytest.mark.asyncio
    async def test_create_accepts_short_aliases(self, test_client):
        response = await test_client.post(
            "/api/employees",
            json={
                "name": "Jane",
                "email": "jane@example.com",
                "phone": "12345678",
                "gender": "Female",
            },
        )

        assert response.status_code == 201
        assert response.json()["email_address"] == "jane@example.com"

    @pytest.mark.asyncio
    async def test_create_with_unknown_cafe_is_404(self, test_client):
        response = await test_client.post(
            "/api/employees",
            json={
                "name": "Jane",
                "email_address": "jane@example.com",
                "phone_number": "12345678",
                "gender": "Female",
                "cafe_id": "no-such-cafe",
            },
        )

        assert response.status_code == 404
        assert (await test_client.get("/api/employees")).json() == []

    @pytest.mark.asyncio
    async def test_invalid_email_is_422(self, test_client):
        """Schema errors stay with FastAPI's 422."""
        response = await test_client.post(
            "/api/employees",
            json={
                "name": "Jane",
                "email_address": "not-an-email",
                "phone_number": "12345678",
                "gender": "Female",
            },
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unassigned_then_assigned(self, test_client):
        """Null tenure first; 0 days right after assignment."""
        cafe = await _create_cafe(test_client)
        employee = await _create_employee(test_client)

        [before] = (await test_client.get("/api/employees")).json()
        assert before["days_worked"] is None
        assert before["cafe"] is None

        response = await test_client.put(
            f"/api/employees/{employee['id']}", json={"cafe_id": cafe["id"]}
        )
        assert response.status_code == 200

        [after] = (await test_client.get("/api/employees")).json()
        assert after["days_worked"] == 0
        assert after["cafe"]["name"] == "Cafe A"

    @pytest.mark.asyncio
    async def test_null_cafe_unassigns(self, test_client):
        cafe = await _create_cafe(test_client)
        employee = await _create_employee(test_client, cafe_id=cafe["id"])

        response = await test_client.put(
            f"/api/employees/{employee['id']}", json={"cafe_id": None}
        )

        assert response.status_code == 200
        assert response.json()["cafe_id"] is None

    @pytest.mark.asyncio
    async def test_cafe_filter(self, test_client):
        brewed = await _create_cafe(test_client, name="Brewed Awakening")
        tea = await _create_cafe(test_client, name="Tea House")
        ann = await _create_employee(test_client, name="Ann", cafe_id=brewed["id"])
        await _create_employee(test_client, name="Bob", cafe_id=tea["id"])

        response = await test_client.get("/api/employees", params={"cafe": "BREWED"})

        assert [e["id"] for e in response.json()] == [ann["id"]]

    @pytest.mark.asyncio
    async def test_cafe_filter_as_cafe_name(self, test_client):
        """`cafeName` filters the same way as `cafe`."""
        brewed = await _create_cafe(test_client, name="Brewed Awakening")
        tea = await _create_cafe(test_client, name="Tea House")
        await _create_employee(test_client, name="Ann", cafe_id=brewed["id"])
        bob = await _create_employee(test_client, name="Bob", cafe_id=tea["id"])

        response = await test_client.get("/api/employees", params={"cafeName": "tea"})

        assert [e["id"] for e in response.json()] == [bob["id"]]

    @pytest.mark.asyncio
    async def test_delete(self, test_client):
        employee = await _create_employee(test_client)

        response = await test_client.delete(f"/api/employees/{employee['id']}")
        assert response.status_code == 200
        assert response.json()["employee_id"] == employee["id"]

        response = await test_client.delete(f"/api/employees/{employee['id']}")
        assert response.status_code == 404


class TestCrossCutting:
    """Tests for middleware and the health check."""

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/cafes", headers={"X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/api/cafes")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["storage"] == "writable"
