import json
from datetime import date, time, timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import httpx
import pytest

from portal.models import Location, LocationFollower, RecurringEvent, StaffMembership


def geocoder_response(results):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = results
    return response


@pytest.fixture
def staff_headers(db_session, make_account, auth_headers, approved_location):
    """A plain staff member (no edit rights) at the approved location."""
    clerk = make_account(email="clerk@example.com")
    db_session.add(
        StaffMembership(location_id=approved_location.id, user_id=clerk.id, status="active")
    )
    db_session.commit()
    return auth_headers(clerk)


@pytest.mark.location
class TestDashboard:
    def test_summary(
        self, client, db_session, make_account, make_trade, approved_location, owner_headers
    ):
        today = date.today()
        make_trade(approved_location, today + timedelta(days=1), "14:00")
        make_trade(approved_location, today - timedelta(days=3), "14:00")
        make_trade(approved_location, today + timedelta(days=2), "15:00", status="cancelled")
        db_session.add(LocationFollower(location_id=approved_location.id, user_id=make_account().id))
        db_session.commit()

        response = client.get("/api/", headers=owner_headers)
        data = json.loads(response.data)

        assert response.status_code == 200
        assert data["location"]["store_name"] == "Card Kingdom"
        assert data["plan"]["name"] == "Basic"
        assert data["stats"]["upcoming_trades"] == 1
        assert data["stats"]["followers"] == 1
        assert data["stats"]["staff"] == 1
        assert data["slots"]["limit"] == 2

    def test_info(self, client, approved_location, owner_headers):
        data = json.loads(client.get("/api/info", headers=owner_headers).data)
        assert data["location"]["id"] == approved_location.id
        assert data["location"]["verified"] is True


@pytest.mark.location
class TestVisibility:
    def test_toggle(self, client, db_session, approved_location, owner_headers):
        response = client.put(
            "/api/info/visibility", json={"visible_on_app": True}, headers=owner_headers
        )
        assert response.status_code == 200
        assert db_session.get(Location, approved_location.id).visible_on_app is True

    def test_requires_verified(self, client, db_session, approved_location, owner_headers):
        approved_location.verified = False
        db_session.commit()

        response = client.put(
            "/api/info/visibility", json={"visible_on_app": True}, headers=owner_headers
        )
        assert response.status_code == 403
        assert db_session.get(Location, approved_location.id).visible_on_app is False

    def test_plain_staff_cannot_toggle(self, client, staff_headers):
        response = client.put(
            "/api/info/visibility", json={"visible_on_app": True}, headers=staff_headers
        )
        assert response.status_code == 403
        assert json.loads(response.data)["required"] == "edit_location"


@pytest.mark.location
class TestBusinessInfo:
    def test_update(self, client, db_session, approved_location, owner_headers):
        response = client.put(
            "/api/info/business",
            json={
                "store_name": "Card Kingdom Downtown",
                "phone": "512-555-0101",
                "email": "hello@cardkingdom.example",
                "website": "",
                "description": "Open late on Fridays",
            },
            headers=owner_headers,
        )
        assert response.status_code == 200

        location = db_session.get(Location, approved_location.id)
        assert location.store_name == "Card Kingdom Downtown"
        assert location.website is None

        data = json.loads(client.get("/api/info/business", headers=owner_headers).data)
        assert data["data"]["email"] == "hello@cardkingdom.example"

    def test_store_name_required(self, client, db_session, approved_location, owner_headers):
        response = client.put(
            "/api/info/business", json={"store_name": " "}, headers=owner_headers
        )
        assert response.status_code == 400
        assert db_session.get(Location, approved_location.id).store_name == "Card Kingdom"

    def test_staff_can_read_but_not_edit(self, client, staff_headers):
        assert client.get("/api/info/business", headers=staff_headers).status_code == 200
        response = client.put(
            "/api/info/business", json={"store_name": "Mine"}, headers=staff_headers
        )
        assert response.status_code == 403


@pytest.mark.location
class TestAddress:
    payload = {
        "address": "100 Congress Ave",
        "city": "Austin",
        "state": "TX",
        "zip_code": "78701",
    }

    def test_geocodes_on_save(self, client, db_session, approved_location, owner_headers):
        with patch(
            "portal.services.geocoding.httpx.get",
            return_value=geocoder_response([{"lat": "30.2672", "lon": "-97.7431"}]),
        ) as get:
            response = client.put("/api/info/address", json=self.payload, headers=owner_headers)

        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["geocoded"] is True
        assert get.call_args.kwargs["params"]["q"] == "100 Congress Ave, Austin, TX, 78701, USA"
        assert "User-Agent" in get.call_args.kwargs["headers"]

        location = db_session.get(Location, approved_location.id)
        assert location.latitude == Decimal("30.267200")
        assert location.longitude == Decimal("-97.743100")

    def test_geocoder_failure_keeps_coordinates(
        self, client, db_session, approved_location, owner_headers
    ):
        approved_location.latitude = Decimal("1.000000")
        approved_location.longitude = Decimal("2.000000")
        db_session.commit()

        with patch(
            "portal.services.geocoding.httpx.get",
            side_effect=httpx.ConnectError("geocoder down"),
        ):
            response = client.put("/api/info/address", json=self.payload, headers=owner_headers)

        assert response.status_code == 200
        assert json.loads(response.data)["geocoded"] is False

        location = db_session.get(Location, approved_location.id)
        assert location.address == "100 Congress Ave"
        assert location.latitude == Decimal("1.000000")

    def test_no_match_keeps_coordinates(self, client, approved_location, owner_headers):
        with patch(
            "portal.services.geocoding.httpx.get", return_value=geocoder_response([])
        ):
            response = client.put("/api/info/address", json=self.payload, headers=owner_headers)

        assert response.status_code == 200
        assert json.loads(response.data)["data"]["latitude"] is None

    def test_incomplete_address_skips_lookup(self, client, approved_location, owner_headers):
        with patch("portal.services.geocoding.httpx.get") as get:
            response = client.put(
                "/api/info/address", json={"address": "100 Congress Ave"}, headers=owner_headers
            )

        assert response.status_code == 200
        get.assert_not_called()

    def test_zip_too_long(self, client, approved_location, owner_headers):
        response = client.put(
            "/api/info/address",
            json={**self.payload, "zip_code": "78701-12345"},
            headers=owner_headers,
        )
        assert response.status_code == 400


@pytest.mark.location
class TestHours:
    def test_defaults(self, client, approved_location, owner_headers):
        data = json.loads(client.get("/api/hours", headers=owner_headers).data)

        assert data["is_default"] is True
        assert data["hours"]["sunday"]["closed"] is True
        assert data["display"]["Monday"] == "9:00 AM - 5:00 PM"

    def test_save(self, client, db_session, approved_location, owner_headers):
        hours = {
            day: {"open": "10:00", "close": "18:30", "closed": False}
            for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
        }
        hours["sunday"] = {"open": "", "close": "", "closed": True}

        response = client.put("/api/hours", json={"hours": hours}, headers=owner_headers)
        assert response.status_code == 200

        stored = db_session.get(Location, approved_location.id).operating_hours
        assert stored["Friday"] == "10:00 AM - 6:30 PM"
        assert stored["Sunday"] == "Closed"

        data = json.loads(client.get("/api/hours", headers=owner_headers).data)
        assert data["hours"]["friday"] == {"open": "10:00", "close": "18:30", "closed": False}
        assert data["is_default"] is False

    def test_close_before_open(self, client, approved_location, owner_headers):
        hours = {
            day: {"open": "09:00", "close": "17:00", "closed": False}
            for day in (
                "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
            )
        }
        hours["monday"]["close"] = "08:00"

        response = client.put("/api/hours", json={"hours": hours}, headers=owner_headers)
        assert response.status_code == 400
        assert json.loads(response.data)["field"] == "monday"


@pytest.mark.location
class TestUpgrade:
    def test_plans(self, client, approved_location, owner_headers):
        data = json.loads(client.get("/api/upgrade", headers=owner_headers).data)

        assert data["current_tier"] == 1
        assert len(data["plans"]) == 4

    def test_upgrade(self, client, db_session, approved_location, owner_headers):
        response = client.put("/api/upgrade", json={"tier": 3}, headers=owner_headers)
        data = json.loads(response.data)

        assert response.status_code == 200
        assert data["changed"] is True
        location = db_session.get(Location, approved_location.id)
        assert location.subscription_tier == 3
        assert location.subscription_status == "active"

    def test_downgrade_to_free(self, client, db_session, approved_location, owner_headers):
        client.put("/api/upgrade", json={"tier": 0}, headers=owner_headers)
        assert db_session.get(Location, approved_location.id).subscription_status == "free"

    def test_same_tier_is_noop(self, client, approved_location, owner_headers):
        data = json.loads(
            client.put("/api/upgrade", json={"tier": 1}, headers=owner_headers).data
        )
        assert data["changed"] is False

    @pytest.mark.parametrize("tier", [4, -1, "2", None, True])
    def test_invalid_tier(self, client, approved_location, owner_headers, tier):
        response = client.put("/api/upgrade", json={"tier": tier}, headers=owner_headers)
        assert response.status_code == 400

    def test_only_owner_manages_plan(
        self, client, db_session, make_account, auth_headers, approved_location
    ):
        manager = make_account(email="manager@example.com")
        db_session.add(
            StaffMembership(
                location_id=approved_location.id,
                user_id=manager.id,
                role="admin",
                can_add_staff=True,
            )
        )
        db_session.commit()

        response = client.put("/api/upgrade", json={"tier": 3}, headers=auth_headers(manager))
        assert response.status_code == 403

    def test_slots_count_recurring_events_only(
        self, client, db_session, approved_location, owner_headers
    ):
        db_session.add_all(
            [
                RecurringEvent(
                    location_id=approved_location.id,
                    name=f"Trade Night {n}",
                    category="trade",
                    recurrence_day="Friday",
                    start_time=time(18, 0),
                    end_time=time(21, 0),
                    is_recurring=n < 2,
                )
                for n in range(3)
            ]
        )
        db_session.commit()

        data = json.loads(
            client.put("/api/upgrade", json={"tier": 3}, headers=owner_headers).data
        )
        events = json.loads(client.get("/api/events", headers=owner_headers).data)

        assert data["slots"]["active"] == 2
        assert data["slots"] == events["slots"]
