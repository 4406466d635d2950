"""Tests for checkout session creation."""

import pytest

from giftpage.core.errors import InvalidInput, NotFound, UpstreamFailure


class TestValidation:

    def test_below_minimum_amount_rejected(self, checkout_service, gateway):
        with pytest.raises(InvalidInput) as exc:
            checkout_service.create_session("child-abc", 199, "Alice", "a@example.com")

        assert "2.00 CAD" in exc.value.message
        assert gateway.sessions == []

    def test_minimum_amount_accepted(self, checkout_service):
        session = checkout_service.create_session("child-abc", 200, "Alice", "a@example.com")

        assert session["id"] == "sess_1"

    @pytest.mark.parametrize("args", [
        ("", 500, "Alice", "a@example.com"),
        ("child-abc", None, "Alice", "a@example.com"),
        ("child-abc", 500, "", "a@example.com"),
        ("child-abc", 500, "Alice", None),
    ])
    def test_missing_fields_rejected(self, checkout_service, args):
        with pytest.raises(InvalidInput):
            checkout_service.create_session(*args)

    def test_non_integer_amount_rejected(self, checkout_service):
        with pytest.raises(InvalidInput):
            checkout_service.create_session("child-abc", 250.5, "Alice", "a@example.com")


class TestResolution:

    def test_unknown_slug_not_found(self, checkout_service, gateway):
        with pytest.raises(NotFound):
            checkout_service.create_session("nonexistent-slug", 500, "Alice", "a@example.com")

        assert gateway.sessions == []

    def test_missing_gift_page_not_found(self, checkout_service, store):
        store.put("slugIndex", "orphan", {"beneficiary_id": "orphan-id"})
        store.put("beneficiaries", "orphan-id", {"first_name": "Olly"})

        with pytest.raises(NotFound):
            checkout_service.create_session("orphan", 500, "Alice", "a@example.com")

    def test_missing_beneficiary_not_found(self, checkout_service, store):
        store.put("slugIndex", "ghost", {"beneficiary_id": "ghost-id"})
        store.put("giftPages", "ghost-id", {"is_public": True})

        with pytest.raises(NotFound):
            checkout_service.create_session("ghost", 500, "Alice", "a@example.com")


class TestSessionContents:

    def test_metadata_carries_gift_identity(self, checkout_service, gateway):
        checkout_service.create_session("child-abc", 1000, "Bob", "bob@example.com", "Happy savings!")

        sent = gateway.sessions[0]
        assert sent["metadata"] == {
            "beneficiaryId": "child-abc-id",
            "slug": "child-abc",
            "contributorName": "Bob",
            "contributorEmail": "bob@example.com",
            "message": "Happy savings!",
        }
        price = sent["line_item"]["price_data"]
        assert price["unit_amount"] == 1000
        assert price["currency"] == "cad"
        assert price["product_data"]["name"] == "RESP Gift for Abby"
        assert price["product_data"]["description"] == "Happy savings!"
        assert sent["success_url"] == "https://gifts.example.com/thanks?session_id={CHECKOUT_SESSION_ID}"
        assert sent["cancel_url"] == "https://gifts.example.com/for/child-abc"

    def test_default_description_without_message(self, checkout_service, gateway):
        checkout_service.create_session("child-abc", 1000, "Bob", "bob@example.com")

        sent = gateway.sessions[0]
        assert sent["metadata"]["message"] == ""
        assert sent["line_item"]["price_data"]["product_data"]["description"] == "A gift towards Abby's education"

    def test_processor_failure_surfaces_without_writes(self, checkout_service, gateway, store):
        gateway.error = UpstreamFailure("Payment processor request failed")
        before = {name: dict(records) for name, records in store.collections.items()}

        with pytest.raises(UpstreamFailure):
            checkout_service.create_session("child-abc", 1000, "Bob", "bob@example.com")

        assert store.collections == before
