"""
Test Case Suite: Offer Management Module
Test ID Range: TC-201 to TC-215

This test suite validates offer submission and its eligibility checks,
the one-live-offer-per-buyer rule and agent accept/reject decisions.
"""

import pytest
import uuid
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from app.models.offer import Offer
from tests.conftest import auth_headers, create_listing, create_offer_row


class TestOfferSubmission:
    """
    Test Case TC-201: Buyer Submits Offer
    Description: A buyer makes an offer on a verified listing
    Expected Result: Returns 200 with a pending offer carrying the listing snapshot
    """
    @pytest.mark.asyncio
    async def test_tc201_submit_offer(self, marketplace):
        """TC-201: Submit offer"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]

        response = await client.post(
            "/offers",
            json={
                "propertyId": marketplace["property_id"],
                "buyerEmail": buyer,
                "buyerName": "Buyer A",
                "offeredAmount": 300000,
            },
            headers=auth_headers(buyer),
        )
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "pending"
        assert data["buyer_email"] == buyer
        assert data["agent_email"] == marketplace["agent_email"]
        assert data["property_title"] == "Lakeview Villa"
        assert data["transaction_id"] is None
        assert float(data["offered_amount"]) == 300000

    """
    Test Case TC-202: Offer for Someone Else
    Description: The buyer email in the body must match the authenticated caller
    Expected Result: Returns 403
    """
    @pytest.mark.asyncio
    async def test_tc202_offer_identity_mismatch(self, marketplace):
        """TC-202: Offer identity mismatch"""
        client = marketplace["client"]

        response = await client.post(
            "/offers",
            json={
                "property_id": marketplace["property_id"],
                "buyer_email": marketplace["buyer_a"],
                "offered_amount": 300000,
            },
            headers=auth_headers(marketplace["buyer_b"]),
        )
        assert response.status_code == 403

    """
    Test Case TC-203: Offer on Malformed or Unknown Listing
    Description: Malformed id is checked before existence
    Expected Result: 400 for malformed id, 404 for unknown id
    """
    @pytest.mark.asyncio
    async def test_tc203_offer_bad_listing(self, marketplace):
        """TC-203: Offer bad listing"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]
        headers = auth_headers(buyer)

        malformed = await client.post(
            "/offers",
            json={"property_id": "12345", "buyer_email": buyer, "offered_amount": 1000},
            headers=headers,
        )
        assert malformed.status_code == 400

        missing = await client.post(
            "/offers",
            json={"property_id": str(uuid.uuid4()), "buyer_email": buyer, "offered_amount": 1000},
            headers=headers,
        )
        assert missing.status_code == 404

    """
    Test Case TC-204: Offer on Sold Listing
    Description: Sold listings no longer accept offers
    Expected Result: Returns 409 with reason AlreadySold
    """
    @pytest.mark.asyncio
    async def test_tc204_offer_on_sold_listing(self, marketplace, db_session):
        """TC-204: Offer on sold listing"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]
        sold_id = await create_listing(db_session, marketplace["agent_email"], status="sold")

        response = await client.post(
            "/offers",
            json={"property_id": sold_id, "buyer_email": buyer, "offered_amount": 1000},
            headers=auth_headers(buyer),
        )
        assert response.status_code == 409
        assert response.json()["reason"] == "AlreadySold"

    """
    Test Case TC-205: Non-Positive Amount
    Description: The offered amount must be greater than zero
    Expected Result: Returns 400 invalid_input
    """
    @pytest.mark.asyncio
    async def test_tc205_non_positive_amount(self, marketplace):
        """TC-205: Non-positive amount"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]

        response = await client.post(
            "/offers",
            json={"property_id": marketplace["property_id"], "buyer_email": buyer, "offered_amount": 0},
            headers=auth_headers(buyer),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestOneLiveOfferPerBuyer:
    """
    Test Case TC-206: Duplicate Live Offer
    Description: A second offer by the same buyer on the same listing while the first is pending
    Expected Result: Returns 409 with reason DuplicateOffer and only one offer stored
    """
    @pytest.mark.asyncio
    async def test_tc206_duplicate_offer(self, marketplace, db_session):
        """TC-206: Duplicate offer"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]
        body = {"property_id": marketplace["property_id"], "buyer_email": buyer, "offered_amount": 300000}

        first = await client.post("/offers", json=body, headers=auth_headers(buyer))
        assert first.status_code == 200

        second = await client.post("/offers", json={**body, "offered_amount": 310000}, headers=auth_headers(buyer))
        assert second.status_code == 409
        assert second.json()["reason"] == "DuplicateOffer"

        count = await db_session.execute(select(func.count()).select_from(Offer))
        assert count.scalar_one() == 1

    """
    Test Case TC-207: New Offer After Rejection
    Description: Once the previous offer is rejected the buyer may offer again
    Expected Result: Returns 200
    """
    @pytest.mark.asyncio
    async def test_tc207_offer_after_rejection(self, marketplace, db_session):
        """TC-207: Offer after rejection"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]
        await create_offer_row(
            db_session, marketplace["property_id"], buyer, marketplace["agent_email"], status="rejected"
        )

        response = await client.post(
            "/offers",
            json={"property_id": marketplace["property_id"], "buyer_email": buyer, "offered_amount": 320000},
            headers=auth_headers(buyer),
        )
        assert response.status_code == 200

    """
    Test Case TC-208: Datastore Refuses a Second Live Offer
    Description: The partial unique index holds even when the application check is bypassed
    Expected Result: Direct insert of a second pending offer raises IntegrityError
    """
    @pytest.mark.asyncio
    async def test_tc208_constraint_blocks_duplicate(self, marketplace, db_session):
        """TC-208: Constraint blocks duplicate"""
        property_id = marketplace["property_id"]
        buyer = marketplace["buyer_a"]
        agent = marketplace["agent_email"]
        await create_offer_row(db_session, property_id, buyer, agent, status="accepted")

        with pytest.raises(IntegrityError):
            await create_offer_row(db_session, property_id, buyer, agent, status="pending")
        await db_session.rollback()

        # Rejected offers are outside the index
        await create_offer_row(db_session, property_id, buyer, agent, status="rejected")

    """
    Test Case TC-209: Different Buyers May Both Offer
    Description: The uniqueness rule is per (listing, buyer)
    Expected Result: Both offers are accepted as pending
    """
    @pytest.mark.asyncio
    async def test_tc209_different_buyers(self, marketplace):
        """TC-209: Different buyers"""
        client = marketplace["client"]

        for buyer in (marketplace["buyer_a"], marketplace["buyer_b"]):
            response = await client.post(
                "/offers",
                json={"property_id": marketplace["property_id"], "buyer_email": buyer, "amount": 280000},
                headers=auth_headers(buyer),
            )
            assert response.status_code == 200


class TestOfferDecisions:
    """
    Test Case TC-210: Agent Accepts Offer
    Description: The listing's agent accepts a pending offer
    Expected Result: modified true, status accepted
    """
    @pytest.mark.asyncio
    async def test_tc210_agent_accepts(self, marketplace, db_session):
        """TC-210: Agent accepts"""
        client = marketplace["client"]
        offer_id = await create_offer_row(
            db_session, marketplace["property_id"], marketplace["buyer_a"], marketplace["agent_email"]
        )

        response = await client.put(f"/offers/accept/{offer_id}", headers=auth_headers(marketplace["agent_email"]))
        assert response.status_code == 200
        assert response.json() == {"id": offer_id, "status": "accepted", "modified": True}

    """
    Test Case TC-211: Decision Replay Is a No-op
    Description: A terminal offer is left untouched by further decisions
    Expected Result: modified false and the original status kept
    """
    @pytest.mark.asyncio
    async def test_tc211_decision_replay(self, marketplace, db_session):
        """TC-211: Decision replay"""
        client = marketplace["client"]
        headers = auth_headers(marketplace["agent_email"])
        offer_id = await create_offer_row(
            db_session, marketplace["property_id"], marketplace["buyer_a"], marketplace["agent_email"]
        )

        first = await client.put(f"/offers/reject/{offer_id}", headers=headers)
        assert first.json()["modified"] is True

        again = await client.patch(f"/offers/status/{offer_id}", json={"status": "accepted"}, headers=headers)
        assert again.status_code == 200
        assert again.json() == {"id": offer_id, "status": "rejected", "modified": False}

    """
    Test Case TC-212: Buyer Cannot Decide
    Description: Only the agent who owns the listing may accept or reject
    Expected Result: Returns 403
    """
    @pytest.mark.asyncio
    async def test_tc212_buyer_cannot_decide(self, marketplace, db_session):
        """TC-212: Buyer cannot decide"""
        client = marketplace["client"]
        offer_id = await create_offer_row(
            db_session, marketplace["property_id"], marketplace["buyer_a"], marketplace["agent_email"]
        )

        response = await client.patch(
            f"/offers/{offer_id}",
            json={"status": "accepted"},
            headers=auth_headers(marketplace["buyer_a"]),
        )
        assert response.status_code == 403

    """
    Test Case TC-213: Unsupported Status Value
    Description: The status body accepts only accepted or rejected
    Expected Result: Returns 400 invalid_input
    """
    @pytest.mark.asyncio
    async def test_tc213_unsupported_status(self, marketplace, db_session):
        """TC-213: Unsupported status"""
        client = marketplace["client"]
        offer_id = await create_offer_row(
            db_session, marketplace["property_id"], marketplace["buyer_a"], marketplace["agent_email"]
        )

        response = await client.patch(
            f"/offers/status/{offer_id}",
            json={"status": "pending"},
            headers=auth_headers(marketplace["agent_email"]),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestOfferQueries:
    """
    Test Case TC-214: Buyer, Agent and Single Offer Views
    Description: Each party sees its own offers; a stranger cannot read a single offer
    Expected Result: Correct lists for buyer and agent; 403 for stranger
    """
    @pytest.mark.asyncio
    async def test_tc214_offer_views(self, marketplace, db_session):
        """TC-214: Offer views"""
        client = marketplace["client"]
        agent = marketplace["agent_email"]
        property_id = marketplace["property_id"]
        offer_a = await create_offer_row(db_session, property_id, marketplace["buyer_a"], agent)
        await create_offer_row(db_session, property_id, marketplace["buyer_b"], agent)

        buyer_view = await client.get(f"/offers/{marketplace['buyer_a']}", headers=auth_headers(marketplace["buyer_a"]))
        assert [o["id"] for o in buyer_view.json()] == [offer_a]

        agent_view = await client.get(f"/offers/agent/{agent}", headers=auth_headers(agent))
        assert len(agent_view.json()) == 2

        single = await client.get(f"/offers/single/{offer_a}", headers=auth_headers(agent))
        assert single.status_code == 200

        stranger = await client.get(f"/offers/single/{offer_a}", headers=auth_headers(marketplace["buyer_b"]))
        assert stranger.status_code == 403


class TestOfferInputValidation:
    """
    Test Case TC-215: Missing or Mistyped Listing Id
    Description: A body without propertyId, with an empty one or with a non-string one is invalid input
    Expected Result: Returns 400 invalid_input naming the field, and no offer is stored
    """
    @pytest.mark.asyncio
    async def test_tc215_missing_or_mistyped_property_id(self, marketplace, db_session):
        """TC-215: Missing or mistyped listing id"""
        client = marketplace["client"]
        buyer = marketplace["buyer_a"]
        headers = auth_headers(buyer)

        for body in [
            {"buyerEmail": buyer, "offeredAmount": 1},
            {"propertyId": "", "buyerEmail": buyer, "offeredAmount": 1},
            {"propertyId": 12345, "buyerEmail": buyer, "offeredAmount": 1},
        ]:
            response = await client.post("/offers", json=body, headers=headers)
            assert response.status_code == 400, body
            data = response.json()
            assert data["code"] == "invalid_input"
            assert "propertyId" in data["detail"]

        count = await db_session.execute(select(func.count()).select_from(Offer))
        assert count.scalar_one() == 0
