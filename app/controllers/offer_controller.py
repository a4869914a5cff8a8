"""
Offer Controller - offer submission, agent decisions and settlement
"""
from fastapi import APIRouter, Depends
from typing import List
from app.schemas.offer import (
    OfferCreateRequest,
    OfferResponse,
    OfferStatusUpdateRequest,
    OfferStatusUpdateResponse,
)
from app.schemas.sale import SettlementRequest, SettlementResponse
from app.services.offer_service import (
    submit_offer,
    get_offer_by_id,
    get_offers_by_buyer,
    get_offers_by_agent,
    set_offer_status,
    accept_offer,
    reject_offer,
)
from app.services.settlement_service import settle
from app.utils.dependencies import get_current_user_email, get_path_matched_email, ensure_identity_matches
from app.utils.errors import Forbidden

router = APIRouter(prefix="/offers", tags=["Offers"])


@router.post("", response_model=OfferResponse)
async def submit_offer_endpoint(
    request: OfferCreateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Submit an offer on a listing as the authenticated buyer"""
    ensure_identity_matches(current_email, request.buyer_email)

    offer = await submit_offer(
        property_id=request.property_id,
        buyer_email=request.buyer_email,
        offered_amount=request.offered_amount,
        buyer_name=request.buyer_name,
    )
    return OfferResponse(**offer)


@router.get("/agent/{email}", response_model=List[OfferResponse])
async def get_agent_offers(caller_email: str = Depends(get_path_matched_email)):
    """All offers received by the calling agent"""
    offers = await get_offers_by_agent(caller_email)
    return [OfferResponse(**o) for o in offers]


@router.get("/single/{offer_id}", response_model=OfferResponse)
async def get_single_offer(
    offer_id: str,
    current_email: str = Depends(get_current_user_email)
):
    """One offer, visible to its buyer or its agent"""
    offer = await get_offer_by_id(offer_id)
    if current_email not in (offer["buyer_email"], offer["agent_email"]):
        raise Forbidden()
    return OfferResponse(**offer)


@router.get("/{email}", response_model=List[OfferResponse])
async def get_buyer_offers(caller_email: str = Depends(get_path_matched_email)):
    """All offers made by the calling buyer"""
    offers = await get_offers_by_buyer(caller_email)
    return [OfferResponse(**o) for o in offers]


@router.patch("/status/{offer_id}", response_model=OfferStatusUpdateResponse)
async def patch_offer_status(
    offer_id: str,
    request: OfferStatusUpdateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Set offer status (agent only). No-op with modified=false once the offer is terminal."""
    result = await set_offer_status(offer_id, request.status, current_email)
    return OfferStatusUpdateResponse(**result)


@router.patch("/{offer_id}/pay", response_model=SettlementResponse)
async def pay_offer(
    offer_id: str,
    request: SettlementRequest,
    current_email: str = Depends(get_current_user_email)
):
    """
    Settle an offer: accept it with the transaction id, reject competing offers,
    record the sale and mark the listing sold. Safe to retry with the same transaction id.
    """
    result = await settle(offer_id, request.transaction_id, current_email)
    return SettlementResponse(**result)


@router.patch("/{offer_id}", response_model=OfferStatusUpdateResponse)
async def patch_offer(
    offer_id: str,
    request: OfferStatusUpdateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Alias of PATCH /offers/status/{offer_id}"""
    result = await set_offer_status(offer_id, request.status, current_email)
    return OfferStatusUpdateResponse(**result)


@router.put("/accept/{offer_id}", response_model=OfferStatusUpdateResponse)
async def accept_offer_endpoint(
    offer_id: str,
    current_email: str = Depends(get_current_user_email)
):
    """Accept a pending offer (agent only)"""
    result = await accept_offer(offer_id, current_email)
    return OfferStatusUpdateResponse(**result)


@router.put("/reject/{offer_id}", response_model=OfferStatusUpdateResponse)
async def reject_offer_endpoint(
    offer_id: str,
    current_email: str = Depends(get_current_user_email)
):
    """Reject a pending offer (agent only)"""
    result = await reject_offer(offer_id, current_email)
    return OfferStatusUpdateResponse(**result)
