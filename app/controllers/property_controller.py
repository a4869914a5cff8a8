"""
Property Controller - listing endpoints (public search, agent management, advertising)
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from app.schemas.property import (
    PropertyResponse,
    PropertyCreateRequest,
    PropertyUpdateRequest,
    PaginatedPropertiesResponse,
    PropertyAdvertiseResponse,
)
from app.schemas.sale import SaleRecordResponse
from app.services.property_service import (
    create_property,
    search_properties,
    get_property_by_id,
    get_properties_by_agent_email,
    get_advertised_properties,
    update_property,
    delete_property,
    set_advertised,
)
from app.services.settlement_service import get_sale_records_by_agent
from app.services.user_service import resolve_role
from app.models.user import ROLE_ADMIN
from app.utils.dependencies import get_current_user_email, get_path_matched_email

router = APIRouter(prefix="/properties", tags=["Properties"])

# Routes kept at their historical top-level paths
listing_router = APIRouter(tags=["Properties"])


@router.get("", response_model=PaginatedPropertiesResponse)
async def list_properties(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(16, ge=1, le=100),
):
    """Public search: verified and sold listings only"""
    props, total = await search_properties(search=search, page=page, page_size=page_size)
    return PaginatedPropertiesResponse(
        items=[PropertyResponse(**prop) for prop in props],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property_endpoint(
    request: PropertyCreateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Create a new listing owned by the caller. Rejected for agents flagged as fraudulent."""
    prop = await create_property(
        owner_email=current_email,
        property_data=request.model_dump(exclude_unset=True),
    )
    return PropertyResponse(**prop)


@router.get("/agent/{email}", response_model=List[PropertyResponse])
async def get_agent_properties(caller_email: str = Depends(get_path_matched_email)):
    """All listings of the calling agent, any status"""
    props = await get_properties_by_agent_email(caller_email)
    return [PropertyResponse(**prop) for prop in props]


@router.patch("/advertise/{property_id}", response_model=PropertyAdvertiseResponse)
async def advertise_own_property(
    property_id: str,
    current_email: str = Depends(get_current_user_email)
):
    """Owner marks a listing as advertised"""
    result = await set_advertised(property_id, owner_email=current_email)
    return PropertyAdvertiseResponse(**result)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(property_id: str):
    """Get specific listing by ID"""
    prop = await get_property_by_id(property_id)
    return PropertyResponse(**prop)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property_endpoint(
    property_id: str,
    request: PropertyUpdateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Update listing details (owner only)"""
    updated_prop = await update_property(
        property_id=property_id,
        owner_email=current_email,
        update_data=request.model_dump(exclude_unset=True),
    )
    return PropertyResponse(**updated_prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property_endpoint(
    property_id: str,
    current_email: str = Depends(get_current_user_email)
):
    """Delete a listing (owner or admin)"""
    is_admin = (await resolve_role(current_email)) == ROLE_ADMIN
    await delete_property(property_id, current_email, is_admin=is_admin)


@listing_router.get("/advertised", response_model=List[PropertyResponse])
async def list_advertised_properties():
    """Advertised listings visible to the public"""
    props = await get_advertised_properties()
    return [PropertyResponse(**prop) for prop in props]


@listing_router.get("/sold-properties/agent/{email}", response_model=List[SaleRecordResponse])
async def get_agent_sold_properties(caller_email: str = Depends(get_path_matched_email)):
    """Sale records for the calling agent"""
    sales = await get_sale_records_by_agent(caller_email)
    return [SaleRecordResponse(**sale) for sale in sales]
