from fastapi import APIRouter, Depends
from typing import List, Optional
from app.schemas.property import PropertyResponse, PropertyStatusUpdateResponse, PropertyAdvertiseResponse
from app.schemas.moderation import ReportedPropertyCascadeResponse
from app.schemas.report import ReportResponse
from app.models.property import STATUS_VERIFIED
from app.services.property_service import (
    get_all_properties,
    verify_property,
    reject_property,
    set_advertised,
)
from app.services.moderation_service import remove_reported_property
from app.services.report_service import get_all_reports
from app.utils.dependencies import get_current_admin_email

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/properties", response_model=List[PropertyResponse])
async def get_all_properties_endpoint(
    status: Optional[str] = None,
    admin_email: str = Depends(get_current_admin_email)
):
    """Get all listings regardless of status (Admin only)"""
    props = await get_all_properties(status=status)
    return [PropertyResponse(**prop) for prop in props]


@router.patch("/properties/verify/{property_id}", response_model=PropertyStatusUpdateResponse)
async def verify_property_endpoint(
    property_id: str,
    admin_email: str = Depends(get_current_admin_email)
):
    """pending -> verified (Admin only)"""
    result = await verify_property(property_id)
    return PropertyStatusUpdateResponse(**result)


@router.patch("/properties/reject/{property_id}", response_model=PropertyStatusUpdateResponse)
async def reject_property_endpoint(
    property_id: str,
    admin_email: str = Depends(get_current_admin_email)
):
    """pending -> rejected (Admin only)"""
    result = await reject_property(property_id)
    return PropertyStatusUpdateResponse(**result)


@router.get("/advertise", response_model=List[PropertyResponse])
async def get_advertise_candidates(admin_email: str = Depends(get_current_admin_email)):
    """Verified listings that can be advertised (Admin only)"""
    props = await get_all_properties(status=STATUS_VERIFIED)
    return [PropertyResponse(**prop) for prop in props]


@router.patch("/advertise/{property_id}", response_model=PropertyAdvertiseResponse)
async def advertise_property(
    property_id: str,
    admin_email: str = Depends(get_current_admin_email)
):
    """Mark a listing as advertised (Admin only)"""
    result = await set_advertised(property_id)
    return PropertyAdvertiseResponse(**result)


@router.get("/reports", response_model=List[ReportResponse])
async def list_reports(admin_email: str = Depends(get_current_admin_email)):
    """Get all property reports (Admin only)"""
    reports = await get_all_reports()
    return [ReportResponse(**r) for r in reports]


@router.delete("/reported-property/{property_id}", response_model=ReportedPropertyCascadeResponse)
async def delete_reported_property(
    property_id: str,
    admin_email: str = Depends(get_current_admin_email)
):
    """Delete a reported listing together with its reviews and reports (Admin only)"""
    result = await remove_reported_property(property_id)
    return ReportedPropertyCascadeResponse(**result)
