# Database models
from app.models.user import User
from app.models.property import Property
from app.models.offer import Offer
from app.models.sale_record import SaleRecord
from app.models.review import Review
from app.models.report import Report

__all__ = [
    "User",
    "Property",
    "Offer",
    "SaleRecord",
    "Review",
    "Report",
]
