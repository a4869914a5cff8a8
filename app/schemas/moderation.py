from pydantic import BaseModel


class FraudCascadeResponse(BaseModel):
    user_id: str
    email: str
    fraud_flag_set: bool
    properties_deleted: int


class ReportedPropertyCascadeResponse(BaseModel):
    property_id: str
    property_deleted: int
    reviews_deleted: int
    reports_deleted: int
