from typing import List, Dict, Optional
from sqlalchemy import select, desc
from app.database.connection import AsyncSessionLocal
from app.models.report import Report
from app.utils.validators import ensure_valid_id, new_id, normalize_email


def _report_to_dict(report: Report) -> Dict:
    return {
        "id": report.id,
        "property_id": report.property_id,
        "property_title": report.property_title,
        "reporter_email": report.reporter_email,
        "reason": report.reason,
        "created_at": report.created_at.isoformat() if report.created_at else "",
    }


async def create_report(
    property_id: str,
    reporter_email: str,
    reason: str,
    property_title: Optional[str] = None,
) -> Dict:
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        report = Report(
            id=new_id(),
            property_id=property_id,
            property_title=property_title,
            reporter_email=normalize_email(reporter_email),
            reason=reason,
        )
        session.add(report)
        await session.commit()
        await session.refresh(report)
        return _report_to_dict(report)


async def get_all_reports() -> List[Dict]:
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Report).order_by(desc(Report.created_at)))
        return [_report_to_dict(r) for r in result.scalars().all()]
