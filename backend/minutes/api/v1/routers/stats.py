# minutes/api/v1/routers/stats.py
from fastapi import APIRouter, Depends

from minutes.api.v1.deps import get_current_user
from minutes.models import Analysis, Meeting, ProcessingStatus
from minutes.models.user import User

router = APIRouter(prefix="/stats", tags=["stats"])

@router.get("", response_model=dict)
async def dashboard_stats(user: User = Depends(get_current_user)):
    """
    Dashboard numbers over the user's COMPLETED meetings (count, hours to one
    decimal, action items) plus the five most recent meetings of any status.
    """
    completed = Meeting.filter(user_id=user.id, status=ProcessingStatus.COMPLETED)
    total_meetings = await completed.count()

    durations = await completed.values_list("duration", flat=True)
    total_seconds = sum(d for d in durations if d)
    total_hours = round(total_seconds / 3600, 1)

    action_lists = await Analysis.filter(
        meeting__user_id=user.id, meeting__status=ProcessingStatus.COMPLETED
    ).values_list("action_items", flat=True)
    total_action_items = sum(len(items) for items in action_lists if isinstance(items, list))

    recent = await Meeting.filter(user_id=user.id).order_by("-created_at").limit(5)
    return {
        "success": True,
        "data": {
            "stats": {
                "totalMeetings": total_meetings,
                "totalHours": total_hours,
                "totalActionItems": total_action_items,
            },
            "recentMeetings": [
                {
                    "id": str(m.id),
                    "title": m.title,
                    "status": m.status.value,
                    "duration": m.duration,
                    "uploadedAt": m.uploaded_at.isoformat() if m.uploaded_at else None,
                }
                for m in recent
            ],
        },
    }
