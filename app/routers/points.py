from fastapi import APIRouter, Query, status

from app.core.exceptions import PointsError
from app.core.logging import get_logger
from app.services import points as points_service

log = get_logger(__name__)

router = APIRouter()

MSG_USER_ID_REQUIRED = "معرف المستخدم مطلوب"
MSG_UPDATED = "تم تحديث النقاط بنجاح: {points}"
MSG_UNEXPECTED = "حدث خطأ غير متوقع"


@router.get("/fix-points")
async def fix_points(
    user_id: str | None = Query(None, alias="userId"),
    value: str | None = Query(None),
    force: str | None = Query(None),
):
    """Recompute a student's points from override, transactions or recharge cards, and persist them."""
    if not user_id:
        raise PointsError("User ID is required", MSG_USER_ID_REQUIRED, status_code=status.HTTP_400_BAD_REQUEST)
    try:
        result = await points_service.reconcile_points(user_id, value=value, force=force == "true")
    except PointsError:
        raise
    except Exception as e:
        log.exception("fix_points_unexpected_error", user_id=user_id)
        raise PointsError(str(e) or e.__class__.__name__, MSG_UNEXPECTED) from e

    if result.already_set:
        return {
            "success": True,
            "message": f"Points already set: {result.total_points}",
            "totalPoints": result.total_points,
        }
    return {
        "success": True,
        "message": MSG_UPDATED.format(points=result.total_points),
        "totalPoints": result.total_points,
        "positivePoints": result.positive_points,
        "negativePoints": result.negative_points,
    }
