from app.models.audit_log import AuditLog
from app.models.points_transaction import PointsTransaction
from app.models.recharge_card import RechargeCard
from app.models.student_points import StudentPoints

__all__ = [
    "AuditLog",
    "PointsTransaction",
    "RechargeCard",
    "StudentPoints",
]
