# fitai/models/audit.py
from datetime import datetime

from fitai import db


class FoodAuditLog(db.Model):
    """
    Registro append-only de correcciones/calibraciones.
    food_id es una referencia informativa (NULL en entradas de lote).
    """
    __tablename__ = "food_audit_log"

    id         = db.Column(db.Integer, primary_key=True)
    food_id    = db.Column(db.Integer, index=True, nullable=True)
    action     = db.Column(db.String(64), nullable=False)
    details    = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @classmethod
    def record(cls, food_id, action: str, details: dict) -> "FoodAuditLog":
        """Añade la entrada a la sesión (el commit lo hace quien llama)."""
        entry = cls(food_id=food_id, action=action, details=details or {})
        db.session.add(entry)
        return entry

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "food_id": self.food_id,
            "action": self.action,
            "details": self.details,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<FoodAuditLog {self.id} food={self.food_id} {self.action}>"
