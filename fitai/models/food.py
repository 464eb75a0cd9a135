# fitai/models/food.py
from datetime import datetime

from sqlalchemy.orm import validates

from fitai import db
from fitai.services.nutrients import NUTRIENT_FIELDS, MACRO_FIELDS, is_missing


class Food(db.Model):
    __tablename__ = "foods"

    id         = db.Column(db.Integer, primary_key=True)
    name_en    = db.Column(db.String(200), unique=True, nullable=False)
    name_local = db.Column(db.String(200), nullable=True)
    category   = db.Column(db.String(32), nullable=True)
    region     = db.Column(db.String(32), nullable=True)
    is_global  = db.Column(db.Boolean, nullable=False, default=False)
    source     = db.Column(db.String(64), nullable=True)
    image_url  = db.Column(db.String(500), nullable=True)

    # Macros por 100 g
    kcal    = db.Column(db.Float, nullable=True)
    protein = db.Column(db.Float, nullable=True)
    carbs   = db.Column(db.Float, nullable=True)
    fat     = db.Column(db.Float, nullable=True)

    # Resto de nutrientes por 100 g (unidades en services/nutrients.py)
    fiber       = db.Column(db.Float, nullable=True)
    sugar       = db.Column(db.Float, nullable=True)
    sodium      = db.Column(db.Float, nullable=True)
    vitamin_a   = db.Column(db.Float, nullable=True)
    vitamin_c   = db.Column(db.Float, nullable=True)
    vitamin_d   = db.Column(db.Float, nullable=True)
    vitamin_e   = db.Column(db.Float, nullable=True)
    vitamin_k   = db.Column(db.Float, nullable=True)
    vitamin_b6  = db.Column(db.Float, nullable=True)
    vitamin_b12 = db.Column(db.Float, nullable=True)
    calcium     = db.Column(db.Float, nullable=True)
    iron        = db.Column(db.Float, nullable=True)
    magnesium   = db.Column(db.Float, nullable=True)
    phosphorus  = db.Column(db.Float, nullable=True)
    potassium   = db.Column(db.Float, nullable=True)
    zinc        = db.Column(db.Float, nullable=True)
    copper      = db.Column(db.Float, nullable=True)
    manganese   = db.Column(db.Float, nullable=True)
    selenium    = db.Column(db.Float, nullable=True)
    iodine      = db.Column(db.Float, nullable=True)
    cholesterol = db.Column(db.Float, nullable=True)
    water       = db.Column(db.Float, nullable=True)

    accuracy_score = db.Column(db.Float, nullable=False, default=0.0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # ---- Invariantes ----
    @validates("accuracy_score")
    def _clamp_accuracy(self, key, value):
        if value is None:
            return 0.0
        return max(0.0, min(1.0, float(value)))

    @validates(*NUTRIENT_FIELDS)
    def _non_negative(self, key, value):
        # Negativos no tienen sentido físico: se guardan como "sin dato"
        if value is None:
            return None
        value = float(value)
        return None if value < 0 else value

    # ---- Helpers ----
    @property
    def display_name(self) -> str:
        return self.name_en or self.name_local or ""

    def nutrient_values(self, fields=NUTRIENT_FIELDS) -> dict:
        return {f: getattr(self, f) for f in fields}

    def missing_fields(self) -> list:
        return [f for f in NUTRIENT_FIELDS if is_missing(getattr(self, f))]

    def to_dict(self, full: bool = False) -> dict:
        fields = NUTRIENT_FIELDS if full else MACRO_FIELDS
        return {
            "id": self.id,
            "name_en": self.name_en,
            "name_local": self.name_local,
            "category": self.category,
            "source": self.source,
            "accuracy_score": self.accuracy_score,
            **{f: getattr(self, f) for f in fields},
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Food {self.id} {self.name_en}>"
