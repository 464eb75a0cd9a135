# fitai/models/datahub.py
from datetime import datetime

from fitai import db


class NutrientAverage(db.Model):
    """Media global de cada nutriente sobre la tabla foods (el "data hub")."""
    __tablename__ = "nutrient_averages"

    id             = db.Column(db.Integer, primary_key=True)
    nutrient_key   = db.Column(db.String(32), unique=True, nullable=False)
    avg_value      = db.Column(db.Float, nullable=False)
    samples_count  = db.Column(db.Integer, nullable=False, default=0)
    accuracy_score = db.Column(db.Float, nullable=False, default=0.9)
    updated_at     = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<NutrientAverage {self.nutrient_key}={self.avg_value}>"
