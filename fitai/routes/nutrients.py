# fitai/routes/nutrients.py

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from fitai import db
from fitai.services.datahub import refresh_datahub
from fitai.services.nutrient_fill import run_nutrient_fill
from fitai.utils.openai_api import estimate_nutrient, make_client
from fitai.utils.params import parse_limit

nutrients_bp = Blueprint("nutrients", __name__, url_prefix="/api")


def _estimator():
    """Estimador LLM sólo si hay clave de OpenAI configurada."""
    cfg = current_app.config
    if not cfg.get("OPENAI_API_KEY"):
        return None
    client = make_client(cfg["OPENAI_API_KEY"])
    model = cfg["OPENAI_MODEL"]
    return lambda name, field: estimate_nutrient(client, name, field, model=model)


@nutrients_bp.post("/datahub-refresh")
def datahub_refresh():
    try:
        result = refresh_datahub()
    except SQLAlchemyError as e:
        current_app.logger.error(f"[datahub] {e!r}")
        db.session.rollback()
        return jsonify(error="Data hub refresh failed"), 500
    return jsonify(result), 200


@nutrients_bp.post("/nutrient-fill")
def nutrient_fill():
    """
    Rellena campos vacíos: media regional -> data hub -> estimación LLM.
    Body opcional: {"limit": N}  -> {success, filled, logs}
    """
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    try:
        result = run_nutrient_fill(
            limit=parse_limit(data.get("limit"), 10),
            estimator=_estimator(),
            step=cfg["NORMALIZE_ACCURACY_STEP"],
            ceiling=cfg["NUTRIENT_FILL_ACCURACY_CEILING"],
        )
    except SQLAlchemyError as e:
        current_app.logger.error(f"[fill] {e!r}")
        db.session.rollback()
        return jsonify(error="Nutrient fill failed"), 500
    return jsonify(result), 200
