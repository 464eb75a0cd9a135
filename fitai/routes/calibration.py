# fitai/routes/calibration.py

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from fitai import db
from fitai.services.calibration import run_calibration, run_scientific_batch
from fitai.services.normalization import run_normalization
from fitai.services.verification import verify_accuracy
from fitai.utils.params import parse_float, parse_limit

calibration_bp = Blueprint("calibration", __name__, url_prefix="/api")


def _storage_failure(label: str, err: Exception):
    """Fallo de base de datos: 500 genérico, detalle sólo en el log."""
    current_app.logger.error(f"[{label}] error de almacenamiento: {err!r}")
    db.session.rollback()
    return jsonify(error=f"{label} failed"), 500


# -----------------------------------------------------------------------------#
# Calibración científica
# -----------------------------------------------------------------------------#
@calibration_bp.post("/scientific-calibrate")
def scientific_calibrate():
    """
    Body opcional: {"limit": N}
    -> {totalFoods, calibrated, outliers, averageAccuracy, date}
    """
    data = request.get_json(silent=True) or {}
    limit = parse_limit(data.get("limit"))
    try:
        summary = run_calibration(
            limit=limit,
            threshold=current_app.config["CALIBRATION_OUTLIER_THRESHOLD"],
        )
    except SQLAlchemyError as e:
        return _storage_failure("Scientific calibration", e)
    return jsonify(summary.to_dict()), 200


@calibration_bp.post("/normalize-units")
def normalize_units():
    data = request.get_json(silent=True) or {}
    try:
        result = run_normalization(
            limit=parse_limit(data.get("limit"), 10),
            step=current_app.config["NORMALIZE_ACCURACY_STEP"],
            ceiling=current_app.config["NORMALIZE_ACCURACY_CEILING"],
        )
    except SQLAlchemyError as e:
        return _storage_failure("Unit normalization", e)
    return jsonify(result), 200


@calibration_bp.post("/scientific-run")
def scientific_run():
    """Normalización + calibración + entrada de lote en la auditoría."""
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    try:
        result = run_scientific_batch(
            limit=parse_limit(data.get("limit")),
            threshold=cfg["CALIBRATION_OUTLIER_THRESHOLD"],
            prev_accuracy=parse_float(data.get("prevAccuracy"), 0.0),
            step=cfg["NORMALIZE_ACCURACY_STEP"],
            ceiling=cfg["NORMALIZE_ACCURACY_CEILING"],
        )
    except SQLAlchemyError as e:
        return _storage_failure("Scientific run", e)
    return jsonify(result), 200


# -----------------------------------------------------------------------------#
# Verificación (sólo lectura)
# -----------------------------------------------------------------------------#
@calibration_bp.get("/verify-accuracy")
def verify():
    try:
        report = verify_accuracy()
    except SQLAlchemyError as e:
        return _storage_failure("Accuracy verification", e)
    return jsonify(report), 200
