# fitai/routes/analyze.py

import base64

from flask import Blueprint, current_app, jsonify, request

from fitai.errors import ExternalServiceError, ValidationError
from fitai.services.plate import analyze_plate
from fitai.services.scene import detect_scene_type
from fitai.utils.nutritionix_api import natural_nutrients
from fitai.utils.openai_api import classify_scene, identify_ingredients, make_client

analyze_bp = Blueprint("analyze", __name__, url_prefix="/api")


def _image_from_request() -> str:
    """Imagen en base64: multipart 'image' o JSON {imageBase64}."""
    upload = request.files.get("image")
    if upload is not None:
        raw = upload.read()
        if not raw:
            raise ValidationError("Empty image")
        return base64.b64encode(raw).decode("ascii")
    data = request.get_json(silent=True) or {}
    image = data.get("imageBase64") or data.get("image")
    if not image:
        raise ValidationError("No image provided")
    return image


def _openai_client():
    cfg = current_app.config
    if not cfg.get("OPENAI_API_KEY"):
        raise ExternalServiceError("OpenAI API key not configured")
    return make_client(cfg["OPENAI_API_KEY"])


# -----------------------------------------------------------------------------#
# Plato
# -----------------------------------------------------------------------------#
@analyze_bp.post("/analyze-plate")
def analyze_plate_view():
    image = _image_from_request()
    cfg = current_app.config

    ingredients = identify_ingredients(_openai_client(), image, model=cfg["OPENAI_MODEL"])
    current_app.logger.info(f"[plate] ingredientes detectados: {ingredients}")

    def lookup(name):
        return natural_nutrients(
            name,
            app_id=cfg["NUTRITIONIX_APP_ID"],
            api_key=cfg["NUTRITIONIX_API_KEY"],
            timeout=cfg["EXTERNAL_TIMEOUT"],
        )

    return jsonify(analyze_plate(ingredients, lookup)), 200


# -----------------------------------------------------------------------------#
# Tipo de escena (plato vs producto)
# -----------------------------------------------------------------------------#
@analyze_bp.post("/detect-scene-type")
def detect_scene_type_view():
    data = request.get_json(silent=True) or {}
    image = data.get("image")
    if not image:
        raise ValidationError("No image provided")

    cfg = current_app.config
    if not cfg.get("OPENAI_API_KEY"):
        # sin clasificador disponible vale el mismo fallback que un timeout
        return jsonify({"success": True, "type": "meal"}), 200
    client = make_client(cfg["OPENAI_API_KEY"], timeout=cfg["SCENE_DETECT_TIMEOUT"])
    model = cfg["OPENAI_MODEL"]

    scene = detect_scene_type(
        lambda: classify_scene(client, image, model=model),
        timeout=cfg["SCENE_DETECT_TIMEOUT"],
    )
    return jsonify({"success": True, "type": scene}), 200
