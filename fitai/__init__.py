# fitai/__init__.py

import os
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Carga variables de entorno (.env)
load_dotenv()

# Extensiones compartidas
db = SQLAlchemy()
migrate = Migrate()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return float(default)


def _default_db_uri(app: Flask) -> str:
    """SQLite en instance/fitai.db salvo que venga DATABASE_URL (p.ej. Postgres)."""
    uri = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL")
    if uri:
        # SQLAlchemy 2 ya no acepta el alias "postgres://"
        if uri.startswith("postgres://"):
            uri = uri.replace("postgres://", "postgresql://", 1)
        return uri
    return "sqlite:///" + os.path.join(app.instance_path, "fitai.db")


def _configure_logging(app: Flask) -> None:
    """Logging simple y consistente."""
    level = logging.DEBUG if app.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def create_app(test_config=None) -> Flask:
    """Factory principal de la aplicación."""
    app = Flask(__name__, instance_relative_config=True)

    # Asegura carpeta instance/
    os.makedirs(app.instance_path, exist_ok=True)

    # -----------------------------
    # Config base (todo sobreescribible por entorno)
    # -----------------------------
    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI=_default_db_uri(app),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JSON_SORT_KEYS=False,
        MAX_CONTENT_LENGTH=20 * 1024 * 1024,  # fotos de platos
        # APIs externas
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
        OPENAI_MODEL=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        NUTRITIONIX_APP_ID=os.getenv("NUTRITIONIX_APP_ID", ""),
        NUTRITIONIX_API_KEY=os.getenv("NUTRITIONIX_API_KEY", ""),
        USDA_API_KEY=os.getenv("USDA_API_KEY", "DEMO_KEY"),
        OFF_ENABLED=os.getenv("FOODS_SEARCH_USE_OFF", "1") not in ("0", "false", "False"),
        EXTERNAL_TIMEOUT=_env_float("EXTERNAL_TIMEOUT", 5),
        SCENE_DETECT_TIMEOUT=_env_float("SCENE_DETECT_TIMEOUT", 4),
        # Calibración / normalización
        CALIBRATION_OUTLIER_THRESHOLD=_env_float("CALIBRATION_OUTLIER_THRESHOLD", 0.8),
        NORMALIZE_ACCURACY_STEP=_env_float("NORMALIZE_ACCURACY_STEP", 0.05),
        NORMALIZE_ACCURACY_CEILING=_env_float("NORMALIZE_ACCURACY_CEILING", 0.96),
        NUTRIENT_FILL_ACCURACY_CEILING=_env_float("NUTRIENT_FILL_ACCURACY_CEILING", 1.0),
        # Caché de sugerencias (OpenFoodFacts)
        SUGGESTION_CACHE_TTL=_env_float("SUGGESTION_CACHE_TTL", 600),
        SUGGESTION_CACHE_SIZE=int(_env_float("SUGGESTION_CACHE_SIZE", 256)),
    )
    if test_config:
        app.config.update(test_config)

    # Inicializa extensiones
    db.init_app(app)
    migrate.init_app(app, db)

    _configure_logging(app)

    from fitai.utils.cache import TTLCache
    app.extensions["fitai_suggestions"] = TTLCache(
        ttl=app.config["SUGGESTION_CACHE_TTL"],
        maxsize=app.config["SUGGESTION_CACHE_SIZE"],
    )

    # ---------------------------------------------------------
    # MODELOS (importar para que Flask-Migrate los detecte)
    # ---------------------------------------------------------
    from fitai.models.food import Food  # noqa: F401
    from fitai.models.audit import FoodAuditLog  # noqa: F401
    from fitai.models.datahub import NutrientAverage  # noqa: F401

    # ---------------------------------------------------------
    # BLUEPRINTS
    # ---------------------------------------------------------
    from fitai.routes.calibration import calibration_bp
    from fitai.routes.nutrients import nutrients_bp
    from fitai.routes.foods import foods_bp
    from fitai.routes.analyze import analyze_bp

    app.register_blueprint(calibration_bp)
    app.register_blueprint(nutrients_bp)
    app.register_blueprint(foods_bp)
    app.register_blueprint(analyze_bp)

    # ---------------------------------------------------------
    # CLI (importación, mantenimiento, calibración)
    # ---------------------------------------------------------
    from fitai.cli import register_cli
    register_cli(app)

    # ---------------------------------------------------------
    # Healthcheck y manejo de errores JSON
    # ---------------------------------------------------------
    @app.get("/healthz")
    def _healthz():
        return {"status": "ok"}, 200

    @app.get("/ping")
    def _ping():
        return "pong", 200

    from fitai.errors import FitAIError

    @app.errorhandler(FitAIError)
    def _fitai_error(err):
        return jsonify(error=err.message), err.status_code

    @app.errorhandler(400)
    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(413)
    def _http_errors(err):
        # Si la petición es JSON, devolvemos JSON consistente
        if request.is_json or request.path.startswith("/api/"):
            code = getattr(err, "code", 500) or 500
            return jsonify(error=getattr(err, "name", "HTTP error")), code
        return err

    @app.errorhandler(500)
    def _server_error(err):
        # Mensaje genérico: el detalle sólo va al log
        original = getattr(err, "original_exception", None) or err
        app.logger.error(f"[500] {request.method} {request.path}: {original!r}")
        db.session.rollback()
        return jsonify(error="Internal Server Error"), 500

    return app
