# fitai/cli/foods.py
import csv
import json
import os
from datetime import datetime

import click
from flask.cli import AppGroup
from sqlalchemy import func, inspect, text

from fitai import db
from fitai.models.food import Food
from fitai.services.nutrients import NUTRIENT_FIELDS

foods_group = AppGroup("foods", help="Mantenimiento de la tabla foods")

TEXT_FIELDS = ("name_local", "category", "region", "source", "image_url")
EXPORT_FIELDS = ["id", "name_en", *TEXT_FIELDS, "is_global", *NUTRIENT_FIELDS, "accuracy_score"]


def _to_float_or_none(v):
    if v in (None, "", "None"):
        return None
    try:
        return float(v)
    except (ValueError, TypeError):
        return None


def _to_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    return str(v or "").strip().lower() in ("1", "true", "yes", "si", "sí")


def _row_to_data(row: dict) -> dict:
    """Normaliza una fila (CSV o JSON) a columnas de Food."""
    data = {"name_en": (row.get("name_en") or row.get("name") or "").strip()}
    for key in TEXT_FIELDS:
        if row.get(key) not in (None, ""):
            data[key] = str(row[key]).strip()
    if "is_global" in row:
        data["is_global"] = _to_bool(row["is_global"])
    for key in NUTRIENT_FIELDS:
        if key in row:
            data[key] = _to_float_or_none(row[key])
    if "accuracy_score" in row:
        data["accuracy_score"] = _to_float_or_none(row["accuracy_score"]) or 0.0
    return data


def _upsert_foods(items):
    created, updated = 0, 0
    for row in items:
        data = _row_to_data(row)
        if not data["name_en"]:
            continue
        obj = Food.query.filter_by(name_en=data["name_en"]).first()
        if obj:
            for k, v in data.items():
                setattr(obj, k, v)
            obj.updated_at = datetime.utcnow()
            updated += 1
        else:
            db.session.add(Food(**data))
            created += 1
    db.session.commit()
    return created, updated


# -----------------------------------------------------------------------------#
# Importación / exportación
# -----------------------------------------------------------------------------#
@foods_group.command("import")
@click.option("--from-json", "json_path", default=None, help="Lista JSON de alimentos.")
@click.option("--from-csv", "csv_path", default=None, help="CSV con cabecera (name_en, kcal, ...).")
def import_foods(json_path, csv_path):
    """
    Carga/actualiza alimentos (idempotente por name_en).
    Columnas reconocidas: name_en (o name), name_local, category, region, source,
    image_url, is_global, accuracy_score y cualquier nutriente.
    """
    if not json_path and not csv_path:
        click.secho("Indica --from-json o --from-csv", fg="red")
        return
    try:
        if json_path:
            with open(json_path, "r", encoding="utf-8") as fh:
                items = json.load(fh)
        else:
            with open(csv_path, "r", encoding="utf-8-sig") as fh:
                items = list(csv.DictReader(fh))
    except FileNotFoundError as e:
        click.secho(f"No se encontró el fichero: {e.filename}", fg="red")
        return
    except json.JSONDecodeError as e:
        click.secho(f"JSON inválido: {e}", fg="red")
        return
    if isinstance(items, dict):
        items = items.get("foods", [])

    click.secho(f"Leídos {len(items)} alimentos", fg="cyan")
    created, updated = _upsert_foods(items)
    click.secho(f"Hecho. Nuevos: {created}, Actualizados: {updated}", fg="green")


@foods_group.command("export")
@click.option("--to", "dest_path", default=None,
              help="Ruta destino del CSV (por defecto: instance/foods_export_YYYYMMDD.csv)")
def export_foods(dest_path):
    """Exporta todos los alimentos a CSV (mismas cabeceras que acepta import)."""
    if not dest_path:
        ts = datetime.now().strftime("%Y%m%d")
        dest_path = os.path.join("instance", f"foods_export_{ts}.csv")
    folder = os.path.dirname(dest_path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    rows = Food.query.order_by(Food.id.asc()).all()
    with open(dest_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for f in rows:
            writer.writerow({k: getattr(f, k) for k in EXPORT_FIELDS})

    click.secho(f"Exportado {len(rows)} alimentos a: {dest_path}", fg="green")


# -----------------------------------------------------------------------------#
# Limpieza
# -----------------------------------------------------------------------------#
@foods_group.command("dedupe")
def dedupe_foods():
    """Borra duplicados por nombre (sin mayúsculas/espacios); se queda el id más bajo."""
    key = func.lower(func.trim(Food.name_en))
    dup_keys = [k for (k,) in db.session.query(key).group_by(key).having(func.count(Food.id) > 1)]

    removed = 0
    for k in dup_keys:
        rows = Food.query.filter(key == k).order_by(Food.id.asc()).all()
        for extra in rows[1:]:
            click.echo(f"  - borrando #{extra.id} '{extra.name_en}' (se queda #{rows[0].id})")
            db.session.delete(extra)
            removed += 1
    db.session.commit()
    click.secho(f"Duplicados eliminados: {removed}", fg="green" if removed else "cyan")


@foods_group.command("reset")
@click.option("--yes", is_flag=True, help="Confirma el borrado de TODOS los alimentos.")
def reset_foods(yes):
    """Elimina y recrea la tabla foods."""
    if not yes:
        click.secho("Operación destructiva: añade --yes para confirmar.", fg="yellow")
        return
    # libera la conexión de la sesión antes del DDL
    db.session.close()
    Food.__table__.drop(db.engine, checkfirst=True)
    Food.__table__.create(db.engine)
    click.secho("Tabla foods recreada (vacía).", fg="green")


# -----------------------------------------------------------------------------#
# Esquema
# -----------------------------------------------------------------------------#
def _missing_columns():
    existing = {c["name"] for c in inspect(db.engine).get_columns(Food.__tablename__)}
    return existing, [c for c in Food.__table__.columns if c.name not in existing]


@foods_group.command("check-columns")
def check_columns():
    """Lista las columnas reales de foods y las que el modelo declara pero faltan."""
    if not inspect(db.engine).has_table(Food.__tablename__):
        click.secho("La tabla foods no existe.", fg="red")
        return
    existing, missing = _missing_columns()
    click.echo(f"Columnas ({len(existing)}): {', '.join(sorted(existing))}")
    if missing:
        click.secho(f"FALTAN: {', '.join(c.name for c in missing)}", fg="yellow")
    else:
        click.secho("Esquema OK", fg="green")


@foods_group.command("ensure-columns")
def ensure_columns():
    """Añade (ALTER TABLE) las columnas del modelo que falten, siempre como NULLables."""
    if not inspect(db.engine).has_table(Food.__tablename__):
        Food.__table__.create(db.engine)
        click.secho("Tabla foods creada.", fg="green")
        return
    _, missing = _missing_columns()
    with db.engine.begin() as conn:
        for col in missing:
            sqltype = col.type.compile(dialect=db.engine.dialect)
            conn.execute(text(f"ALTER TABLE {Food.__tablename__} ADD COLUMN {col.name} {sqltype}"))
            click.echo(f"[schema] foods.{col.name} AÑADIDA")
    click.secho(f"Columnas añadidas: {len(missing)}", fg="green")
