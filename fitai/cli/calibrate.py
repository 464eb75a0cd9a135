# fitai/cli/calibrate.py
import click
from flask import current_app
from flask.cli import AppGroup

from fitai.services.calibration import run_calibration
from fitai.services.normalization import run_normalization

calibrate_group = AppGroup("calibrate", help="Calibración y normalización por lotes")


@calibrate_group.command("run")
@click.option("--limit", type=int, default=None, help="Procesa sólo los N primeros (por id).")
def calibrate_run(limit):
    summary = run_calibration(
        limit=limit,
        threshold=current_app.config["CALIBRATION_OUTLIER_THRESHOLD"],
    )
    click.secho(
        f"Total: {summary.total_foods} | calibrados: {summary.calibrated} | "
        f"outliers: {summary.outliers} | accuracy media: {summary.average_accuracy}",
        fg="green",
    )


@calibrate_group.command("normalize")
@click.option("--limit", type=int, default=10, show_default=True)
def calibrate_normalize(limit):
    """Corrige errores de escala de unidades en los nutrientes."""
    result = run_normalization(
        limit=limit,
        step=current_app.config["NORMALIZE_ACCURACY_STEP"],
        ceiling=current_app.config["NORMALIZE_ACCURACY_CEILING"],
    )
    for log in result["logs"]:
        click.echo(f"  #{log['id']} {log['food']}: {', '.join(log['correctedKeys'])}")
    click.secho(f"Alimentos corregidos: {result['updated']}", fg="green")
