# fitai/cli/__init__.py
from .foods import foods_group
from .calibrate import calibrate_group


def register_cli(app):
    """Registra los grupos y comandos CLI de la app."""
    app.cli.add_command(foods_group)
    app.cli.add_command(calibrate_group)
