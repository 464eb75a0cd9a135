"""create foods, food_audit_log and nutrient_averages"""

from alembic import op
import sqlalchemy as sa

# Revisiones
revision = "3b7c1e9a04d2"
down_revision = None
branch_labels = None
depends_on = None

NUTRIENT_COLUMNS = (
    "kcal", "protein", "carbs", "fat",
    "fiber", "sugar", "sodium",
    "vitamin_a", "vitamin_c", "vitamin_d", "vitamin_e", "vitamin_k",
    "vitamin_b6", "vitamin_b12",
    "calcium", "iron", "magnesium", "phosphorus", "potassium",
    "zinc", "copper", "manganese", "selenium", "iodine",
    "cholesterol", "water",
)


def upgrade():
    op.create_table(
        "foods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name_en", sa.String(length=200), nullable=False),
        sa.Column("name_local", sa.String(length=200), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=True),
        sa.Column("region", sa.String(length=32), nullable=True),
        sa.Column("is_global", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source", sa.String(length=64), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        *[sa.Column(name, sa.Float(), nullable=True) for name in NUTRIENT_COLUMNS],
        sa.Column("accuracy_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("name_en", name="uq_foods_name_en"),
    )

    # Sin FK: las entradas de lote llevan food_id NULL y el log sobrevive a los borrados
    op.create_table(
        "food_audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("food_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_food_audit_log_food_id", "food_audit_log", ["food_id"])

    op.create_table(
        "nutrient_averages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nutrient_key", sa.String(length=32), nullable=False),
        sa.Column("avg_value", sa.Float(), nullable=False),
        sa.Column("samples_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("accuracy_score", sa.Float(), nullable=False, server_default="0.9"),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("nutrient_key", name="uq_nutrient_averages_key"),
    )


def downgrade():
    op.drop_table("nutrient_averages")
    op.drop_index("ix_food_audit_log_food_id", table_name="food_audit_log")
    op.drop_table("food_audit_log")
    op.drop_table("foods")
