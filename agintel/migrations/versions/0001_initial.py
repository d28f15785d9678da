"""Initial schema for the agricultural intelligence warehouse."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


ingestion_run_status = sa.Enum("running", "succeeded", "partial", "failed", name="ingestion_run_status")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "crop_forecast",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("crop", sa.String(length=32), nullable=False),
        sa.Column("state", sa.String(length=8), nullable=False),
        sa.Column("season", sa.String(length=9), nullable=False),
        sa.Column("report_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("area", sa.Numeric(18, 2), nullable=False),
        sa.Column("production", sa.Numeric(18, 2), nullable=False),
        sa.Column("yield_per_ha", sa.Numeric(10, 4), nullable=False),
        sa.Column("yield_change", sa.Numeric(10, 2), nullable=False),
        sa.Column("production_change", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("crop", "state", "season", name="uq_crop_forecast_crop_state_season"),
    )
    op.create_index("ix_crop_forecast_state_season", "crop_forecast", ["state", "season"])

    op.create_table(
        "commodity_price",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("commodity", sa.String(length=32), nullable=False),
        sa.Column("price_date", sa.Date(), nullable=False),
        sa.Column("price", sa.Numeric(14, 4), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="AUD"),
        sa.Column("price_unit", sa.String(length=16), nullable=False, server_default="tonne"),
        sa.Column("week_change", sa.Numeric(10, 2), nullable=False),
        sa.Column("month_change", sa.Numeric(10, 2), nullable=False),
        sa.Column("year_change", sa.Numeric(10, 2), nullable=False),
        sa.Column("five_year_avg", sa.Numeric(14, 4), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("commodity", "price_date", name="uq_commodity_price_commodity_date"),
    )
    op.create_index("ix_commodity_price_commodity_date", "commodity_price", ["commodity", "price_date"])

    op.create_table(
        "farm_benchmark",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("farm_type", sa.String(length=64), nullable=False),
        sa.Column("state", sa.String(length=8), nullable=False),
        sa.Column("financial_year", sa.String(length=9), nullable=False),
        sa.Column("gross_farm_income", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_cash_costs", sa.Numeric(18, 2), nullable=False),
        sa.Column("farm_cash_income", sa.Numeric(18, 2), nullable=False),
        sa.Column("farm_business_profit", sa.Numeric(18, 2), nullable=False),
        sa.Column("rate_of_return", sa.Numeric(8, 4), nullable=False),
        sa.Column("debt_to_equity", sa.Numeric(8, 4), nullable=False),
        sa.Column("sample_size", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "farm_type", "state", "financial_year", name="uq_farm_benchmark_type_state_year"
        ),
    )

    op.create_table(
        "yield_prediction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("crop", sa.String(length=32), nullable=False),
        sa.Column("state", sa.String(length=8), nullable=False),
        sa.Column("season", sa.String(length=9), nullable=False),
        sa.Column("predicted_yield", sa.Numeric(10, 4), nullable=False),
        sa.Column("confidence_low", sa.Numeric(10, 4), nullable=False),
        sa.Column("confidence_high", sa.Numeric(10, 4), nullable=False),
        sa.Column("methodology", sa.String(length=255), nullable=False),
        sa.Column("basis_data_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_yield_prediction_key_generated",
        "yield_prediction",
        ["crop", "state", "season", "generated_at"],
    )
    op.create_index("ix_yield_prediction_valid_until", "yield_prediction", ["valid_until"])

    op.create_table(
        "supply_forecast",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("region", sa.String(length=64), nullable=False),
        sa.Column("state", sa.String(length=8), nullable=False),
        sa.Column("forecast_date", sa.Date(), nullable=False),
        sa.Column("horizon_days", sa.Integer(), nullable=False, server_default="180"),
        sa.Column("forecast_data", sa.JSON(), nullable=False),
        sa.Column("risk_score", sa.Integer(), nullable=False),
        sa.Column("confidence_level", sa.Numeric(4, 2), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_supply_forecast_region_generated", "supply_forecast", ["region", "generated_at"])
    op.create_index("ix_supply_forecast_valid_until", "supply_forecast", ["valid_until"])

    op.create_table(
        "ingestion_run",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("data_source", sa.String(length=64), nullable=False),
        sa.Column("dataset_id", sa.String(length=64), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", ingestion_run_status, nullable=False, server_default="running"),
        sa.Column("records_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_ingestion_run_dataset_id", "ingestion_run", ["dataset_id"])
    op.create_index("ix_ingestion_run_status_start", "ingestion_run", ["status", "start_time"])


def downgrade() -> None:
    op.drop_index("ix_ingestion_run_status_start", table_name="ingestion_run")
    op.drop_index("ix_ingestion_run_dataset_id", table_name="ingestion_run")
    op.drop_table("ingestion_run")
    ingestion_run_status.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_supply_forecast_valid_until", table_name="supply_forecast")
    op.drop_index("ix_supply_forecast_region_generated", table_name="supply_forecast")
    op.drop_table("supply_forecast")
    op.drop_index("ix_yield_prediction_valid_until", table_name="yield_prediction")
    op.drop_index("ix_yield_prediction_key_generated", table_name="yield_prediction")
    op.drop_table("yield_prediction")
    op.drop_table("farm_benchmark")
    op.drop_index("ix_commodity_price_commodity_date", table_name="commodity_price")
    op.drop_table("commodity_price")
    op.drop_index("ix_crop_forecast_state_season", table_name="crop_forecast")
    op.drop_table("crop_forecast")
