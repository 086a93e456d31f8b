"""
Export functionality for writing schedules to Excel and JSON.
"""

import json
import pandas as pd
from .models import Schedule
from .config import SchedulerConfig
from .lanes import lane_usage_dataframe


def write_excel(schedule: Schedule, config: SchedulerConfig, output_path: str) -> None:
    """
    Write schedule to Excel file with summary sheets.

    Args:
        schedule: Schedule to export
        config: Scheduler configuration
        output_path: Path to output Excel file
    """
    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        _write_heats(schedule, config, writer)

        if config.excel.include_summaries:
            _write_lane_usage(schedule, config, writer)
            _write_summary(schedule, config, writer)


def write_json(schedule: Schedule, output_path: str) -> None:
    """Write schedule as JSON, readable with ``ingest.load_schedule``."""
    with open(output_path, 'w') as f:
        json.dump(schedule.to_dict(), f, indent=2)


def _write_heats(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write the main heats sheet."""
    df = schedule.to_dataframe()

    sheet_name = config.excel.sheets.get('heats', 'Heats')
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book
    _format_heats_worksheet(worksheet, workbook, df)


def _write_lane_usage(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write the car-by-lane usage table."""
    sheet_name = config.excel.sheets.get('lane_usage', 'Lane Usage')

    df = lane_usage_dataframe(schedule)
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    if df.empty:
        return

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book

    spread_col = df.columns.get_loc('Spread')
    worksheet.conditional_format(1, spread_col, len(df), spread_col, {
        'type': 'cell',
        'criteria': '>',
        'value': 0 if schedule.metadata.lane_balance_perfect else 1,
        'format': workbook.add_format({'bg_color': '#FFC7CE'})
    })

    summary_row = len(df) + 3
    worksheet.write(summary_row, 0, 'Summary Statistics')
    worksheet.write(summary_row + 1, 0, f'Average Spread: {df["Spread"].mean():.2f}')
    worksheet.write(summary_row + 2, 0, f'Cars with Perfect Balance: {(df["Spread"] == 0).sum()}')


def _write_summary(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write schedule metadata."""
    sheet_name = config.excel.sheets.get('summary', 'Summary')

    metadata = schedule.metadata
    rows = [
        {'Item': 'Algorithm', 'Value': metadata.algorithm_used.value},
        {'Item': 'Total Heats', 'Value': metadata.total_heats},
        {'Item': 'Lane Count', 'Value': config.lane_count},
        {'Item': 'Lane Balance Perfect', 'Value': metadata.lane_balance_perfect},
        {'Item': 'Speed Matched', 'Value': metadata.speed_matched},
        {'Item': 'Catch-up Heats', 'Value': sum(1 for heat in schedule.heats if heat.catch_up)},
    ]
    pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)


def _format_heats_worksheet(worksheet, workbook, df: pd.DataFrame) -> None:
    """Apply formatting to the heats worksheet."""
    header_format = workbook.add_format({
        'bold': True,
        'text_wrap': True,
        'valign': 'top',
        'fg_color': '#D7E4BC',
        'border': 1
    })

    column_widths = {
        'Heat': 6,
        'Lane': 6,
        'Car Number': 10,
        'Name': 24,
        'Catch Up': 9
    }

    for i, col in enumerate(df.columns):
        worksheet.set_column(i, i, column_widths.get(col, 12))

    for col_num, value in enumerate(df.columns.values):
        worksheet.write(0, col_num, value, header_format)
