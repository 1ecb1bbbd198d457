"""Excel trip report for an analysed position stream."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from os import PathLike
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .analysis import TripAnalysis
from .models import Position

SUMMARY_SHEET = "Summary"
SEGMENTS_SHEET = "Segments"
IDLE_SHEET = "Idle Periods"
TRACK_SHEET = "Optimized Track"
EXCEL_DATETIME_FORMAT = "yyyy-mm-dd hh:mm:ss"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFD9E1F2")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]

__all__ = ["write_trip_report"]


def _excel_time(value: datetime) -> datetime:
    # Excel cannot store timezone-aware datetimes; write naive UTC.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _summary_rows(analysis: TripAnalysis) -> List[Dict[str, Any]]:
    result = analysis.optimization
    stats = analysis.stats
    fuel = analysis.fuel
    rows = [
        ("Original Points", result.original_count),
        ("Optimized Points", result.optimized_count),
        ("Reduction (%)", result.reduction_percentage),
        ("Accuracy Filtered", result.statistics.accuracy_filtered),
        ("Speed Filtered", result.statistics.speed_filtered),
        ("Time Filtered", result.statistics.time_filtered),
        ("Douglas-Peucker Reduced", result.statistics.douglas_peucker_reduced),
        ("Average Score", round(stats.average_score, 1)),
        ("Total Distance (km)", round(stats.total_distance_km, 3)),
        ("Total Duration (min)", round(stats.total_duration_minutes, 1)),
        ("Average Speed (km/h)", round(stats.average_speed_kmh, 1)),
        ("Harsh Events", stats.harsh_events),
        ("Idle Time (min)", round(stats.idle_time_minutes, 1)),
        ("Segment Fuel Efficiency (km/%)", round(stats.fuel_efficiency, 3)),
        ("Excellent Segments", stats.score_distribution.excellent),
        ("Good Segments", stats.score_distribution.good),
        ("Fair Segments", stats.score_distribution.fair),
        ("Poor Segments", stats.score_distribution.poor),
        ("Idle Periods", len(analysis.idle_periods)),
        ("Fuel Used (%)", round(fuel.total_fuel_used, 2)),
        ("Average Fuel Level (%)", round(fuel.average_fuel_level, 2)),
        ("Refuel Events", fuel.refuel_events),
        ("Trip Fuel Efficiency (km/%)", round(fuel.fuel_efficiency, 3)),
    ]
    return [{"Metric": name, "Value": value} for name, value in rows]


def _segment_rows(analysis: TripAnalysis) -> List[Dict[str, Any]]:
    return [
        {
            "Start": _excel_time(seg.start.timestamp),
            "End": _excel_time(seg.end.timestamp),
            "Score": round(seg.score, 1),
            "Rating": seg.label,
            "Distance (km)": round(seg.distance_km, 3),
            "Duration (min)": round(seg.duration_minutes, 2),
            "Average Speed (km/h)": round(seg.average_speed_kmh, 1),
            "Harsh Acceleration": seg.factors.harsh_acceleration,
            "Harsh Braking": seg.factors.harsh_braking,
            "Excessive Speed": seg.factors.excessive_speed,
            "Idling": seg.factors.idling,
            "Fuel Used (%)": seg.factors.fuel_consumption,
        }
        for seg in analysis.segments
    ]


def _idle_rows(analysis: TripAnalysis) -> List[Dict[str, Any]]:
    return [
        {
            "Start": _excel_time(period.start.timestamp),
            "End": _excel_time(period.end.timestamp),
            "Duration (min)": round(period.duration_minutes, 1),
            "Latitude": period.latitude,
            "Longitude": period.longitude,
            "Address": period.address or "",
            "Significant": period.is_significant,
        }
        for period in analysis.idle_periods
    ]


def _track_rows(positions: List[Position]) -> List[Dict[str, Any]]:
    return [
        {
            "Time": _excel_time(pos.timestamp),
            "Latitude": pos.latitude,
            "Longitude": pos.longitude,
            "Speed": pos.speed,
            "Accuracy": pos.accuracy,
            "Fuel Level": pos.fuel_level,
            "Address": pos.address or "",
        }
        for pos in positions
    ]


def write_trip_report(filepath: PathInput, analysis: TripAnalysis) -> Path:
    """Write the trip analysis to an Excel workbook and return its path."""

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    sheets = [
        (SUMMARY_SHEET, _summary_rows(analysis), ["Metric", "Value"]),
        (SEGMENTS_SHEET, _segment_rows(analysis), None),
        (IDLE_SHEET, _idle_rows(analysis), None),
        (TRACK_SHEET, _track_rows(analysis.optimization.optimized_positions), None),
    ]
    with pd.ExcelWriter(
        path, engine="openpyxl", datetime_format=EXCEL_DATETIME_FORMAT
    ) as writer:
        for sheet_name, rows, columns in sheets:
            if rows:
                frame = pd.DataFrame(rows, columns=columns)
            else:
                frame = pd.DataFrame({"Message": ["No data."]})
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = _get_worksheet(writer, sheet_name)
            if ws is None:
                continue
            _style_header_row(ws, 1, len(frame.columns))
            _autosize(ws)
            LOGGER.debug("Wrote sheet %s rows=%d", sheet_name, len(rows))
    LOGGER.info("Trip report saved to %s", path)
    return path


def _get_worksheet(writer: pd.ExcelWriter, sheet_name: str) -> Worksheet | None:
    try:
        return writer.book[sheet_name]
    except KeyError:
        return writer.sheets.get(sheet_name)


def _style_header_row(ws: Worksheet, row_idx: int, max_col: int | None = None) -> None:
    if row_idx <= 0:
        return
    max_col = max_col or ws.max_column
    for col_idx in range(1, max_col + 1):
        cell = ws.cell(row=row_idx, column=col_idx)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_ROWS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
    )

    if not EXCEL_AUTOSIZE_COLUMNS:
        return
    try:
        if ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
            return
        for col_cells in ws.columns:
            max_len = 0
            col_letter = getattr(col_cells[0], "column_letter", None)
            for cell in col_cells:
                val = cell.value
                if val is None:
                    continue
                max_len = max(max_len, len(str(val)))
            width = min(
                EXCEL_AUTOSIZE_MAX_WIDTH,
                max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
            )
            if col_letter:
                ws.column_dimensions[col_letter].width = width
    except Exception as exc:  # pragma: no cover - autosize is best-effort
        LOGGER.debug("Autosize failed for sheet %s: %s", getattr(ws, "title", "?"), exc)
