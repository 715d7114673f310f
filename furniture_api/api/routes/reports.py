from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_session, require_roles
from furniture_api.db.models.users import ROLE_EMPLOYEE
from furniture_api.repositories.production import ProductionFilters, ProductionRepository
from furniture_api.schemas.production import Stage, Status

# PUBLIC_INTERFACE
router = APIRouter(prefix="/reports", tags=["Reports"])

PRODUCTION_COLUMNS = [
    "id",
    "date",
    "order_id",
    "product_name",
    "stage",
    "status",
    "quantity",
    "notes",
    "created_at",
    "updated_at",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

PDF_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ]
)


def _csv_bytes(df: pd.DataFrame, title: str) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


def _xlsx_bytes(df: pd.DataFrame, title: str) -> bytes:
    # openpyxl rejects timezone-aware datetimes
    df = df.copy()
    for col in df.select_dtypes(include=["datetimetz"]).columns:
        df[col] = df[col].dt.tz_localize(None)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=title[:31])
    return buffer.getvalue()


def _pdf_bytes(df: pd.DataFrame, title: str) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    generated = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    heading = Paragraph(f"{title} ({generated})", getSampleStyleSheet()["Title"])
    table = Table([list(df.columns)] + df.astype(str).values.tolist(), repeatRows=1)
    table.setStyle(PDF_TABLE_STYLE)
    doc.build([heading, table])
    return buffer.getvalue()


# format -> (writer, media type, file extension)
WRITERS: Dict[str, Tuple[Callable[[pd.DataFrame, str], bytes], str, str]] = {
    "csv": (_csv_bytes, "text/csv", "csv"),
    "xlsx": (_xlsx_bytes, XLSX_MEDIA_TYPE, "xlsx"),
    "excel": (_xlsx_bytes, XLSX_MEDIA_TYPE, "xlsx"),
    "pdf": (_pdf_bytes, "application/pdf", "pdf"),
}


def _export(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    writer, media_type, extension = WRITERS[export_format]
    title = filename_base.replace("_", " ").title()
    return StreamingResponse(
        io.BytesIO(writer(df, title)),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename_base}.{extension}"'},
    )


# PUBLIC_INTERFACE
@router.get(
    "/production",
    summary="Production report",
    description="Production jobs with stage, status and quantity as CSV, Excel or PDF.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def production_report(
    session: AsyncSession = Depends(get_session),
    stage: Optional[Stage] = Query(None),
    status: Optional[Status] = Query(None),
    format: str = Query("csv", description="csv, xlsx (or excel) or pdf"),
):
    """One row per production job, newest first. Resource breakdowns are left out."""
    export_format = format.lower()
    if export_format not in WRITERS:
        raise HTTPException(status_code=422, detail=f"Unsupported format '{format}'")

    jobs = await ProductionRepository(session).list_productions(
        ProductionFilters(stage=stage, status=status)
    )
    df = pd.DataFrame(
        [{column: getattr(job, column) for column in PRODUCTION_COLUMNS} for job in jobs],
        columns=PRODUCTION_COLUMNS,
    )
    return _export(df, "production_report", export_format)
