from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.services.reports import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def _csv_response(df: pd.DataFrame, filename_base: str) -> StreamingResponse:
    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    return StreamingResponse(buffer, media_type="text/csv", headers=_attachment(f"{filename_base}.csv"))


def _pdf_bytes(df: pd.DataFrame, title: str) -> io.BytesIO:
    """Render the frame as a single landscape table."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    data = [list(df.columns)] + df.astype(str).values.tolist()
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 7),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    doc.build([Paragraph(f"{title} ({stamp})", styles["Title"]), table])
    buffer.seek(0)
    return buffer


def _export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    """
    Render a report frame as a downloadable file.

    csv is the default; xlsx uses openpyxl and pdf uses reportlab. Unknown
    formats fall back to csv.
    """
    export_format = (export_format or "csv").lower()
    if export_format in ("xlsx", "excel"):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        return StreamingResponse(buffer, media_type=XLSX_MEDIA_TYPE, headers=_attachment(f"{filename_base}.xlsx"))

    if export_format == "pdf":
        title = filename_base.replace("_", " ").title()
        return StreamingResponse(
            _pdf_bytes(df, title), media_type="application/pdf", headers=_attachment(f"{filename_base}.pdf")
        )

    return _csv_response(df, filename_base)


# PUBLIC_INTERFACE
@router.get(
    "/students",
    summary="Students report",
    description="Student roster in the caller's scope with LC and MF names. Export as csv, xlsx or pdf.",
    response_class=StreamingResponse,
)
async def students_report(
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF, Tier.LC)),
    session: AsyncSession = Depends(get_async_session),
) -> StreamingResponse:
    df = await ReportService(session, principal).students_frame()
    return _export_dataframe(df, "students_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/inventory",
    summary="Inventory report",
    description="Stock levels, stock status and valuation per product (HQ). Export as csv, xlsx or pdf.",
    response_class=StreamingResponse,
)
async def inventory_report(
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> StreamingResponse:
    df = await ReportService(session, principal).inventory_frame()
    return _export_dataframe(df, "inventory_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/royalties",
    summary="Royalties report",
    description=(
        "Per Learning Center tuition revenue for a month with the tiered LC to MF commission "
        "and the MF to HQ share. HQ sees every LC, MF users their own. Export as csv, xlsx or pdf."
    ),
    response_class=StreamingResponse,
)
async def royalties_report(
    month: Optional[str] = Query(None, description="YYYY-MM; defaults to the current month"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF)),
    session: AsyncSession = Depends(get_async_session),
) -> StreamingResponse:
    df = await ReportService(session, principal).royalties_frame(month)
    return _export_dataframe(df, "royalties_report", format)
