"""
Excel Export Service using XlsxWriter.

Renders a month matrix as a signed time sheet ("urenstaat"): employee and
client details, a calendar grid with one row per project, live SUM formulas
for the totals, a logo in the header and a signature in the footer.

Layout is fixed so the sheet prints on one A4 page in landscape. Day d of
the month always sits in column d + 1, days that do not exist in the month
(29-31) are left blank, and the totals column is column 33.
"""

import io
import logging
import re
from pathlib import Path
from typing import Dict, NamedTuple, Optional

import xlsxwriter
from PIL import Image, UnidentifiedImageError
from xlsxwriter.utility import xl_range

from urenstaat.domain.errors import MissingAsset
from urenstaat.domain.models import ExportMetadata, MonthMatrix
from urenstaat.infra.assets import AssetSource
from urenstaat.infra.config import Settings

logger = logging.getLogger(__name__)

FONT_NAME = "Verdana"
HOURS_FORMAT = "0.00"
DATE_FORMAT = "dd-mm-yyyy"
ORANGE = "#F28E00"

MONTH_NAMES = [
    "Januari", "Februari", "Maart", "April", "Mei", "Juni",
    "Juli", "Augustus", "September", "Oktober", "November", "December",
]
WEEKDAY_NAMES = ["Ma", "Di", "Wo", "Do", "Vr", "Za", "Zo"]

# Images are scaled to fit this box (pixels), aspect ratio preserved
IMAGE_BOX = (300, 200)
SUPPORTED_IMAGE_FORMATS = {"PNG", "JPEG", "BMP", "GIF"}

# Grid layout (0-based rows/columns)
LABEL_COL = 1
MAX_DAYS = 31
TOTAL_COL = 33
CAL_ROW = 14
FIRST_HOURS_ROW = 16
MIN_PROJECT_ROWS = 5
VALUE_FIRST_COL, VALUE_LAST_COL = 2, 9
PERIOD_LABEL_COLS, PERIOD_VALUE_COLS = (12, 15), (16, 20)
RIGHT_BLOCK_COL = 23
LOGO_ROW = 2
ADDRESS_ROW = 7
SIGNATURE_BOX_COLS = {"client": (1, 9), "employee": (23, 32)}
SIGNATURE_ROW_HEIGHT = 120


def day_col(day: int) -> int:
    return day + 1


class _PreparedImage(NamedTuple):
    name: str
    data: bytes
    scale: float


class ExcelExportService:
    """
    Generates the .xlsx time sheet of one month.

    Unreadable images are skipped with a warning unless strict mode is on,
    in which case MissingAsset propagates and nothing is produced.
    """

    def __init__(self, strict_assets: bool = False):
        self.strict_assets = strict_assets

    def export(self, matrix: MonthMatrix, metadata: ExportMetadata,
               logo: AssetSource, signature: AssetSource,
               strict: Optional[bool] = None) -> bytes:
        """
        Render the workbook.

        Args:
            matrix: Month matrix to render
            metadata: Employee, client and period details
            logo: Header image source
            signature: Footer image source
            strict: Overrides the service default for missing images

        Returns:
            The .xlsx document as bytes

        Raises:
            MissingAsset: an image is unreadable and strict mode is on
        """
        strict = self.strict_assets if strict is None else strict
        logo_image = self._prepare_image(logo, strict)
        signature_image = self._prepare_image(signature, strict)

        output = io.BytesIO()
        workbook = xlsxwriter.Workbook(output, {"in_memory": True})
        formats = self._create_formats(workbook)

        worksheet = workbook.add_worksheet("Urenstaat")
        worksheet.protect()

        self._write_header(worksheet, formats, matrix, metadata, logo_image)
        totals_row = self._write_grid(worksheet, formats, matrix)
        last_row = self._write_footer(worksheet, formats, metadata, totals_row + 3, signature_image)
        self._setup_page(worksheet, last_row)

        workbook.close()
        logger.info("Exported %04d-%02d: %d project(s), %.2f h",
                    matrix.year, matrix.month, len(matrix.rows), matrix.grand_total)
        return output.getvalue()

    def _prepare_image(self, source: AssetSource, strict: bool) -> Optional[_PreparedImage]:
        """Read and measure an image; None when it is unusable in non-strict mode"""
        try:
            data = source.read()
            try:
                with Image.open(io.BytesIO(data)) as img:
                    if img.format not in SUPPORTED_IMAGE_FORMATS:
                        raise MissingAsset(source.name, f"unsupported image format {img.format}")
                    # XlsxWriter sizes images at 96 DPI
                    x_dpi, y_dpi = img.info.get("dpi", (96, 96))
                    width = img.width * 96.0 / (x_dpi or 96)
                    height = img.height * 96.0 / (y_dpi or 96)
            except (UnidentifiedImageError, OSError) as e:
                raise MissingAsset(source.name, f"not a readable image ({e})") from e
        except MissingAsset as e:
            if strict:
                raise
            logger.warning("%s; leaving the image region blank", e)
            return None

        scale = min(IMAGE_BOX[0] / width, IMAGE_BOX[1] / height)
        return _PreparedImage(source.name, data, scale)

    @staticmethod
    def _insert_image(worksheet, row: int, col: int, image: Optional[_PreparedImage]) -> None:
        if image is None:
            return
        worksheet.insert_image(row, col, image.name, {
            "image_data": io.BytesIO(image.data),
            "x_scale": image.scale,
            "y_scale": image.scale,
            "object_position": 3,  # don't move or size with cells
        })

    def _create_formats(self, workbook) -> Dict[str, object]:
        base = {"font_name": FONT_NAME, "font_size": 10}

        def fmt(**props):
            return workbook.add_format({**base, **props})

        return {
            "title": fmt(bold=True, font_size=14, align="left"),
            "subtitle": fmt(bold=True, align="left"),
            "header": fmt(border=1),
            "header_unlocked": fmt(border=1, locked=False),
            "header_date": fmt(border=1, num_format=DATE_FORMAT, align="left", locked=False),
            "address": fmt(),
            "calendar": fmt(align="center", border=1, bg_color=ORANGE),
            "description": fmt(border=1),
            "description_unlocked": fmt(border=1, locked=False),
            "hours": fmt(align="center", border=1, num_format=HOURS_FORMAT),
            "hours_unlocked": fmt(align="center", border=1, num_format=HOURS_FORMAT, locked=False),
            "total_description": fmt(bold=True, border=2, align="left"),
            "total": fmt(bold=True, border=2, align="center", num_format=HOURS_FORMAT),
            "footer_header": fmt(bold=True, align="left"),
            "footer": fmt(align="left", locked=False),
            "footer_date": fmt(align="left", num_format=DATE_FORMAT, locked=False),
            "signature": fmt(bold=True, border=2, valign="top"),
        }

    def _write_header(self, worksheet, formats, matrix: MonthMatrix,
                      metadata: ExportMetadata, logo: Optional[_PreparedImage]) -> None:
        worksheet.write_string(1, LABEL_COL, "TIJDVERANTWOORDINGSFORMULIER", formats["title"])
        period_label = metadata.period_label or f"{MONTH_NAMES[matrix.month - 1]} {matrix.year}"
        worksheet.write_string(2, LABEL_COL, period_label, formats["subtitle"])

        # Employee block
        employee = [
            ("Naam medewerker", metadata.employee_name, formats["header"]),
            ("Functie in opdracht", metadata.employee_title, formats["header_unlocked"]),
            ("Telefoonnummer", metadata.employee_phone, formats["header_unlocked"]),
        ]
        for offset, (label, value, value_fmt) in enumerate(employee):
            row = 3 + offset
            worksheet.write_string(row, LABEL_COL, label, formats["header"])
            worksheet.merge_range(row, VALUE_FIRST_COL, row, VALUE_LAST_COL, value, value_fmt)

        # Assignment block
        assignment = [
            ("Opdrachtgever", metadata.client_name),
            ("Functie", ""),
            ("Projectnaam", metadata.project_name),
            ("Projectnummer", ""),
        ]
        for offset, (label, value) in enumerate(assignment):
            row = 7 + offset
            worksheet.write_string(row, LABEL_COL, label, formats["header"])
            worksheet.merge_range(row, VALUE_FIRST_COL, row, VALUE_LAST_COL, value, formats["header_unlocked"])

        # Period block
        label_first, label_last = PERIOD_LABEL_COLS
        value_first, value_last = PERIOD_VALUE_COLS
        worksheet.merge_range(3, label_first, 3, label_last, "Maand", formats["header"])
        worksheet.merge_range(4, label_first, 4, label_last, "Jaar", formats["header"])
        worksheet.merge_range(5, label_first, 5, label_last, "Invuldatum", formats["header"])
        worksheet.merge_range(3, value_first, 3, value_last, MONTH_NAMES[matrix.month - 1], formats["header"])
        worksheet.merge_range(4, value_first, 4, value_last, str(matrix.year), formats["header"])
        worksheet.merge_range(5, value_first, 5, value_last, "", formats["header_date"])
        worksheet.write_datetime(5, value_first, metadata.generated_on, formats["header_date"])

        self._insert_image(worksheet, LOGO_ROW, RIGHT_BLOCK_COL, logo)
        for offset, line in enumerate(metadata.company_address):
            worksheet.write_string(ADDRESS_ROW + offset, RIGHT_BLOCK_COL, line, formats["address"])

    def _write_grid(self, worksheet, formats, matrix: MonthMatrix) -> int:
        """Write calendar header, project rows and totals. Returns the totals row."""
        n_days = matrix.days_in_month

        for day in range(1, MAX_DAYS + 1):
            col = day_col(day)
            if day <= n_days:
                weekday = matrix.dates[day - 1].weekday()
                worksheet.write_string(CAL_ROW, col, WEEKDAY_NAMES[weekday], formats["calendar"])
                worksheet.write_number(CAL_ROW + 1, col, day, formats["calendar"])
            else:
                worksheet.write_blank(CAL_ROW, col, None, formats["calendar"])
                worksheet.write_blank(CAL_ROW + 1, col, None, formats["calendar"])
        worksheet.write_string(CAL_ROW + 1, TOTAL_COL, "Totaal", formats["total"])

        n_rows = max(len(matrix.rows), MIN_PROJECT_ROWS)
        totals_row = FIRST_HOURS_ROW + n_rows

        for index in range(n_rows):
            row = FIRST_HOURS_ROW + index
            if index < len(matrix.rows):
                month_row = matrix.rows[index]
                worksheet.write_string(row, LABEL_COL, month_row.project, formats["description"])
                for day, hours in month_row.days():
                    if hours > 0:
                        worksheet.write_number(row, day_col(day), hours, formats["hours"])
                    else:
                        worksheet.write_blank(row, day_col(day), None, formats["hours"])
                for day in range(n_days + 1, MAX_DAYS + 1):
                    worksheet.write_blank(row, day_col(day), None, formats["hours"])
                row_total = month_row.total
            else:
                # Spare rows for hand-written additions
                worksheet.write_blank(row, LABEL_COL, None, formats["description_unlocked"])
                for day in range(1, MAX_DAYS + 1):
                    worksheet.write_blank(row, day_col(day), None, formats["hours_unlocked"])
                row_total = 0

            worksheet.write_formula(
                row, TOTAL_COL,
                f"=SUM({xl_range(row, day_col(1), row, day_col(MAX_DAYS))})",
                formats["total"], row_total,
            )

        worksheet.write_string(totals_row, LABEL_COL, "Totaal facturabel", formats["total_description"])
        day_totals = matrix.day_totals
        for day in range(1, MAX_DAYS + 1):
            col = day_col(day)
            value = day_totals[day - 1] if day <= n_days else 0
            worksheet.write_formula(
                totals_row, col,
                f"=SUM({xl_range(FIRST_HOURS_ROW, col, totals_row - 1, col)})",
                formats["total"], value,
            )
        worksheet.write_formula(
            totals_row, TOTAL_COL,
            f"=SUM({xl_range(FIRST_HOURS_ROW, TOTAL_COL, totals_row - 1, TOTAL_COL)})",
            formats["total"], matrix.grand_total,
        )
        return totals_row

    def _write_footer(self, worksheet, formats, metadata: ExportMetadata,
                      sign_row: int, signature: Optional[_PreparedImage]) -> int:
        """Write the signature block. Returns the last row used."""
        parties = [
            (SIGNATURE_BOX_COLS["client"], "Opdrachtgever:", metadata.client_name, "Handtekening opdrachtgever:"),
            (SIGNATURE_BOX_COLS["employee"], "Medewerker:", metadata.employee_name, "Handtekening medewerker:"),
        ]
        box_row = sign_row + 5
        worksheet.set_row(box_row, SIGNATURE_ROW_HEIGHT)

        for (first_col, last_col), role, name, sign_label in parties:
            worksheet.write_string(sign_row, first_col, role, formats["footer_header"])
            worksheet.write_string(sign_row + 1, first_col, name, formats["footer"])
            worksheet.write_string(sign_row + 2, first_col, "Datum:", formats["footer_header"])
            worksheet.write_datetime(sign_row + 3, first_col, metadata.generated_on, formats["footer_date"])
            worksheet.write_string(sign_row + 4, first_col, sign_label, formats["footer_header"])
            worksheet.merge_range(box_row, first_col, box_row, last_col, "", formats["signature"])

        employee_first_col = SIGNATURE_BOX_COLS["employee"][0]
        self._insert_image(worksheet, box_row, employee_first_col, signature)
        return box_row

    @staticmethod
    def _setup_page(worksheet, last_row: int) -> None:
        worksheet.set_landscape()
        worksheet.set_paper(9)  # A4
        worksheet.set_margins(left=0.25, right=0.25, top=0.5, bottom=0.5)
        worksheet.set_header("", {"margin": 0.25})
        worksheet.set_footer("", {"margin": 0.25})
        worksheet.hide_gridlines(1)  # not printed, still visible on screen
        worksheet.fit_to_pages(1, 1)
        worksheet.print_area(0, 0, last_row, TOTAL_COL)

        worksheet.set_column(0, TOTAL_COL - 1, 6)
        worksheet.set_column(LABEL_COL, LABEL_COL, 20)
        worksheet.set_column(TOTAL_COL, TOTAL_COL, 10)


def build_metadata(settings: Settings, matrix: MonthMatrix,
                   project: Optional[str] = None) -> ExportMetadata:
    """Export metadata from the configured employee identity"""
    return ExportMetadata(
        employee_name=settings.employee_name,
        employee_title=settings.employee_title,
        employee_phone=settings.employee_phone,
        period_label=f"{MONTH_NAMES[matrix.month - 1]} {matrix.year}",
        client_name=settings.client_name,
        project_name=project or "",
        company_address=settings.company_address,
    )


def export_filename(matrix: MonthMatrix, project: Optional[str] = None) -> str:
    """Urenstaat_<yyyy>_<mm>[_<project>].xlsx"""
    name = f"Urenstaat_{matrix.year}_{matrix.month:02d}"
    if project:
        name += "_" + re.sub(r"[^\w-]+", "_", project).strip("_")
    return name + ".xlsx"


def save_month_export(service: ExcelExportService, matrix: MonthMatrix, metadata: ExportMetadata,
                      logo: AssetSource, signature: AssetSource, output_dir: Path,
                      project: Optional[str] = None, strict: Optional[bool] = None) -> Path:
    """Render the time sheet and write it to the output directory. Returns the file path."""
    content = service.export(matrix, metadata, logo, signature, strict=strict)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(matrix, project)
    path.write_bytes(content)
    logger.info("Time sheet written to %s", path)
    return path
