"""
Excel Writer Module

Generates formatted Excel payroll recaps with styling.
Applies color formatting based on compliance and daily status.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from domain.entities import AttendanceAnalysis, AttendanceStatus, RecapEntry


# Libellés affichés pour chaque statut
STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Présent",
    AttendanceStatus.MEETING_PRESENCE: "Réunion",
    AttendanceStatus.INCOMPLETE: "Incomplet",
    AttendanceStatus.ABSENT_AUTHORIZED: "Absence autorisée",
    AttendanceStatus.ABSENT_UNAUTHORIZED: "Absence injustifiée",
    AttendanceStatus.WEEKEND: "Repos",
}

RECAP_HEADERS = [
    "Matricule", "Collaborateur", "Jours travaillés", "Réunions",
    "Retard cumulé (min)", "Retard (h)", "Abs. injustifiées", "Abs. autorisées",
    "Incomplets", "Pénalité absences", "Retenue retards", "Retenue totale",
    "Statut", "Détail des retards",
]

DETAIL_HEADERS = [
    "Date", "Matricule", "Collaborateur", "Entrée", "Sortie", "Statut",
    "Retard (min)", "Durée (min)", "Commentaires",
]


class ExcelWriter:
    """
    Generates formatted Excel payroll recaps.

    Output format:
    - Sheet 1 "Récapitulatif": one row per employee, compliance in the status column
    - Sheet 2 "Détail": one row per analysed employee-day (optional)

    Styling:
    - Blue header row with white bold text
    - Green/Red status cell for compliant / non-compliant employees
    - Daily status cells colored by attendance status
    """

    COLORS = {
        'green': PatternFill(start_color='90EE90', end_color='90EE90', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'yellow': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'blue': PatternFill(start_color='6B8CFF', end_color='6B8CFF', fill_type='solid'),
        'gray': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
    }

    STATUS_COLORS = {
        AttendanceStatus.PRESENT: 'green',
        AttendanceStatus.MEETING_PRESENCE: 'yellow',
        AttendanceStatus.INCOMPLETE: 'yellow',
        AttendanceStatus.ABSENT_AUTHORIZED: 'blue',
        AttendanceStatus.ABSENT_UNAUTHORIZED: 'red',
        AttendanceStatus.WEEKEND: 'gray',
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(
        self,
        recap: Sequence[RecapEntry],
        title: str,
        output_path: Path,
        analyses: Optional[Sequence[AttendanceAnalysis]] = None
    ) -> Path:
        """
        Create a payroll recap workbook.

        Args:
            recap: Recap entries in display order
            title: Period label written above the table (e.g. "Mars 2024")
            output_path: Path to save the Excel file
            analyses: Daily analyses for the detail sheet, omitted when None

        Returns:
            Path to the created file
        """
        self.wb = Workbook()

        # Remove default sheet
        default_sheet = self.wb.active
        self.wb.remove(default_sheet)

        recap_ws = self.wb.create_sheet("Récapitulatif")
        self._write_recap_sheet(recap_ws, recap, title)

        if analyses is not None:
            detail_ws = self.wb.create_sheet("Détail")
            self._write_detail_sheet(detail_ws, analyses)

        self.wb.save(output_path)
        return output_path

    def _write_header(self, ws, row: int, headers: List[str]) -> None:
        for col, label in enumerate(headers, start=1):
            cell = ws.cell(row, col, label)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.COLORS['header']
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.BORDER

    def _write_recap_sheet(self, ws, recap: Sequence[RecapEntry], title: str) -> None:
        """Write the payroll recap table."""
        title_cell = ws.cell(1, 1, f"Récapitulatif de paie - {title}")
        title_cell.font = Font(bold=True, size=14)
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(RECAP_HEADERS))

        self._write_header(ws, 2, RECAP_HEADERS)

        current_row = 3
        for entry in recap:
            values = [
                entry.employee_id,
                entry.name,
                entry.worked,
                entry.meetings,
                entry.late_cumul_minutes,
                entry.late_hours,
                entry.abs_unauthorized,
                entry.abs_authorized,
                entry.incomplete,
                entry.absence_penalty,
                entry.lateness_deduction,
                entry.deduction,
                "En règle" if entry.is_compliant else "Litige",
                ", ".join(entry.lateness_details),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(current_row, col, value)
                cell.border = self.BORDER
                cell.alignment = Alignment(
                    horizontal='left' if col in (2, len(values)) else 'center',
                    vertical='center',
                    wrap_text=col == len(values)
                )

            status_cell = ws.cell(current_row, 13)
            status_cell.fill = self.COLORS['green' if entry.is_compliant else 'red']
            status_cell.font = Font(bold=True)
            current_row += 1

        # Total row
        if recap:
            ws.cell(current_row, 2, "Total").font = Font(bold=True)
            total_cell = ws.cell(current_row, 12, sum(entry.deduction for entry in recap))
            total_cell.font = Font(bold=True)
            total_cell.border = self.BORDER
            total_cell.alignment = Alignment(horizontal='center')

        # Adjust column widths
        widths = [12, 26, 10, 10, 12, 10, 10, 10, 10, 12, 12, 12, 11, 40]
        for col, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[2].height = 32

    def _write_detail_sheet(self, ws, analyses: Sequence[AttendanceAnalysis]) -> None:
        """Write one row per analysed employee-day."""
        self._write_header(ws, 1, DETAIL_HEADERS)

        for row, analysis in enumerate(analyses, start=2):
            values = [
                analysis.date,
                analysis.employee_id,
                analysis.name,
                analysis.first_log or "-",
                analysis.last_log or "-",
                STATUS_LABELS[analysis.status],
                analysis.lateness_minutes,
                analysis.work_duration_minutes,
                " | ".join(analysis.comments),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row, col, value)
                cell.border = self.BORDER
                cell.alignment = Alignment(horizontal='left' if col in (3, 9) else 'center')

            ws.cell(row, 6).fill = self.COLORS[self.STATUS_COLORS[analysis.status]]
            if analysis.is_late:
                ws.cell(row, 7).font = Font(bold=True, color='C00000')

        widths = [12, 12, 26, 8, 8, 18, 10, 10, 50]
        for col, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width
