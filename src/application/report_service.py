"""
Report Service Module

Application layer service that orchestrates the payroll recap generation:
filtering of the published analyses, monthly aggregation, dashboard figures,
lateness notifications and Excel/PDF exports.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional

from config.config_manager import AppConfig
from config.hr_settings import HRSettings
from domain.analysis_filter import AnalysisFilter, DashboardStats
from domain.entities import AttendanceAnalysis, RecapEntry
from domain.monthly_aggregator import MonthlyAggregator
from domain.sorting import sort_recap
from domain.timestamp_normalizer import parse_date
from infrastructure.kv_store import KeyValueStore
from infrastructure.logger import get_logger
from infrastructure.shard_store import ShardStore

logger = get_logger("ReportService")

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def french_month_label(month: str) -> str:
    """Format "2024-03" as "mars 2024"; malformed input is returned unchanged."""
    day = parse_date(f"{month}-01")
    if day is None:
        return month
    return f"{FRENCH_MONTHS[day.month - 1]} {day.year}"


@dataclass
class RecapReport:
    """Everything computed for one filtered selection."""
    analyses: List[AttendanceAnalysis] = field(default_factory=list)
    recap: List[RecapEntry] = field(default_factory=list)
    stats: DashboardStats = field(default_factory=DashboardStats)
    period: str = ""


@dataclass
class LatenessNotification:
    """Ready to send e-mail text for one employee."""
    employee_id: str
    subject: str
    body: str


@dataclass
class ExportResult:
    """Files written by an export."""
    xlsx_path: Optional[Path] = None
    pdf_path: Optional[Path] = None


class PayrollReportService:
    """
    Application service for payroll recaps.

    This service:
    - Reads the published analyses (month shards or legacy document)
    - Applies the AnalysisFilter and aggregates the recap
    - Produces dashboard figures, notifications and file exports
    """

    def __init__(self, store: KeyValueStore, config: Optional[AppConfig] = None):
        self.shards = ShardStore(store)
        self.config = config or AppConfig()

    def build_recap(self, criteria: Optional[AnalysisFilter] = None) -> RecapReport:
        """
        Filter the published analyses and aggregate them.

        Args:
            criteria: Selection; everything when None

        Returns:
            RecapReport sorted per the configured sort order
        """
        criteria = criteria or AnalysisFilter()
        settings = self.shards.load_settings()

        # Un filtre mensuel ne lit que le mois concerné
        if criteria.month and criteria.month in self.shards.available_months():
            source = self.shards.load_month(criteria.month)
        else:
            source = self.shards.load_all()

        analyses = criteria.apply(source, settings)
        aggregator = MonthlyAggregator(settings.payroll)
        recap = sort_recap(aggregator.aggregate(analyses), self.config.output_settings.sort_by)
        stats = DashboardStats.compute(analyses, recap)

        logger.info(
            f"Récapitulatif: {len(analyses)} journées, {len(recap)} collaborateurs, "
            f"{stats.disputes} litige(s)"
        )
        return RecapReport(
            analyses=analyses,
            recap=recap,
            stats=stats,
            period=criteria.month or self._period_of(analyses)
        )

    @staticmethod
    def _period_of(analyses: List[AttendanceAnalysis]) -> str:
        """Month of the latest analysed day, "" when there is none."""
        months = sorted(a.date[:7] for a in analyses if parse_date(a.date))
        return months[-1] if months else ""

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def employees_to_notify(self, report: RecapReport) -> List[RecapEntry]:
        """Recap entries whose cumulated lateness exceeds the franchise."""
        franchise = self.shards.load_settings().payroll.lateness_franchise_minutes
        return [entry for entry in report.recap if entry.late_cumul_minutes > franchise]

    def lateness_notification(
        self,
        entry: RecapEntry,
        month: str,
        franchise_minutes: Optional[int] = None
    ) -> LatenessNotification:
        """Build the lateness notification e-mail of one employee."""
        if franchise_minutes is None:
            franchise_minutes = self.shards.load_settings().payroll.lateness_franchise_minutes
        month_name = french_month_label(month)
        subject = f"Notification d'assiduité - Retards cumulés - {month_name}"
        body = (
            f"Bonjour {entry.name},\n\n"
            f"Nous avons effectué une revue de vos pointages pour le mois de {month_name}.\n\n"
            f"À ce jour, votre cumul de retards s'élève à {entry.late_cumul_minutes} minutes.\n\n"
            f"Nous vous rappelons que l'entreprise accorde une franchise mensuelle de "
            f"{franchise_minutes} minutes pour parer aux imprévus. Cependant, votre cumul "
            f"actuel dépasse ce seuil de tolérance.\n\n"
            f"Cordialement,\n\n"
            f"Le Service RH"
        )
        return LatenessNotification(employee_id=entry.employee_id, subject=subject, body=body)

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------
    def export(
        self,
        report: RecapReport,
        xlsx: bool = True,
        pdf: bool = False,
        output_dir: Optional[Path] = None
    ) -> ExportResult:
        """
        Write the recap to Excel and/or PDF.

        Args:
            report: Recap to export
            xlsx: Write the .xlsx workbook
            pdf: Write the .pdf document
            output_dir: Destination; defaults to the configured output directory

        Returns:
            ExportResult with the written paths

        Raises:
            PermissionError / OSError: If files cannot be written
        """
        from infrastructure.excel_writer import ExcelWriter
        from infrastructure.pdf_writer import PdfWriter, format_filename

        settings = self.config.output_settings
        target_dir = output_dir or Path(settings.output_dir or ".")
        target_dir.mkdir(parents=True, exist_ok=True)

        year, month = self._year_month(report.period)
        title = french_month_label(report.period).capitalize() if report.period else "Toutes périodes"
        result = ExportResult()

        if xlsx:
            xlsx_path = target_dir / format_filename(settings.xlsx_filename_pattern, year, month)
            logger.info(f"Écriture Excel: {xlsx_path}")
            ExcelWriter().create_report(report.recap, title, xlsx_path, analyses=report.analyses)
            result.xlsx_path = xlsx_path

        if pdf:
            pdf_path = target_dir / format_filename(settings.pdf_filename_pattern, year, month)
            logger.info(f"Écriture PDF: {pdf_path}")
            writer = PdfWriter(custom_font_path=self.config.paths.custom_font_path or None)
            writer.create_report(report.recap, title, pdf_path)
            if pdf_path.exists():
                result.pdf_path = pdf_path

        return result

    @staticmethod
    def _year_month(period: str):
        day = parse_date(f"{period}-01") if period else None
        if day is None:
            day = date.today()
        return day.year, day.month
