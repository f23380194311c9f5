"""
Attendance Reconciliation Engine

Command line entry point: imports time clock punches and authorized
absences, classifies every employee-day and produces the monthly payroll
recap.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.analysis_service import AttendanceAnalysisService
from application.report_service import PayrollReportService
from config.config_manager import AppConfig, ConfigManager
from domain.analysis_filter import AnalysisFilter
from domain.entities import AttendanceError, Department
from infrastructure.kv_store import JsonFileStore
from infrastructure.logger import configure_logging, get_logger

logger = get_logger("Main")

PROJECT_ROOT = Path(__file__).parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attendance",
        description="Rapprochement des pointages et récapitulatif de paie"
    )
    parser.add_argument("--config", type=Path, help="Fichier de configuration JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Journal détaillé sur la console")
    commands = parser.add_subparsers(dest="command", required=True)

    cmd = commands.add_parser("import-punches", help="Importer un export de badgeuse (CSV)")
    cmd.add_argument("file", type=Path)

    cmd = commands.add_parser("import-absences", help="Importer une liste d'absences (CSV)")
    cmd.add_argument("file", type=Path)

    cmd = commands.add_parser("add-absence", help="Enregistrer une absence sur une période")
    cmd.add_argument("employee_id")
    cmd.add_argument("date_start", help="YYYY-MM-DD")
    cmd.add_argument("date_end", nargs="?", help="YYYY-MM-DD (défaut: date de début)")
    cmd.add_argument("--type", dest="absence_type", default="Autorisation")
    cmd.add_argument("--comment", default="")
    cmd.add_argument("--start", dest="start_time", help="HH:MM (autorisation partielle)")
    cmd.add_argument("--end", dest="end_time", help="HH:MM (autorisation partielle)")

    cmd = commands.add_parser("assign-department", help="Affecter un collaborateur à un département")
    cmd.add_argument("employee_id")
    cmd.add_argument("department", choices=[d.value for d in Department])

    cmd = commands.add_parser("import-departments", help="Importer les affectations (CSV)")
    cmd.add_argument("file", type=Path)

    commands.add_parser("analyze", help="Analyser tous les pointages enregistrés")

    cmd = commands.add_parser("recap", help="Récapitulatif de paie")
    cmd.add_argument("--month", help="YYYY-MM")
    cmd.add_argument("--department", choices=[d.value for d in Department])
    cmd.add_argument("--employee", help="Matricule")
    cmd.add_argument("--xlsx", action="store_true", help="Exporter en Excel")
    cmd.add_argument("--pdf", action="store_true", help="Exporter en PDF")
    cmd.add_argument("--output-dir", type=Path)
    cmd.add_argument("--notify", action="store_true", help="Afficher les notifications de retard")

    commands.add_parser("clear-records", help="Effacer tous les pointages")
    return parser


def _store_for(config: AppConfig) -> JsonFileStore:
    store_dir = Path(config.paths.store_dir or "data")
    if not store_dir.is_absolute():
        store_dir = PROJECT_ROOT / store_dir
    return JsonFileStore(store_dir)


def run(args: argparse.Namespace, config: AppConfig) -> str:
    """
    Execute one command.

    Returns:
        The outcome line to print

    Raises:
        AttendanceError: On invalid input, unreadable files or storage failures
    """
    store = _store_for(config)
    analysis = AttendanceAnalysisService(store)

    if args.command == "import-punches":
        return analysis.import_punches(args.file).message
    if args.command == "import-absences":
        return analysis.import_absences(args.file).message
    if args.command == "add-absence":
        return analysis.add_absence(
            args.employee_id, args.date_start, args.date_end or args.date_start,
            args.absence_type, args.comment, args.start_time, args.end_time
        ).message
    if args.command == "assign-department":
        settings = analysis.assign_department(args.employee_id, args.department)
        return f"{args.employee_id} affecté à {settings.department_of(args.employee_id).value}."
    if args.command == "import-departments":
        count = analysis.import_departments(args.file)
        return f"{count} affectation(s) importée(s)."
    if args.command == "analyze":
        result = analysis.run_analysis()
        if not result.success:
            raise AttendanceError(result.message)
        return result.message
    if args.command == "clear-records":
        analysis.clear_raw_records()
        return "Tous les pointages ont été effacés."
    if args.command == "recap":
        return _recap(args, store, config)
    raise AttendanceError(f"Commande inconnue: {args.command}")


def _recap(args: argparse.Namespace, store: JsonFileStore, config: AppConfig) -> str:
    reports = PayrollReportService(store, config)
    criteria = AnalysisFilter(
        employee_id=args.employee,
        department=Department.parse(args.department) if args.department else None,
        month=args.month,
    )
    report = reports.build_recap(criteria)

    for entry in report.recap:
        status = "En règle" if entry.is_compliant else "Litige"
        print(
            f"{entry.employee_id:<10} {entry.name:<28} travaillés={entry.worked:<3} "
            f"retard={entry.late_cumul_minutes:>4} min  retenue={entry.deduction:>8.2f}  {status}"
        )

    if args.xlsx or args.pdf:
        exported = reports.export(report, xlsx=args.xlsx, pdf=args.pdf, output_dir=args.output_dir)
        for path in (exported.xlsx_path, exported.pdf_path):
            if path:
                print(f"Fichier écrit: {path}")

    if args.notify:
        for entry in reports.employees_to_notify(report):
            notification = reports.lateness_notification(entry, report.period)
            print(f"\n--- {entry.employee_id} ---\nObjet: {notification.subject}\n\n{notification.body}\n")

    stats = report.stats
    return (
        f"{stats.total} journées, présence {stats.presence_rate:.1f}%, "
        f"retards {stats.global_late_minutes / 60:.1f}h, litiges {stats.disputes}, "
        f"retenues {stats.global_deductions:.2f} DH"
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    config = ConfigManager(args.config).load()
    configure_logging(config.paths.log_file or None, verbose=args.verbose)

    try:
        message = run(args, config)
    except AttendanceError as e:
        logger.debug(f"Commande {args.command} en échec", exc_info=True)
        print(f"Échec: {e}")
        return 1
    except OSError as e:
        logger.debug(f"Erreur fichier pendant {args.command}", exc_info=True)
        print(f"Échec: {e}")
        return 1

    print(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
