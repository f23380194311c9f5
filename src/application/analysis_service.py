"""
Analysis Service Module

Application layer service that orchestrates imports, manual registry
operations and analysis runs against the key/value store.
Separates business logic from the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from config.hr_settings import HRSettings
from domain.absence_registry import AbsenceRegistry
from domain.analysis_filter import Employee, build_employee_list
from domain.daily_classifier import DailyClassifier
from domain.department_classifier import DepartmentClassifier
from domain.entities import AbsenceType, AuthorizedAbsence, ValidationError
from domain.record_ingestor import RecordIngestor
from infrastructure.csv_parser import CsvParser
from infrastructure.kv_store import KeyValueStore, StorageError
from infrastructure.logger import get_logger
from infrastructure.shard_store import AnalysisNotSavedError, ShardStore

logger = get_logger("AnalysisService")


@dataclass
class ImportResult:
    """Result of a CSV import or a manual registry change."""
    added: int
    duplicates: int = 0
    rejected: int = 0
    total: int = 0
    message: str = ""


@dataclass
class AnalysisResult:
    """Result of an analysis run."""
    success: bool
    entry_count: int = 0
    months: List[str] = field(default_factory=list)
    message: str = ""


class AttendanceAnalysisService:
    """
    Application service for the attendance workflow.

    This service:
    - Merges imported punches and absences into the stored lists
    - Maintains the absence registry and the department map
    - Runs the classifier over the stored inputs and publishes the month shards
    """

    def __init__(
        self,
        store: KeyValueStore,
        classifier: Optional[DailyClassifier] = None,
        parser: Optional[CsvParser] = None
    ):
        self.shards = ShardStore(store)
        self.classifier = classifier or DailyClassifier()
        self.parser = parser or CsvParser()
        self.ingestor = RecordIngestor()

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------
    def import_punches(self, csv_path: Path) -> ImportResult:
        """
        Merge a time clock export into the stored punches.

        Raises:
            CsvFormatError: If the file cannot be read
            StorageError: If the store cannot be read or written
        """
        content = self.parser.parse_file(csv_path)
        existing = self.shards.load_raw_records()
        result = self.ingestor.ingest(existing, content.rows, content.separator)

        if not result.accepted:
            message = (
                f"Le fichier contient {len(content.rows)} lignes, mais aucun nouveau pointage "
                f"(doublons: {result.duplicate_count}, rejetées: {result.rejected_count})."
            )
            logger.info(message)
            return ImportResult(
                added=0,
                duplicates=result.duplicate_count,
                rejected=result.rejected_count,
                total=len(existing),
                message=message
            )

        updated = existing + result.accepted
        self.shards.save_raw_records(updated)
        message = (
            f"{len(result.accepted)} pointages ajoutés aux {len(existing)} déjà existants "
            f"(base totale : {len(updated)})."
        )
        logger.info(message)
        return ImportResult(
            added=len(result.accepted),
            duplicates=result.duplicate_count,
            rejected=result.rejected_count,
            total=len(updated),
            message=message
        )

    def import_absences(self, csv_path: Path) -> ImportResult:
        """
        Merge an absence list into the stored registry.

        Raises:
            CsvFormatError: If the file cannot be read
            StorageError: If the store cannot be read or written
        """
        content = self.parser.parse_file(csv_path)
        existing = self.shards.load_absences()
        result = self.ingestor.ingest_absences(existing, content.rows, content.separator)

        if not result.accepted:
            message = "Aucune nouvelle absence détectée dans ce fichier."
            logger.info(message)
            return ImportResult(
                added=0,
                duplicates=result.duplicate_count,
                rejected=result.rejected_count,
                total=len(existing),
                message=message
            )

        updated = existing + result.accepted
        self.shards.save_absences(updated)
        message = f"{len(result.accepted)} absences ajoutées au registre."
        logger.info(message)
        return ImportResult(
            added=len(result.accepted),
            duplicates=result.duplicate_count,
            rejected=result.rejected_count,
            total=len(updated),
            message=message
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def add_absence(
        self,
        employee_id: str,
        date_start: str,
        date_end: str,
        absence_type: str,
        comment: str = "",
        start_time: Optional[str] = None,
        end_time: Optional[str] = None
    ) -> ImportResult:
        """
        Register an absence over a date range.

        Raises:
            ValidationError: Invalid input or every day already registered
        """
        parsed_type = AbsenceType.parse(absence_type)
        if parsed_type is None:
            raise ValidationError(f"Type d'absence inconnu: {absence_type!r}")

        existing = self.shards.load_absences()
        new_entries = AbsenceRegistry.add_range(
            existing, employee_id, date_start, date_end, parsed_type,
            comment, start_time, end_time
        )
        if not new_entries:
            raise ValidationError("Ces dates sont déjà enregistrées pour ce collaborateur.")

        # Les saisies manuelles passent en tête du registre
        updated = new_entries + existing
        self.shards.save_absences(updated)
        message = f"{len(new_entries)} jour(s) validé(s)."
        logger.info(f"Absence {parsed_type.value} pour {employee_id}: {message}")
        return ImportResult(added=len(new_entries), total=len(updated), message=message)

    def remove_absence(self, index: int) -> AuthorizedAbsence:
        """Delete the registry entry at ``index`` and return it."""
        existing = self.shards.load_absences()
        updated = AbsenceRegistry.remove(existing, index)
        self.shards.save_absences(updated)
        removed = existing[index]
        logger.info(f"Absence supprimée: {removed.employee_id} {removed.date}")
        return removed

    def list_absences(self) -> List[AuthorizedAbsence]:
        return self.shards.load_absences()

    def assign_department(self, employee_id: str, department: str) -> HRSettings:
        """Move one employee to a department and persist the settings."""
        settings = DepartmentClassifier.assign(self.shards.load_settings(), employee_id, department)
        self.shards.save_settings(settings)
        logger.info(f"{employee_id} affecté à {settings.department_of(employee_id.strip()).value}")
        return settings

    def import_departments(self, csv_path: Path) -> int:
        """
        Apply a department CSV to the stored settings.

        Returns:
            Number of assignments read from the file
        """
        classifier = DepartmentClassifier()
        assignments = classifier.load_from_csv(csv_path)
        if not assignments:
            logger.warning(f"Aucune affectation trouvée dans {csv_path}")
            return 0
        settings = classifier.apply_to(self.shards.load_settings())
        self.shards.save_settings(settings)
        logger.info(f"{len(assignments)} affectations de département importées")
        return len(assignments)

    def employees(self) -> List[Employee]:
        """Employees known from the punches and the absence registry."""
        return build_employee_list(self.shards.load_raw_records(), self.shards.load_absences())

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    def run_analysis(self) -> AnalysisResult:
        """
        Classify every stored employee-day and publish the month shards.

        Never raises for storage failures: the outcome is reported in the
        result and the previous index stays in place.
        """
        try:
            records = self.shards.load_raw_records()
            absences = self.shards.load_absences()
            settings = self.shards.load_settings()
        except StorageError as e:
            logger.error(f"Lecture des données impossible: {e}")
            return AnalysisResult(
                success=False,
                message="Une erreur est survenue lors du calcul. Vérifiez les données brutes."
            )

        if not records and not absences:
            logger.warning("Analyse demandée sans pointage ni absence enregistrés")
            return AnalysisResult(success=False, message="Aucune donnée à analyser.")

        logger.info(f"Analyse de {len(records)} pointages et {len(absences)} absences")
        analyses = self.classifier.classify(records, absences, settings)

        try:
            saved = self.shards.save_analysis(analyses)
        except AnalysisNotSavedError as e:
            logger.error(str(e))
            return AnalysisResult(
                success=False,
                message="Une erreur est survenue lors de l'enregistrement. L'analyse précédente est conservée."
            )

        return AnalysisResult(
            success=True,
            entry_count=saved.entry_count,
            months=saved.months,
            message=(
                f"Les calculs ont été sauvegardés ({saved.entry_count} entrées, "
                f"{len(saved.months)} mois)."
            )
        )

    def clear_raw_records(self) -> None:
        """Erase every stored punch."""
        self.shards.save_raw_records([])
        logger.info("Tous les pointages ont été effacés.")
