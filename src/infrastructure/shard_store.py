"""
Shard Store Module

Persists the engine's documents in the key/value store:

- ``hr_raw_records``: every imported punch
- ``hr_absences``: every authorized absence
- ``hr_settings``: the HR rule set
- ``hr_analysis_<YYYY-MM>``: the daily analyses of one month
- ``hr_analysis_index``: ``{"months": [...]}`` listing the published shards

Publication order: every month shard is written first and the index last, so
a failed run never advertises a shard that was not written. The legacy
single-document key ``hr_analysis_results`` is read when no index exists and
is never written.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from config.hr_settings import SETTINGS_KEY, HRSettings
from domain.entities import (
    AttendanceAnalysis, AttendanceError, AttendanceStatus, AuthorizedAbsence,
    RawAttendanceRecord, ValidationError
)
from domain.timestamp_normalizer import month_key
from infrastructure.kv_store import KeyValueStore, StorageError
from infrastructure.logger import get_logger

logger = get_logger("ShardStore")

RAW_RECORDS_KEY = "hr_raw_records"
ABSENCES_KEY = "hr_absences"
ANALYSIS_INDEX_KEY = "hr_analysis_index"
LEGACY_ANALYSIS_KEY = "hr_analysis_results"


def shard_key(month: str) -> str:
    """Store key of the analysis shard of a "YYYY-MM" month."""
    return f"hr_analysis_{month}"


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AnalysisNotSavedError(AttendanceError):
    """
    Raised when the analysis shards could not all be written.

    The index is left untouched: readers keep seeing the previous run.
    """
    def __init__(self, month: str, cause: Exception):
        self.month = month
        self.cause = cause
        super().__init__(f"Échec de l'enregistrement du mois {month}: {cause}")


# ==============================================================================
# Data Classes
# ==============================================================================
@dataclass
class SaveResult:
    """Outcome of a successful analysis save."""
    months: List[str] = field(default_factory=list)
    entry_count: int = 0


# ==============================================================================
# ShardStore Class
# ==============================================================================
class ShardStore:
    """Typed access to the documents of the key/value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # ------------------------------------------------------------------
    # Analyses
    # ------------------------------------------------------------------
    def save_analysis(self, analyses: Sequence[AttendanceAnalysis]) -> SaveResult:
        """
        Partition analyses by month and publish them.

        Args:
            analyses: Daily analyses of one run

        Returns:
            SaveResult with the months written, ascending

        Raises:
            AnalysisNotSavedError: If any shard (or the index) cannot be written
        """
        shards: Dict[str, List[dict]] = OrderedDict()
        for analysis in analyses:
            if analysis.status == AttendanceStatus.WEEKEND:
                continue
            month = month_key(analysis.date)
            if not month:
                logger.debug(f"Analyse sans mois exploitable ignorée: {analysis.date!r}")
                continue
            shards.setdefault(month, []).append(analysis.to_dict())

        months = sorted(shards)
        entry_count = sum(len(entries) for entries in shards.values())

        for month in months:
            try:
                self.store.put(shard_key(month), shards[month])
            except StorageError as e:
                logger.error(f"Écriture du mois {month} impossible: {e}")
                raise AnalysisNotSavedError(month, e) from e
            logger.debug(f"Mois {month}: {len(shards[month])} entrées écrites")

        try:
            self.store.put(ANALYSIS_INDEX_KEY, {"months": months})
        except StorageError as e:
            logger.error(f"Écriture de l'index impossible: {e}")
            raise AnalysisNotSavedError("index", e) from e

        logger.info(f"{entry_count} entrées enregistrées sur {len(months)} mois")
        return SaveResult(months=months, entry_count=entry_count)

    def available_months(self) -> List[str]:
        """Months listed by the index, ascending; empty without an index."""
        index = self.store.get(ANALYSIS_INDEX_KEY)
        if not index:
            return []
        return sorted(index.get("months") or [])

    def load_month(self, month: str) -> List[AttendanceAnalysis]:
        """Analyses of one "YYYY-MM" shard (empty when the shard is absent)."""
        documents = self.store.get(shard_key(month)) or []
        return [AttendanceAnalysis.from_dict(doc) for doc in documents]

    def load_all(self) -> List[AttendanceAnalysis]:
        """
        Every published analysis.

        Reads the shards listed by the index, or the legacy single document
        when no index has been written yet.
        """
        index = self.store.get(ANALYSIS_INDEX_KEY)
        if index is None:
            legacy = self.store.get(LEGACY_ANALYSIS_KEY) or []
            if legacy:
                logger.info(f"Lecture de l'ancien format ({len(legacy)} entrées)")
            return [AttendanceAnalysis.from_dict(doc) for doc in legacy]

        analyses: List[AttendanceAnalysis] = []
        for month in sorted(index.get("months") or []):
            analyses.extend(self.load_month(month))
        return analyses

    # ------------------------------------------------------------------
    # Inputs and settings
    # ------------------------------------------------------------------
    def load_raw_records(self) -> List[RawAttendanceRecord]:
        documents = self.store.get(RAW_RECORDS_KEY) or []
        return [RawAttendanceRecord.from_dict(doc) for doc in documents]

    def save_raw_records(self, records: Sequence[RawAttendanceRecord]) -> None:
        self.store.put(RAW_RECORDS_KEY, [record.to_dict() for record in records])

    def load_absences(self) -> List[AuthorizedAbsence]:
        """Stored absences; entries with an unknown type are skipped."""
        absences: List[AuthorizedAbsence] = []
        for doc in self.store.get(ABSENCES_KEY) or []:
            try:
                absences.append(AuthorizedAbsence.from_dict(doc))
            except ValidationError as e:
                logger.warning(f"Absence ignorée: {e}")
        return absences

    def save_absences(self, absences: Sequence[AuthorizedAbsence]) -> None:
        self.store.put(ABSENCES_KEY, [absence.to_dict() for absence in absences])

    def load_settings(self) -> HRSettings:
        """Stored settings merged over the defaults."""
        return HRSettings.from_dict(self.store.get(SETTINGS_KEY) or {})

    def save_settings(self, settings: HRSettings) -> None:
        self.store.put(SETTINGS_KEY, settings.to_dict())
