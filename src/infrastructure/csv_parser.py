"""
CSV Parser Module

Reads the delimited exports fed to the engine (time clock punches and
authorized absence lists) and hands their data lines to the RecordIngestor.

Handles the usual spreadsheet artefacts: UTF-8 byte order mark, blank lines,
';' or ',' separators.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from domain.entities import AttendanceError
from domain.record_ingestor import detect_separator
from infrastructure.logger import get_logger

logger = get_logger("CsvParser")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class CsvFormatError(AttendanceError):
    """Raised when a CSV file cannot be read or holds no data line."""
    pass


# ==============================================================================
# Data Classes
# ==============================================================================
@dataclass
class CsvContent:
    """
    Data lines of one CSV file.

    Attributes:
        header: Header line as found in the file
        separator: Column separator detected from the header
        rows: Non-blank data lines, header excluded
    """
    header: str
    separator: str
    rows: List[str] = field(default_factory=list)


# ==============================================================================
# CsvParser Class
# ==============================================================================
class CsvParser:
    """
    Parses CSV exports into raw data lines.

    The first non-blank line is always treated as the header and discarded.
    """

    ENCODING = "utf-8-sig"

    def parse_text(self, text: str) -> CsvContent:
        """
        Split CSV text into header and data lines.

        Raises:
            CsvFormatError: If the text holds no line at all
        """
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            raise CsvFormatError("Le fichier est vide.")

        header = lines[0].lstrip("\ufeff")
        content = CsvContent(
            header=header,
            separator=detect_separator(header),
            rows=lines[1:]
        )
        logger.debug(
            f"En-tête {header!r}, séparateur {content.separator!r}, "
            f"{len(content.rows)} lignes de données"
        )
        return content

    def parse_file(self, file_path: Path) -> CsvContent:
        """
        Read and split a CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            CsvContent with the data lines

        Raises:
            CsvFormatError: If the file is missing, undecodable or empty
        """
        if not file_path.exists():
            raise CsvFormatError(f"Fichier introuvable: {file_path}")

        logger.info(f"Lecture du fichier: {file_path.name}")
        try:
            text = file_path.read_text(encoding=self.ENCODING)
        except UnicodeDecodeError as e:
            raise CsvFormatError(
                f"Le fichier {file_path.name} n'est pas encodé en UTF-8: {e}"
            ) from e

        content = self.parse_text(text)
        logger.info(f"Lecture terminée: {len(content.rows)} lignes")
        return content
