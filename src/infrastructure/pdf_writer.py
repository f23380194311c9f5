"""
PDF Writer Module

Generates formatted PDF payroll recaps using fpdf2.
Replicates the Excel recap table with compliance color coding.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from fpdf import FPDF

from domain.entities import RecapEntry
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")


# ==============================================================================
# Font Configuration
# ==============================================================================
WINDOWS_FONT_PATHS: List[Path] = [
    Path("C:/Windows/Fonts/arial.ttf"),
    Path("C:/Windows/Fonts/segoeui.ttf"),
    Path("C:/Windows/Fonts/calibri.ttf"),
]

MACOS_FONT_PATHS: List[Path] = [
    Path("/Library/Fonts/Arial Unicode.ttf"),
    Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
]

LINUX_FONT_PATHS: List[Path] = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
    Path("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf"),
]

FALLBACK_FONT = "Helvetica"


def find_unicode_font(custom_font_path: Optional[str] = None) -> Optional[Path]:
    """
    Search for an available Unicode TTF font with cross-platform support.
    """
    if custom_font_path:
        custom_path = Path(custom_font_path)
        if custom_path.exists():
            logger.info(f"Police personnalisée utilisée: {custom_path}")
            return custom_path
        else:
            logger.warning(f"Police personnalisée introuvable: {custom_path}")

    for font_path in _get_platform_fonts():
        if font_path.exists():
            logger.debug(f"Police système trouvée: {font_path}")
            return font_path

    return None


def _get_platform_fonts() -> List[Path]:
    """Get the font search list for the current platform."""
    if sys.platform == 'win32':
        return WINDOWS_FONT_PATHS
    elif sys.platform == 'darwin':
        return MACOS_FONT_PATHS
    else:
        return LINUX_FONT_PATHS


# ==============================================================================
# RecapPdf Class (A4 Landscape)
# ==============================================================================
class RecapPdf(FPDF):
    """
    Custom FPDF class with Unicode font support for A4 landscape recaps.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        # A4 Landscape: 297mm x 210mm
        super().__init__(orientation='L', unit='mm', format='A4')
        self.title_text = title
        self._setup_font(custom_font_path)

    def _setup_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load a Unicode font if available."""
        font_path = find_unicode_font(custom_font_path)

        if font_path:
            try:
                self.add_font("RecapFont", "", str(font_path))
                self._font_family = "RecapFont"
                self._font_loaded = True
                logger.debug(f"Police chargée: {font_path.name}")
            except (OSError, RuntimeError) as e:
                logger.warning(f"Impossible de charger la police {font_path}: {e}")
                self._font_family = FALLBACK_FONT
                self._font_loaded = False
        else:
            logger.debug("Aucune police Unicode trouvée, Helvetica utilisée.")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    def safe_text(self, text: str) -> str:
        """Replace characters the core Helvetica font cannot encode."""
        if self._font_loaded:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.cell(0, 10, self.safe_text(self.title_text), align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(3)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.cell(0, 10, f'Page {self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates PDF payroll recaps that replicate the Excel recap sheet.

    Features:
    - A4 Landscape, one row per employee
    - Header row repeated on every page
    - Green/Red status cell for compliant / non-compliant employees
    - Total deduction row
    """

    # RGB Color definitions (matching ExcelWriter)
    COLORS: Dict[str, Tuple[int, int, int]] = {
        'green': (144, 238, 144),
        'red': (255, 107, 107),
        'header': (68, 114, 196),
        'white': (255, 255, 255),
    }

    PAGE_HEIGHT = 210
    BOTTOM_MARGIN = 15
    HEADER_ROW_HEIGHT = 10
    DATA_ROW_HEIGHT = 7

    # (label, width mm)
    COLUMNS: List[Tuple[str, float]] = [
        ("Matricule", 22),
        ("Collaborateur", 56),
        ("Travaillés", 20),
        ("Réunions", 18),
        ("Retard (min)", 22),
        ("Abs. inj.", 18),
        ("Abs. aut.", 18),
        ("Incomplets", 20),
        ("Retenue retards", 28),
        ("Retenue totale", 28),
        ("Statut", 27),
    ]

    def __init__(self, custom_font_path: Optional[str] = None):
        self._custom_font_path = custom_font_path

    def create_report(
        self,
        recap: Sequence[RecapEntry],
        title: str,
        output_path: Path
    ) -> None:
        """
        Create the payroll recap PDF.

        Args:
            recap: Recap entries in display order
            title: Period label (e.g. "Mars 2024")
            output_path: Destination file
        """
        if not recap:
            logger.info("Récapitulatif vide, aucun PDF généré")
            return

        pdf = RecapPdf(title=f"Récapitulatif de paie - {title}", custom_font_path=self._custom_font_path)
        pdf.alias_nb_pages()
        pdf.set_auto_page_break(auto=False)
        pdf.add_page()

        table_width = sum(width for _, width in self.COLUMNS)
        start_x = (pdf.w - table_width) / 2

        self._draw_header_row(pdf, start_x)
        for entry in recap:
            if pdf.get_y() + self.DATA_ROW_HEIGHT > self.PAGE_HEIGHT - self.BOTTOM_MARGIN:
                pdf.add_page()
                self._draw_header_row(pdf, start_x)
            self._draw_entry_row(pdf, entry, start_x)

        self._draw_total_row(pdf, recap, start_x)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF enregistré: {output_path}")

    def _draw_header_row(self, pdf: RecapPdf, start_x: float) -> None:
        """Draw the column header row."""
        pdf.set_font(pdf.font_family_name, '', 8)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(255, 255, 255)
        pdf.set_x(start_x)
        for label, width in self.COLUMNS:
            pdf.cell(width, self.HEADER_ROW_HEIGHT, pdf.safe_text(label), border=1, align='C', fill=True)
        pdf.ln(self.HEADER_ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

    def _draw_entry_row(self, pdf: RecapPdf, entry: RecapEntry, start_x: float) -> None:
        """Draw one employee row."""
        values = [
            entry.employee_id,
            entry.name,
            str(entry.worked),
            str(entry.meetings),
            str(entry.late_cumul_minutes),
            str(entry.abs_unauthorized),
            str(entry.abs_authorized),
            str(entry.incomplete),
            _format_amount(entry.lateness_deduction),
            _format_amount(entry.deduction),
        ]

        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.set_x(start_x)
        for index, ((_, width), value) in enumerate(zip(self.COLUMNS, values)):
            # Le nom est aligné à gauche
            align = 'L' if index == 1 else 'C'
            pdf.cell(width, self.DATA_ROW_HEIGHT, pdf.safe_text(value), border=1, align=align)

        status_color = self.COLORS['green' if entry.is_compliant else 'red']
        pdf.set_fill_color(*status_color)
        pdf.cell(
            self.COLUMNS[-1][1], self.DATA_ROW_HEIGHT,
            pdf.safe_text("En règle" if entry.is_compliant else "Litige"),
            border=1, align='C', fill=True
        )
        pdf.ln(self.DATA_ROW_HEIGHT)

    def _draw_total_row(self, pdf: RecapPdf, recap: Sequence[RecapEntry], start_x: float) -> None:
        """Draw the total deduction under the table."""
        label_width = sum(width for _, width in self.COLUMNS[:-2])
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.set_x(start_x)
        pdf.cell(label_width, self.DATA_ROW_HEIGHT, "Total", border=1, align='R')
        pdf.cell(
            self.COLUMNS[-2][1], self.DATA_ROW_HEIGHT,
            _format_amount(sum(entry.deduction for entry in recap)),
            border=1, align='C'
        )
        pdf.ln(self.DATA_ROW_HEIGHT)


# ==============================================================================
# Utility Functions
# ==============================================================================
def _format_amount(value: float) -> str:
    """Amounts in DH, without decimals when whole."""
    if float(value).is_integer():
        return f"{int(value)} DH"
    return f"{value:.2f} DH"


def format_filename(pattern: str, year: int, month: int) -> str:
    """Format filename pattern with placeholders."""
    return pattern.format(
        year=year,
        month=f"{month:02d}"
    )
