"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between the dataclasses and JSON persistence.

The HR rules themselves (schedules, thresholds, departments) are not part of
this file: they live in the key/value store, see ``config.hr_settings``.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


@dataclass
class Paths:
    """File paths configuration."""
    store_dir: str = "data"         # Répertoire du stockage clé/valeur (JSON)
    log_file: str = ""              # Empty = app.log at project root
    custom_font_path: str = ""      # Custom TTF font for PDF generation


@dataclass
class OutputSettings:
    """Output settings for generated payroll recaps."""
    output_dir: str = ""  # Default empty = project root
    xlsx_filename_pattern: str = "Recap_Paie_{year}_{month}.xlsx"
    pdf_filename_pattern: str = "Recap_Paie_{year}_{month}.pdf"

    # Tri du récapitulatif: "lateness", "deduction" ou "name"
    sort_by: str = "lateness"


@dataclass
class AppConfig:
    """Main application configuration container."""
    paths: Paths = field(default_factory=Paths)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Configuration illisible, valeurs par défaut utilisées: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration values."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "paths": {
                "store_dir": config.paths.store_dir,
                "log_file": config.paths.log_file,
                "custom_font_path": config.paths.custom_font_path
            },
            "output_settings": {
                "output_dir": config.output_settings.output_dir,
                "xlsx_filename_pattern": config.output_settings.xlsx_filename_pattern,
                "pdf_filename_pattern": config.output_settings.pdf_filename_pattern,
                "sort_by": config.output_settings.sort_by
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        paths_data = data.get("paths", {})
        output_settings_data = data.get("output_settings", {})
        defaults = OutputSettings()

        paths = Paths(
            store_dir=paths_data.get("store_dir", "data"),
            log_file=paths_data.get("log_file", ""),
            custom_font_path=paths_data.get("custom_font_path", "")
        )

        output_settings = OutputSettings(
            output_dir=output_settings_data.get("output_dir", ""),
            xlsx_filename_pattern=output_settings_data.get(
                "xlsx_filename_pattern", defaults.xlsx_filename_pattern
            ),
            pdf_filename_pattern=output_settings_data.get(
                "pdf_filename_pattern", defaults.pdf_filename_pattern
            ),
            sort_by=output_settings_data.get("sort_by", defaults.sort_by)
        )

        return AppConfig(paths=paths, output_settings=output_settings)
