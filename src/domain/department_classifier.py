"""
Department Classifier Module

Handles loading department assignments from CSV files and applying them to
the HR settings.
"""

import csv
from pathlib import Path
from typing import Dict

from .entities import Department
from config.hr_settings import HRSettings


class DepartmentClassifier:
    """
    Classifies employees into departments based on CSV data.

    The CSV should have columns: EmployeeId, Department
    where Department is "Sales" or "Back office". Unknown labels fall back
    to Sales.
    """

    ID_COLUMNS = ("EmployeeId", "employeeId", "employee_id", "ID", "Id", "Matricule", "matricule")
    DEPARTMENT_COLUMNS = ("Department", "department", "Département", "Departement", "Dept")

    def __init__(self):
        self._assignments: Dict[str, Department] = {}

    def load_from_csv(self, csv_path: Path) -> Dict[str, Department]:
        """
        Load department assignments from a CSV file.

        Args:
            csv_path: Path to the CSV file (',' or ';' separated)

        Returns:
            Mapping of employee id to Department
        """
        self._assignments = {}

        if not csv_path.exists():
            return {}

        with open(csv_path, 'r', encoding='utf-8-sig', newline='') as f:
            sample = f.readline()
            f.seek(0)
            delimiter = ';' if ';' in sample else ','
            reader = csv.DictReader(f, delimiter=delimiter)
            for row in reader:
                employee_id = self._first_value(row, self.ID_COLUMNS)
                if not employee_id:
                    continue
                department = Department.parse(self._first_value(row, self.DEPARTMENT_COLUMNS))
                self._assignments[employee_id] = department

        return dict(self._assignments)

    @staticmethod
    def _first_value(row: Dict[str, str], columns) -> str:
        for column in columns:
            value = row.get(column)
            if value:
                return value.strip()
        return ""

    def apply_to(self, settings: HRSettings) -> HRSettings:
        """Return settings with every loaded assignment applied."""
        for employee_id, department in self._assignments.items():
            settings = settings.with_department(employee_id, department)
        return settings

    @staticmethod
    def assign(settings: HRSettings, employee_id: str, department: str) -> HRSettings:
        """Return settings with one employee moved to a department."""
        return settings.with_department(employee_id.strip(), Department.parse(department))
