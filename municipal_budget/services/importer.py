"""
Bulk CSV import into the budget store.
"""

import csv
from io import StringIO
from typing import List

from municipal_budget.core.exceptions import EmptyImport
from municipal_budget.core.logging import logger
from municipal_budget.db.store import BudgetStore
from municipal_budget.schemas.budget import ImportResult, NormalizedRow
from municipal_budget.services.normalizer import normalize_row


class CSVImporter:
    """Normalize every row of an uploaded CSV file and write them in one batch."""

    def __init__(self, store: BudgetStore):
        self.store = store

    @staticmethod
    def parse(content: str) -> List[NormalizedRow]:
        """
        Parse CSV text into normalized rows.

        The first line is the header row. Rows that fail normalization are
        skipped without aborting the file.
        Cells follow CSV quoting, so an unquoted amount such as $1,200 spans
        two cells and its row is rejected for the wrong column count.

        Args:
            content: Raw file content

        Returns:
            Accepted rows, in file order
        """
        reader = csv.reader(StringIO(content.lstrip("\ufeff").strip()))
        headers = next(reader, None)
        if not headers:
            return []

        accepted = []
        for line_number, values in enumerate(reader, start=2):
            row = normalize_row(values, headers)
            if row is None:
                logger.debug(f"Skipping CSV line {line_number}: row rejected")
                continue
            accepted.append(row)
        return accepted

    async def import_csv(self, content: str) -> ImportResult:
        """
        Import a CSV file into the store.

        Args:
            content: Raw file content

        Returns:
            Number of records written

        Raises:
            EmptyImport: No row of the file was accepted
            StoreWriteError: The store rejected the bulk write
        """
        rows = self.parse(content)
        if not rows:
            logger.warning("CSV import rejected: no valid budget rows")
            raise EmptyImport()

        imported = await self.store.bulk_insert([row.model_dump() for row in rows])
        logger.info(f"Imported {imported} budget records from CSV")
        return ImportResult(
            imported=imported,
            message=f"Imported {imported} records successfully",
        )
