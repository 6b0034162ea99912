"""
CSV import endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from municipal_budget.core.deps import get_csv_importer, get_request_client
from municipal_budget.core.exceptions import InvalidInput, MissingUpload
from municipal_budget.core.logging import logger
from municipal_budget.schemas.budget import ImportResult
from municipal_budget.services.importer import CSVImporter

router = APIRouter()


@router.post("", response_model=ImportResult)
async def import_csv(
    file: Optional[UploadFile] = File(None),
    importer: CSVImporter = Depends(get_csv_importer),
    client_info = Depends(get_request_client),
) -> ImportResult:
    """
    Import budget rows from an uploaded CSV file.

    Expected headers are ``Ward, Year, Category, Amount`` in any case.

    Args:
        file: Uploaded CSV file
        importer: CSV importer
        client_info: Client IP and user agent

    Returns:
        Number of imported records
    """
    if file is None:
        raise MissingUpload()

    logger.info(f"CSV import of {file.filename} requested from {client_info['ip_address']}")

    raw = await file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidInput("CSV file must be UTF-8 encoded")

    return await importer.import_csv(content)
