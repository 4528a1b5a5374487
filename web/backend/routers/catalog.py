from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from dlna_catalog.domain.catalog.errors import CatalogError
from dlna_catalog.service import CatalogService
from ..deps import get_service
from ..schemas import CatalogSnapshotResponse

router = APIRouter()


@router.get(
    "/browse/{container_id}",
    response_model=CatalogSnapshotResponse,
    response_model_exclude_unset=True,
)
async def browse(
    container_id: str,
    metadata: bool = False,
    service: CatalogService = Depends(get_service),
):
    """Sync the children of container_id and return the catalog snapshot."""
    try:
        result = await service.orchestrator.sync(container_id, include_metadata=metadata)
    except CatalogError as e:
        logger.exception(f"Sync failed for container {container_id}")
        raise HTTPException(500, str(e))

    return CatalogSnapshotResponse.model_validate(result.snapshot.to_dict())
