import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

# Allow importing the catalog package when run from a checkout
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from media_catalog.config_loader import Config  # type: ignore
from media_catalog.errors import MissingFolderReference, ScanFailed  # type: ignore
from media_catalog.logging_utils import configure_logging  # type: ignore
from media_catalog.scan_service import CatalogService  # type: ignore

CONFIG_PATH = Path(os.getenv("MEDIA_CATALOG_CONFIG", ROOT_DIR / "config.yaml"))

logger = logging.getLogger(__name__)

app = FastAPI(title="Media Catalog API")

config: Optional[Config] = None
catalog_service: Optional[CatalogService] = None


class FolderScanRequest(BaseModel):
    folderUri: Optional[str] = Field(None, description="Folder URI returned by the folder picker")
    withBreakdown: bool = Field(False, description="Also derive albums/artists from matched tracks")


def _init_services() -> None:
    """Initialize shared services once for the API process."""
    global config, catalog_service
    if config and catalog_service:
        return

    try:
        config = Config(str(CONFIG_PATH))
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Config unavailable: {e}")
    configure_logging(level=config.log_level, log_file=config.log_file, force=True)
    catalog_service = CatalogService.from_config(config)
    logger.info("Catalog service initialized")


def get_catalog_service() -> CatalogService:
    _init_services()
    assert catalog_service is not None
    return catalog_service


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))
    yield


app.router.lifespan_context = lifespan


@app.get("/api/health")
def health(service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    """Report which media index the API scans and whether it is present."""
    db_path = getattr(service.index, "db_path", None)
    return {
        "status": "ok",
        "index": str(db_path) if db_path is not None else type(service.index).__name__,
        "index_present": db_path.exists() if db_path is not None else True,
    }


@app.get("/api/scan/music")
def scan_music(
    withLinks: bool = Query(False, description="Add trackIds and artistId to every album"),
    service: CatalogService = Depends(get_catalog_service),
) -> Dict[str, Any]:
    """Full scan: tracks, albums and artists."""
    try:
        return service.scan_music(with_links=withLinks)
    except ScanFailed as e:
        raise HTTPException(status_code=500, detail=e.message)


@app.post("/api/scan/folder")
def scan_folder(
    request: FolderScanRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> Dict[str, Any]:
    """Folder-scoped scan: matching tracks plus the folder label."""
    try:
        return service.scan_folder(request.folderUri, with_breakdown=request.withBreakdown)
    except MissingFolderReference as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ScanFailed as e:
        raise HTTPException(status_code=500, detail=e.message)
