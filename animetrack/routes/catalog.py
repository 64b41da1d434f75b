from fastapi import APIRouter, Depends, HTTPException
from ..catalog import CatalogGateway, get_catalog

router = APIRouter()


@router.get('/anime/{title_id}')
async def anime_details(title_id: str, catalog: CatalogGateway = Depends(get_catalog)):
    # TitleNotFound / CatalogUnavailable are turned into 404 / 503 by the app's error handler
    return await catalog.get_anime(title_id)


@router.get('/anime/{title_id}/extras')
async def anime_extras(title_id: str, catalog: CatalogGateway = Depends(get_catalog)):
    return await catalog.get_extras(title_id)


@router.get('/player/{title_id}')
async def player(title_id: str, catalog: CatalogGateway = Depends(get_catalog)):
    data = await catalog.get_player(title_id)
    if data is None:
        raise HTTPException(404, 'Player not available')
    return data
