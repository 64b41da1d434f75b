"""
Catalog Gateway
Pass-through lookups against the public anime catalog (Jikan) and the
player source (Kodik). Nothing is stored locally.
"""
import os
import httpx
import logging
from typing import Optional
from .errors import CatalogUnavailable, TitleNotFound
from .core import CATALOG_FAILURES

logger = logging.getLogger(__name__)

JIKAN_BASE_URL = os.getenv('JIKAN_BASE_URL', 'https://api.jikan.moe/v4')
KODIK_API_URL = os.getenv('KODIK_API_URL', 'https://kodikapi.com')
KODIK_TOKEN = os.getenv('KODIK_TOKEN')
CATALOG_TIMEOUT = float(os.getenv('CATALOG_TIMEOUT', '10'))

EXTRAS = ('pictures', 'characters', 'recommendations')


class CatalogGateway:
    """Thin async client for the catalog and player APIs"""

    def __init__(self, jikan_base: str = None, kodik_url: str = None, kodik_token: str = None,
                 timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.jikan_base = (jikan_base or JIKAN_BASE_URL).rstrip('/')
        self.kodik_url = (kodik_url or KODIK_API_URL).rstrip('/')
        self.kodik_token = kodik_token if kodik_token is not None else KODIK_TOKEN
        self.timeout = timeout or CATALOG_TIMEOUT
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                headers={'Accept': 'application/json'},
            )
        return self._client

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_anime(self, title_id) -> dict:
        """Full catalog record for a title.

        Raises TitleNotFound when the catalog has no such title and
        CatalogUnavailable for any other upstream failure.
        """
        url = f'{self.jikan_base}/anime/{title_id}'
        try:
            resp = await self.client.get(url)
        except httpx.HTTPError as e:
            CATALOG_FAILURES.labels(source='jikan').inc()
            logger.warning({'msg': 'catalog_request_failed', 'title_id': str(title_id), 'error': str(e)})
            raise CatalogUnavailable()

        if resp.status_code == 404:
            raise TitleNotFound()
        if resp.status_code >= 400:
            CATALOG_FAILURES.labels(source='jikan').inc()
            logger.warning({'msg': 'catalog_bad_status', 'title_id': str(title_id), 'status': resp.status_code})
            raise CatalogUnavailable()

        try:
            body = resp.json()
        except ValueError:
            CATALOG_FAILURES.labels(source='jikan').inc()
            logger.warning({'msg': 'catalog_bad_body', 'title_id': str(title_id)})
            raise CatalogUnavailable()
        data = body.get('data', body) if isinstance(body, dict) else None
        if not isinstance(data, dict):
            CATALOG_FAILURES.labels(source='jikan').inc()
            raise CatalogUnavailable()
        return data

    async def _get_extra(self, title_id, part: str) -> list:
        try:
            resp = await self.client.get(f'{self.jikan_base}/anime/{title_id}/{part}')
            resp.raise_for_status()
            data = resp.json().get('data')
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning({'msg': 'catalog_extra_failed', 'title_id': str(title_id), 'part': part, 'error': str(e)})
            return []
        return data if isinstance(data, list) else []

    async def get_extras(self, title_id) -> dict:
        """Pictures, characters and recommendations; a failed part comes back empty."""
        return {part: await self._get_extra(title_id, part) for part in EXTRAS}

    async def get_player(self, title_id) -> Optional[dict]:
        """Player links for a title, or None when no player is available.

        A missing player is an ordinary outcome, so failures are logged at
        info level and never raised.
        """
        if not self.kodik_token:
            logger.info({'msg': 'player_source_not_configured'})
            return None
        params = {'token': self.kodik_token, 'shikimori_id': str(title_id), 'with_episodes': 'true'}
        try:
            resp = await self.client.get(f'{self.kodik_url}/search', params=params)
            resp.raise_for_status()
            results = resp.json().get('results') or []
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            CATALOG_FAILURES.labels(source='kodik').inc()
            logger.info({'msg': 'player_lookup_failed', 'title_id': str(title_id), 'error': str(e)})
            return None

        results = [r for r in results if isinstance(r, dict) and r.get('link')]
        if not results:
            logger.info({'msg': 'player_not_found', 'title_id': str(title_id)})
            return None

        episodes = [r.get('last_episode') or r.get('episodes_count') or 0 for r in results]
        link = results[0]['link']
        return {
            'title_id': str(title_id),
            'link': f'https:{link}' if link.startswith('//') else link,
            'episodes_total': max(episodes) or None,
            'translations': [
                {'title': (r.get('translation') or {}).get('title'), 'link': r['link']}
                for r in results
            ],
        }


# Global instance
catalog = CatalogGateway()

def get_catalog() -> CatalogGateway:
    return catalog
