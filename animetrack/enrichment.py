"""
Background enrichment of list entries with catalog details.

Items are fetched one at a time with a pause between them so a long list
does not trip the catalog's rate limits. A run belongs to its owner: leaving
the ``async with`` block (or calling ``cancel()``) stops it.
"""
import os
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional
from .errors import CatalogUnavailable

logger = logging.getLogger(__name__)

ENRICH_DELAY = float(os.getenv('ENRICH_DELAY', '0.3'))
ENRICH_ATTEMPTS = int(os.getenv('ENRICH_ATTEMPTS', '5'))
ENRICH_BACKOFF = float(os.getenv('ENRICH_BACKOFF', '1.0'))
ENRICH_DEADLINE = float(os.getenv('ENRICH_DEADLINE', '20'))

PLACEHOLDER_POSTER = '/placeholder-anime.jpg'

Fetcher = Callable[[str], Awaitable[dict]]


def entry_key(entry: dict) -> Optional[str]:
    key = entry.get('shikimori_id') or entry.get('mal_id')
    return str(key) if key else None


def placeholder(entry: dict) -> dict:
    key = entry_key(entry)
    return {
        **entry,
        'title': entry.get('title') or f'Anime {key}',
        'poster_url': entry.get('poster_url') or PLACEHOLDER_POSTER,
        'synopsis': None,
        'score': None,
        'episodes': entry.get('episodes_total'),
        'details_loaded': False,
        'load_error': True,
    }


def merge(details: dict, entry: dict) -> dict:
    # user fields (status, dates) win over catalog fields
    merged = {**details, **{k: v for k, v in entry.items() if v is not None}}
    merged['status'] = entry.get('status')
    merged['details_loaded'] = True
    merged['load_error'] = False
    return merged


class ListEnricher:

    def __init__(self, fetch: Fetcher, delay: float = None, attempts: int = None, backoff: float = None):
        self.fetch = fetch
        self.delay = ENRICH_DELAY if delay is None else delay
        self.attempts = max(1, ENRICH_ATTEMPTS if attempts is None else attempts)
        self.backoff = ENRICH_BACKOFF if backoff is None else backoff
        self.results: Dict[str, dict] = {}
        self._task: Optional[asyncio.Task] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.cancel()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, entries: List[dict]) -> asyncio.Task:
        """(Re)start enrichment; a run already in flight is cancelled first."""
        await self.cancel()
        self._task = asyncio.create_task(self._run(list(entries)))
        return self._task

    async def cancel(self):
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self, timeout: float = None) -> Dict[str, dict]:
        """Wait for the run. After `timeout` seconds the run is cancelled and
        the results gathered so far are returned."""
        task = self._task
        if task is None:
            return self.results
        if timeout is None:
            await task
            return self.results
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if task in done:
            await task
        else:
            logger.warning({'msg': 'enrich_deadline_exceeded', 'done': len(self.results), 'timeout': timeout})
            await self.cancel()
        return self.results

    def merged(self, entries: List[dict]) -> List[dict]:
        """Entries in their original order, enriched where a result exists."""
        out = []
        for entry in entries:
            result = self.results.get(entry_key(entry))
            out.append(result if result is not None else {**entry, 'details_loaded': False})
        return out

    async def _fetch_with_retry(self, key: str) -> dict:
        for attempt in range(1, self.attempts + 1):
            try:
                return await self.fetch(key)
            except CatalogUnavailable:
                if attempt == self.attempts:
                    raise
                await asyncio.sleep(self.backoff * attempt)

    async def _run(self, entries: List[dict]):
        for i, entry in enumerate(entries):
            key = entry_key(entry)
            if not key:
                continue
            if i and self.delay:
                await asyncio.sleep(self.delay)
            try:
                details = await self._fetch_with_retry(key)
            except Exception as e:
                logger.warning({'msg': 'enrich_item_failed', 'title_id': key, 'error': str(e)})
                self.results[key] = placeholder(entry)
            else:
                self.results[key] = merge(details or {}, entry)
