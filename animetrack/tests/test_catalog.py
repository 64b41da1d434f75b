import httpx
import pytest

from animetrack.catalog import CatalogGateway
from animetrack.errors import CatalogUnavailable, TitleNotFound


def gateway(handler, token='kodik-token'):
    return CatalogGateway(
        jikan_base='https://jikan.test/v4',
        kodik_url='https://kodik.test',
        kodik_token=token,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_anime_returns_data_payload():
    def handler(request):
        assert request.url.path == '/v4/anime/5114'
        return httpx.Response(200, json={'data': {'mal_id': 5114, 'title': 'FMA:B', 'episodes': 64}})

    gw = gateway(handler)
    data = await gw.get_anime('5114')
    await gw.aclose()
    assert data == {'mal_id': 5114, 'title': 'FMA:B', 'episodes': 64}


@pytest.mark.asyncio
@pytest.mark.parametrize('response, error', [
    (httpx.Response(404, json={'status': 404}), TitleNotFound),
    (httpx.Response(500, text='boom'), CatalogUnavailable),
    (httpx.Response(429, json={'status': 429}), CatalogUnavailable),
    (httpx.Response(200, text='not json'), CatalogUnavailable),
    (httpx.Response(200, json={'data': []}), CatalogUnavailable),
])
async def test_get_anime_failures(response, error):
    gw = gateway(lambda request: response)
    with pytest.raises(error):
        await gw.get_anime('1')
    await gw.aclose()


@pytest.mark.asyncio
async def test_get_anime_network_error():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    gw = gateway(handler)
    with pytest.raises(CatalogUnavailable):
        await gw.get_anime('1')
    await gw.aclose()


@pytest.mark.asyncio
async def test_extras_degrade_per_part():
    def handler(request):
        if request.url.path.endswith('/pictures'):
            return httpx.Response(200, json={'data': [{'jpg': {'image_url': 'a.jpg'}}]})
        if request.url.path.endswith('/characters'):
            return httpx.Response(503)
        return httpx.Response(200, json={'data': [{'entry': {'mal_id': 2}}]})

    gw = gateway(handler)
    extras = await gw.get_extras('1')
    await gw.aclose()
    assert extras == {
        'pictures': [{'jpg': {'image_url': 'a.jpg'}}],
        'characters': [],
        'recommendations': [{'entry': {'mal_id': 2}}],
    }


@pytest.mark.asyncio
async def test_player_found():
    def handler(request):
        assert request.url.host == 'kodik.test'
        assert request.url.params['shikimori_id'] == '5114'
        assert request.url.params['token'] == 'kodik-token'
        return httpx.Response(200, json={'results': [
            {'link': '//kodik.info/serial/1/abc/720p', 'translation': {'title': 'AniLibria'}, 'last_episode': 64},
            {'link': '//kodik.info/serial/2/def/720p', 'translation': {'title': 'AniDub'}, 'episodes_count': 60},
        ]})

    gw = gateway(handler)
    player = await gw.get_player('5114')
    await gw.aclose()
    assert player['link'] == 'https://kodik.info/serial/1/abc/720p'
    assert player['episodes_total'] == 64
    assert [t['title'] for t in player['translations']] == ['AniLibria', 'AniDub']


@pytest.mark.asyncio
@pytest.mark.parametrize('handler', [
    lambda request: httpx.Response(200, json={'results': []}),
    lambda request: httpx.Response(500),
    lambda request: httpx.Response(200, text='<html>'),
])
async def test_player_missing_is_none(handler):
    gw = gateway(handler)
    assert await gw.get_player('1') is None
    await gw.aclose()


@pytest.mark.asyncio
async def test_player_without_token_skips_lookup():
    def handler(request):
        raise AssertionError('no request expected')

    gw = gateway(handler, token='')
    assert await gw.get_player('1') is None
    await gw.aclose()
