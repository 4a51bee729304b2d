"""Integration tests for the upstream HTTP credit data client"""

import httpx
import pytest
from credito_gateway.domain.exceptions import UpstreamFetchError
from credito_gateway.infrastructure.providers.http import HttpCreditDataProvider


PAYLOADS = {
    "bureau": {"score": 720, "lastUpdate": "2024-03-01"},
    "faturamento": {
        "totalAtual": 180_000,
        "media6m": 170_000,
        "percentualMeta": 98,
        "historico": [{"mes": "fev", "valor": 160_000}, {"mes": "mar", "valor": 180_000}],
    },
    "bom-pagador": {"dividaTotal": 50_000, "valorPago": 40_000, "percentualPago": 0.8},
    "cadastro": {"clienteNome": "Nimbus Tecnologia SA - Tecnologia"},
}


def make_provider(handler, max_retries: int = 3) -> HttpCreditDataProvider:
    return HttpCreditDataProvider(
        base_url="http://upstream.test/",
        timeout=1.0,
        max_retries=max_retries,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
    )


def serve_payloads(request: httpx.Request) -> httpx.Response:
    recurso = request.url.path.rsplit("/", 1)[-1]
    return httpx.Response(200, json=PAYLOADS[recurso])


async def test_fetch_all_maps_camel_case_payloads():
    dados = await make_provider(serve_payloads).fetch_all("12345678000190")

    assert dados.bureau.score == 720
    assert dados.faturamento.media_6m == 170_000
    assert [h.mes for h in dados.faturamento.historico] == ["fev", "mar"]
    assert dados.bom_pagador.percentual_pago == 0.8
    assert dados.cliente_nome == "Nimbus Tecnologia SA - Tecnologia"


async def test_requests_hit_client_resource_urls():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return serve_payloads(request)

    await make_provider(handler).fetch_all("123")

    assert sorted(paths) == [
        "/clientes/123/bom-pagador",
        "/clientes/123/bureau",
        "/clientes/123/cadastro",
        "/clientes/123/faturamento",
    ]


async def test_retries_server_errors_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503)
        return serve_payloads(request)

    bureau = await make_provider(handler).get_bureau("123")

    assert bureau.score == 720
    assert calls["count"] == 3


async def test_gives_up_after_max_retries():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(500)

    with pytest.raises(UpstreamFetchError, match="HTTP 500"):
        await make_provider(handler, max_retries=2).get_bureau("123")

    assert calls["count"] == 2


async def test_client_errors_are_not_retried():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(404)

    with pytest.raises(UpstreamFetchError):
        await make_provider(handler).get_faturamento("123")

    assert calls["count"] == 1


async def test_network_errors_retried():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamFetchError, match="inacessivel"):
        await make_provider(handler).get_cliente_nome("123")


async def test_invalid_payload_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"score": "alto"})

    with pytest.raises(UpstreamFetchError, match="bureau"):
        await make_provider(handler).get_bureau("123")


async def test_non_json_body_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>erro</html>")

    with pytest.raises(UpstreamFetchError, match="Resposta invalida"):
        await make_provider(handler).get_bom_pagador("123")
