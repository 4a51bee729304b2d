from fastapi import FastAPI

from credito_gateway.infrastructure.providers.seeded import SeededCreditDataProvider

app = FastAPI(title="Mock Credit Data Server", version="1.0.0")
provider = SeededCreditDataProvider()


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/clientes/{documento}/bureau")
async def get_bureau(documento: str):
    bureau = await provider.get_bureau(documento)
    return {"score": bureau.score, "lastUpdate": bureau.last_update}


@app.get("/clientes/{documento}/faturamento")
async def get_faturamento(documento: str):
    faturamento = await provider.get_faturamento(documento)
    return {
        "totalAtual": faturamento.total_atual,
        "media6m": faturamento.media_6m,
        "percentualMeta": faturamento.percentual_meta,
        "historico": [{"mes": h.mes, "valor": h.valor} for h in faturamento.historico],
    }


@app.get("/clientes/{documento}/bom-pagador")
async def get_bom_pagador(documento: str):
    bom_pagador = await provider.get_bom_pagador(documento)
    return {
        "dividaTotal": bom_pagador.divida_total,
        "valorPago": bom_pagador.valor_pago,
        "percentualPago": bom_pagador.percentual_pago,
    }


@app.get("/clientes/{documento}/cadastro")
async def get_cadastro(documento: str):
    return {"clienteNome": await provider.get_cliente_nome(documento)}
