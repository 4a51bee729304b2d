"""Credit data provider interface"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

from credito_gateway.domain.models import BomPagadorData, BureauData, FaturamentoData


@dataclass(frozen=True)
class ClientCreditData:
    """Everything the eligibility engine needs about one client"""

    cliente_nome: str
    bureau: BureauData
    faturamento: FaturamentoData
    bom_pagador: BomPagadorData


class CreditDataProvider(ABC):
    """Source of bureau, revenue and payment-history data keyed by document digits"""

    @abstractmethod
    async def get_bureau(self, documento: str) -> BureauData: ...

    @abstractmethod
    async def get_faturamento(self, documento: str) -> FaturamentoData: ...

    @abstractmethod
    async def get_bom_pagador(self, documento: str) -> BomPagadorData: ...

    @abstractmethod
    async def get_cliente_nome(self, documento: str) -> str: ...

    async def fetch_all(self, documento: str) -> ClientCreditData:
        """
        Fetch the four facets concurrently.

        Raises:
            UpstreamFetchError: any facet unavailable
        """
        tasks = [
            asyncio.ensure_future(self.get_bureau(documento)),
            asyncio.ensure_future(self.get_bom_pagador(documento)),
            asyncio.ensure_future(self.get_faturamento(documento)),
            asyncio.ensure_future(self.get_cliente_nome(documento)),
        ]
        try:
            bureau, bom_pagador, faturamento, cliente_nome = await asyncio.gather(*tasks)
        except BaseException:
            # first failure stops the remaining fetches
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return ClientCreditData(
            cliente_nome=cliente_nome,
            bureau=bureau,
            faturamento=faturamento,
            bom_pagador=bom_pagador,
        )
