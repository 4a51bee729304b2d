"""Pydantic schemas for API request/response validation

Wire format is camelCase (clienteId, faixaSugerida...); Python attributes
stay snake_case.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from credito_gateway.domain.models import (
    AnalysisSession,
    BomPagadorData,
    BureauData,
    EligibilityResult,
    FaturamentoData,
    HistoricoMes,
    ParecerFinal,
    ValidationResult,
)


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BureauSchema(CamelModel):
    score: int
    last_update: str

    def to_domain(self) -> BureauData:
        return BureauData(score=self.score, last_update=self.last_update)


class HistoricoMesSchema(CamelModel):
    mes: str
    valor: int


class FaturamentoSchema(CamelModel):
    total_atual: int
    media_6m: int = Field(..., alias="media6m")
    percentual_meta: int
    historico: List[HistoricoMesSchema] = Field(default_factory=list)

    def to_domain(self) -> FaturamentoData:
        return FaturamentoData(
            total_atual=self.total_atual,
            media_6m=self.media_6m,
            percentual_meta=self.percentual_meta,
            historico=tuple(HistoricoMes(mes=h.mes, valor=h.valor) for h in self.historico),
        )


class BomPagadorSchema(CamelModel):
    divida_total: int
    valor_pago: int
    percentual_pago: float = Field(..., ge=0, le=1)

    def to_domain(self) -> BomPagadorData:
        return BomPagadorData(
            divida_total=self.divida_total,
            valor_pago=self.valor_pago,
            percentual_pago=self.percentual_pago,
        )


class EligibilityResponse(CamelModel):
    """Response for eligibility lookups; also the snapshot carried by batches"""

    cliente_id: str
    cliente_nome: Optional[str] = None
    aprovado: bool
    faixa_sugerida: Literal["P", "M", "G", "RECUSADO"]
    motivos: List[str]
    bureau: BureauSchema
    faturamento: FaturamentoSchema
    bom_pagador: BomPagadorSchema

    @classmethod
    def from_domain(cls, result: EligibilityResult) -> "EligibilityResponse":
        return cls.model_validate(asdict(result))

    def to_domain(self) -> EligibilityResult:
        return EligibilityResult(
            cliente_id=self.cliente_id,
            cliente_nome=self.cliente_nome,
            aprovado=self.aprovado,
            faixa_sugerida=self.faixa_sugerida,
            motivos=tuple(self.motivos),
            bureau=self.bureau.to_domain(),
            faturamento=self.faturamento.to_domain(),
            bom_pagador=self.bom_pagador.to_domain(),
        )


class PreviewRequest(CamelModel):
    """Request body for POST /v1/eligibility/preview"""

    cliente_id: str = ""
    bureau: BureauSchema
    faturamento: FaturamentoSchema
    bom_pagador: BomPagadorSchema


class RawNoteSchema(CamelModel):
    """Caller-supplied note; every field is cleaned by the validation engine"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    chave: Optional[Any] = None
    origem: Optional[Any] = None
    valor: Optional[Any] = None
    status: Optional[Any] = None
    tag: Optional[Any] = None
    motivo: Optional[Any] = None


class ValidationRequest(CamelModel):
    """Request body for POST /v1/validacao"""

    cliente_id: Optional[str] = None
    cliente_nome: Optional[str] = None
    nome_lote: Optional[str] = None
    tipo_arquivo: Optional[Literal["XML", "CNAB", "MISTO"]] = None
    valor_solicitado: Optional[int] = None
    arquivos: Optional[List[str]] = None
    notas: List[Optional[RawNoteSchema]] = Field(default_factory=list)
    eligibility: Optional[EligibilityResponse] = None


class ValidationNoteSchema(CamelModel):
    chave: str
    origem: Literal["XML", "CNAB"]
    valor: int
    status: Literal["validada", "recusada", "pendente"]
    tag: str
    motivo: Optional[str] = None


class ValidationSummarySchema(CamelModel):
    total_notas: int
    validas: int
    invalidas: int
    tolerancia: float
    percentual_valido: int
    valor_total_validas: int
    valor_solicitado: int
    diferenca_percentual: float
    status: Literal["Dentro da tolerancia", "Fora da tolerancia"]


class ValidationResponse(CamelModel):
    """Response for batch validation"""

    cliente_id: str
    cliente_nome: Optional[str] = None
    nome_lote: Optional[str] = None
    tipo_arquivo: Literal["XML", "CNAB", "MISTO"]
    notas: List[ValidationNoteSchema]
    summary: ValidationSummarySchema
    arquivos: Optional[List[str]] = None
    eligibility: Optional[EligibilityResponse] = None

    @classmethod
    def from_domain(cls, result: ValidationResult) -> "ValidationResponse":
        return cls.model_validate(asdict(result))


class ChecklistItemSchema(CamelModel):
    id: str
    label: str


class ParecerRequest(CamelModel):
    """Request body for POST /v1/sessoes/{session_id}/parecer"""

    decisao: Literal["aprovado", "ajustes", "reprovado"]
    observacoes: Optional[str] = None
    checklist: Dict[str, bool] = Field(default_factory=dict)


class ParecerResponse(CamelModel):
    decisao: str
    observacoes: str
    checklist: Dict[str, bool]
    registrado_em: datetime
    validacao: ValidationResponse
    eligibility: Optional[EligibilityResponse] = None

    @classmethod
    def from_domain(cls, parecer: ParecerFinal) -> "ParecerResponse":
        return cls.model_validate(asdict(parecer))


class AuditEntrySchema(CamelModel):
    registrado_em: datetime
    evento: str
    detalhe: str


class SessionEligibilityRequest(CamelModel):
    """Request body for POST /v1/sessoes/{session_id}/eligibility"""

    documento: str


class SessionResponse(CamelModel):
    """Current state of an analysis session"""

    id: str
    criada_em: datetime
    eligibility: Optional[EligibilityResponse] = None
    validacao: Optional[ValidationResponse] = None
    parecer: Optional[ParecerResponse] = None
    historico: List[AuditEntrySchema]

    @classmethod
    def from_domain(cls, session: AnalysisSession) -> "SessionResponse":
        return cls.model_validate(asdict(session))
