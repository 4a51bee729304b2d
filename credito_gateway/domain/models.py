"""Domain models - immutable dataclasses representing pre-analysis entities"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Mapping, Optional, Tuple

Faixa = Literal["P", "M", "G", "RECUSADO"]
Origem = Literal["XML", "CNAB"]
NoteStatus = Literal["validada", "recusada", "pendente"]
TipoArquivo = Literal["XML", "CNAB", "MISTO"]
ToleranceStatus = Literal["Dentro da tolerancia", "Fora da tolerancia"]
Decisao = Literal["aprovado", "ajustes", "reprovado"]

DENTRO_DA_TOLERANCIA = "Dentro da tolerancia"
FORA_DA_TOLERANCIA = "Fora da tolerancia"


@dataclass(frozen=True)
class BureauData:
    """Credit bureau snapshot"""

    score: int
    last_update: str  # ISO date


@dataclass(frozen=True)
class HistoricoMes:
    """Revenue of a single month"""

    mes: str
    valor: int


@dataclass(frozen=True)
class FaturamentoData:
    """Revenue figures; historico ordered oldest to newest"""

    total_atual: int
    media_6m: int
    percentual_meta: int
    historico: Tuple[HistoricoMes, ...] = ()


@dataclass(frozen=True)
class BomPagadorData:
    """Payment history in the current period"""

    divida_total: int
    valor_pago: int
    percentual_pago: float  # fraction in [0, 1]


@dataclass(frozen=True)
class EligibilityResult:
    """Output of the eligibility engine"""

    cliente_id: str
    aprovado: bool
    faixa_sugerida: Faixa
    motivos: Tuple[str, ...]
    bureau: BureauData
    faturamento: FaturamentoData
    bom_pagador: BomPagadorData
    cliente_nome: Optional[str] = None


@dataclass(frozen=True)
class ValidationNote:
    """Canonical invoice note; chave is the deduplication identity"""

    chave: str
    origem: Origem
    valor: int
    status: NoteStatus
    tag: str
    motivo: Optional[str] = None


@dataclass(frozen=True)
class ValidationSummary:
    """Tolerance summary of a batch, derived fresh on every submission"""

    total_notas: int
    validas: int
    invalidas: int
    tolerancia: float
    percentual_valido: int
    valor_total_validas: int
    valor_solicitado: int
    diferenca_percentual: float
    status: ToleranceStatus


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one batch submission"""

    cliente_id: str
    tipo_arquivo: TipoArquivo
    notas: Tuple[ValidationNote, ...]
    summary: ValidationSummary
    cliente_nome: Optional[str] = None
    nome_lote: Optional[str] = None
    arquivos: Optional[Tuple[str, ...]] = None
    eligibility: Optional[EligibilityResult] = None


@dataclass(frozen=True)
class ParecerFinal:
    """Analyst's final decision with the results it was based on"""

    decisao: Decisao
    observacoes: str
    checklist: Mapping[str, bool]
    registrado_em: datetime
    validacao: ValidationResult
    eligibility: Optional[EligibilityResult] = None


@dataclass(frozen=True)
class AuditEntry:
    """Single event in a session's audit trail"""

    registrado_em: datetime
    evento: str
    detalhe: str


@dataclass(frozen=True)
class AnalysisSession:
    """
    State of one analyst workflow.

    Never mutated: every operation stores a new value built with
    dataclasses.replace().
    """

    id: str
    criada_em: datetime
    eligibility: Optional[EligibilityResult] = None
    validacao: Optional[ValidationResult] = None
    parecer: Optional[ParecerFinal] = None
    historico: Tuple[AuditEntry, ...] = field(default_factory=tuple)
