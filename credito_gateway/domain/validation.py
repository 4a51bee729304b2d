"""Batch validation engine - note normalization and tolerance summary"""

import math
from dataclasses import asdict, dataclass, is_dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from credito_gateway.domain.exceptions import EmptyBatchError, MissingFieldError
from credito_gateway.domain.models import (
    DENTRO_DA_TOLERANCIA,
    FORA_DA_TOLERANCIA,
    EligibilityResult,
    TipoArquivo,
    ValidationNote,
    ValidationResult,
    ValidationSummary,
)
from credito_gateway.utils.formatting import only_digits, round_half_up, strip_whitespace

DEFAULT_VALOR_SOLICITADO = 150_000
DEFAULT_NOME_LOTE = "Lote sem nome"
TIPOS_ARQUIVO = ("XML", "CNAB", "MISTO")


@dataclass(frozen=True)
class BatchRequest:
    """Batch submission as received from the caller, before normalization"""

    cliente_id: Optional[str]
    notas: Sequence[Any]
    cliente_nome: Optional[str] = None
    nome_lote: Optional[str] = None
    tipo_arquivo: Optional[str] = None
    valor_solicitado: Optional[int] = None
    arquivos: Optional[Sequence[str]] = None
    eligibility: Optional[EligibilityResult] = None


def _as_mapping(raw: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(raw, Mapping):
        return raw
    if is_dataclass(raw) and not isinstance(raw, type):
        return asdict(raw)
    return None


def normalize_amount(value: Any) -> int:
    """Non-negative whole amount; missing, non-numeric, infinite or negative input gives 0"""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = float(text) if text else 0.0
        except ValueError:
            return 0
    else:
        return 0

    if not math.isfinite(number):
        return 0
    return max(0, round_half_up(number))


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_note(raw: Any) -> Optional[ValidationNote]:
    """
    Canonical form of one caller-supplied note; None when it has no key.

    - chave: all whitespace removed
    - origem: "CNAB" only when explicitly CNAB, else "XML"
    - status: "recusada"/"pendente" only when explicit, else "validada"
    - tag: caller's non-blank tag, else "OK" for validada and "REVISAO" otherwise
    - motivo: None when blank
    """
    data = _as_mapping(raw)
    if data is None:
        return None

    chave_raw = data.get("chave")
    chave = strip_whitespace(chave_raw) if isinstance(chave_raw, str) else None
    if not chave:
        return None

    status = data.get("status")
    if status not in ("recusada", "pendente"):
        status = "validada"

    return ValidationNote(
        chave=chave,
        origem="CNAB" if data.get("origem") == "CNAB" else "XML",
        valor=normalize_amount(data.get("valor")),
        status=status,
        tag=_clean_text(data.get("tag")) or ("OK" if status == "validada" else "REVISAO"),
        motivo=_clean_text(data.get("motivo")),
    )


def normalize_notes(notas: Any) -> List[ValidationNote]:
    """
    Normalize and deduplicate caller-supplied notes.

    Dedup is first-seen-wins by normalized chave, the same policy as the
    file extraction merge, so a note list normalized twice is unchanged.
    Anything that is not a list of notes normalizes to an empty list.
    """
    if not isinstance(notas, (list, tuple)):
        return []

    por_chave: Dict[str, ValidationNote] = {}
    for raw in notas:
        nota = normalize_note(raw)
        if nota is not None:
            por_chave.setdefault(nota.chave, nota)
    return list(por_chave.values())


def calculate_summary(
    notas: Sequence[ValidationNote],
    tolerancia: float,
    valor_solicitado: int,
) -> ValidationSummary:
    """
    Compare the value of validated notes against the requested amount.

    percentualValido    = round(total_validas / max(solicitado, 1) * 100)
    diferencaPercentual = |solicitado - total_validas| / max(solicitado, 1) * 100
    status is "Dentro da tolerancia" when diferencaPercentual <= tolerancia.
    Pending notes count in totalNotas only.
    """
    validas = [n for n in notas if n.status == "validada"]
    invalidas = [n for n in notas if n.status == "recusada"]
    valor_total_validas = sum(n.valor for n in validas)

    base = max(valor_solicitado, 1)
    percentual_valido = round_half_up(valor_total_validas / base * 100)
    diferenca_percentual = abs(valor_solicitado - valor_total_validas) / base * 100

    return ValidationSummary(
        total_notas=len(notas),
        validas=len(validas),
        invalidas=len(invalidas),
        tolerancia=tolerancia,
        percentual_valido=percentual_valido,
        valor_total_validas=valor_total_validas,
        valor_solicitado=valor_solicitado,
        diferenca_percentual=diferenca_percentual,
        status=DENTRO_DA_TOLERANCIA if diferenca_percentual <= tolerancia else FORA_DA_TOLERANCIA,
    )


def validar_lote(
    request: BatchRequest,
    tolerancia: float,
    default_valor_solicitado: int = DEFAULT_VALOR_SOLICITADO,
) -> ValidationResult:
    """
    Validate a batch submission end to end.

    Raises:
        MissingFieldError: clienteId absent or without digits
        EmptyBatchError: no note survives normalization
    """
    cliente_id = only_digits(request.cliente_id)
    if not cliente_id:
        raise MissingFieldError("clienteId obrigatorio para validar o lote.")

    notas = normalize_notes(request.notas)
    if not notas:
        raise EmptyBatchError("Nenhuma nota valida recebida. Envie ao menos uma nota para processar o lote.")

    tipo_arquivo: TipoArquivo = request.tipo_arquivo if request.tipo_arquivo in TIPOS_ARQUIVO else "MISTO"
    valor_solicitado = (
        request.valor_solicitado if request.valor_solicitado is not None else default_valor_solicitado
    )

    if request.arquivos is not None:
        arquivos = tuple(request.arquivos)
    else:
        arquivos = tuple(f"{nota.chave}.{tipo_arquivo.lower()}" for nota in notas)

    eligibility = request.eligibility
    if eligibility is not None:
        eligibility = replace(eligibility, cliente_id=cliente_id)

    return ValidationResult(
        cliente_id=cliente_id,
        cliente_nome=request.cliente_nome,
        nome_lote=request.nome_lote or DEFAULT_NOME_LOTE,
        tipo_arquivo=tipo_arquivo,
        notas=tuple(notas),
        summary=calculate_summary(notas, tolerancia, valor_solicitado),
        arquivos=arquivos,
        eligibility=eligibility,
    )
