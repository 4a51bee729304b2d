"""
Invoice note extraction from uploaded XML and CNAB remittance files.

Both extractors produce canonical ValidationNote tuples. Per-note problems
(missing key, non-numeric amount) drop the note silently; only a document
that cannot be read at all fails, and one failing file fails the batch.

XML layout:
    <Lote>
        <Nota>
            <chave>3524 0112 3456 ...</chave>
            <valor>1520,75</valor>
        </Nota>
        ...
    </Lote>

CNAB/REM layout (one record per line):
    key    = first run of digits in the line
    amount = characters 35-44 (1-indexed) of the trimmed line, or the
             second run of digits when the line is shorter than 44 chars
"""

import math
import re
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from credito_gateway.domain.exceptions import MalformedInputError, UnsupportedFormatError
from credito_gateway.domain.models import TipoArquivo, ValidationNote
from credito_gateway.utils.formatting import round_half_up, strip_whitespace

Content = Union[str, bytes]

_DIGIT_RUNS = re.compile(r"\d+")
_NON_DIGITS = re.compile(r"\D")
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# 1-indexed characters 35-44
CNAB_VALOR_START = 34
CNAB_VALOR_END = 44
CNAB_MAX_DIGITS = 13

XML_EXTENSIONS = (".xml",)
CNAB_EXTENSIONS = (".rem",)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _first_child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element.iter():
        if child is not element and _local_name(child.tag) == name:
            return "".join(child.itertext()).strip()
    return None


def parse_decimal(text: str) -> Optional[float]:
    """
    Parse the leading number of an amount, comma tolerated as separator.

    Only the first comma becomes a dot ("1520,75" -> 1520.75). Trailing
    garbage is ignored ("12.5 BRL" -> 12.5). No leading number, or one
    outside the float range ("1e400"), gives None.
    """
    match = _LEADING_FLOAT.match(text.replace(",", ".", 1).strip())
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def parse_xml_notes(content: Content) -> List[ValidationNote]:
    """
    Extract notes from an XML document with repeated <Nota> elements.

    Raises:
        MalformedInputError: document is not well-formed XML
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise MalformedInputError("XML invalido ou mal formatado.") from e

    notas: List[ValidationNote] = []
    for nota in root.iter():
        if _local_name(nota.tag) != "Nota":
            continue

        chave = strip_whitespace(_first_child_text(nota, "chave"))
        valor = parse_decimal(_first_child_text(nota, "valor") or "")
        if not chave or valor is None:
            continue

        notas.append(
            ValidationNote(
                chave=chave,
                origem="XML",
                valor=round_half_up(valor),
                status="validada",
                tag="OK",
            )
        )

    return notas


def parse_cnab_amount(raw: str) -> Optional[int]:
    """
    Convert a CNAB amount field to whole currency units.

    At most 13 significant digits are kept. More than 2 digits means the
    amount is in centavos and is divided by 100; otherwise it is taken as is.
    """
    significativo = _NON_DIGITS.sub("", raw)[:CNAB_MAX_DIGITS]
    if not significativo:
        return None

    valor = int(significativo)
    if len(significativo) > 2:
        return round_half_up(valor / 100)
    return valor


def parse_cnab_line(linha: str) -> Optional[ValidationNote]:
    """Single remittance record; None when no key or amount can be read"""
    grupos = _DIGIT_RUNS.findall(linha)
    chave = strip_whitespace(grupos[0]) if grupos else None

    segmento = linha[CNAB_VALOR_START:CNAB_VALOR_END].strip() if len(linha) >= CNAB_VALOR_END else ""
    fallback = grupos[1] if len(grupos) > 1 else ""
    valor = parse_cnab_amount(segmento or fallback)

    if not chave or valor is None:
        return None

    return ValidationNote(chave=chave, origem="CNAB", valor=valor, status="validada", tag="OK")


def parse_cnab_notes(content: Content) -> List[ValidationNote]:
    """Extract notes from a fixed-width CNAB/REM file, skipping unreadable lines"""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")

    notas: List[ValidationNote] = []
    for linha in re.split(r"\r?\n", content):
        linha = linha.strip()
        if not linha:
            continue
        nota = parse_cnab_line(linha)
        if nota is not None:
            notas.append(nota)

    return notas


def parse_file(nome: str, content: Content) -> List[ValidationNote]:
    """
    Dispatch a file to its extractor by extension.

    Raises:
        UnsupportedFormatError: extension is neither .xml nor .rem
        MalformedInputError: XML document does not parse
    """
    lowered = nome.lower()
    if lowered.endswith(XML_EXTENSIONS):
        try:
            return parse_xml_notes(content)
        except MalformedInputError as e:
            raise MalformedInputError(f"XML invalido ou mal formatado: {nome}") from e
    if lowered.endswith(CNAB_EXTENSIONS):
        return parse_cnab_notes(content)
    raise UnsupportedFormatError(f"Formato de arquivo nao suportado: {nome}")


def merge_notes(lotes: Iterable[Sequence[ValidationNote]]) -> List[ValidationNote]:
    """Merge per-file note lists by chave; the first occurrence wins"""
    por_chave: Dict[str, ValidationNote] = {}
    for notas in lotes:
        for nota in notas:
            por_chave.setdefault(nota.chave, nota)
    return list(por_chave.values())


def extract_notes_from_files(arquivos: Sequence[Tuple[str, Content]]) -> List[ValidationNote]:
    """
    Parse every (filename, content) pair in submission order and merge.

    Fail-fast: the first file that cannot be parsed aborts the whole batch.
    """
    return merge_notes(parse_file(nome, content) for nome, content in arquivos)


def infer_tipo_arquivo(nomes: Sequence[str]) -> TipoArquivo:
    """
    Batch type from uploaded file names.

    Only XML files -> XML, only .rem/.cnab files -> CNAB; mixed, unknown
    extensions or no files -> MISTO.
    """
    tem_xml = tem_cnab = outro = False
    for nome in nomes:
        lowered = nome.lower()
        if lowered.endswith(".xml"):
            tem_xml = True
        elif lowered.endswith((".rem", ".cnab")):
            tem_cnab = True
        else:
            outro = True

    if outro or (tem_xml and tem_cnab) or not nomes:
        return "MISTO"
    return "XML" if tem_xml else "CNAB"
