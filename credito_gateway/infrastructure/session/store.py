"""In-memory store of analysis sessions"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from credito_gateway.config import settings
from credito_gateway.domain.exceptions import SessionConflictError, SessionNotFoundError
from credito_gateway.domain.models import (
    AnalysisSession,
    AuditEntry,
    EligibilityResult,
    ParecerFinal,
    ValidationResult,
)
from credito_gateway.utils.date_utils import utc_now


class SessionStore:
    """
    Repository for analysis sessions.

    Process-local and not durable. Sessions are immutable values: each
    operation builds a new AnalysisSession and replaces the stored one, so a
    second submission simply overwrites the first.

    At most max_sessions are kept; creating one more evicts the oldest.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now, max_sessions: int = 1000):
        self.clock = clock
        self.max_sessions = max(1, max_sessions)
        self._sessions: Dict[str, AnalysisSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> AnalysisSession:
        while len(self._sessions) >= self.max_sessions:
            # dicts keep insertion order: first key is the oldest session
            del self._sessions[next(iter(self._sessions))]
        session = AnalysisSession(id=str(uuid.uuid4()), criada_em=self.clock())
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> AnalysisSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError("Sessao de analise nao encontrada. Inicie uma nova consulta.") from None

    def _store(self, session: AnalysisSession, evento: str, detalhe: str, **changes) -> AnalysisSession:
        entry = AuditEntry(registrado_em=self.clock(), evento=evento, detalhe=detalhe)
        updated = replace(session, historico=session.historico + (entry,), **changes)
        self._sessions[session.id] = updated
        return updated

    def store_eligibility(self, session_id: str, eligibility: EligibilityResult) -> AnalysisSession:
        """A new client search starts a new analysis: later-stage results are dropped"""
        session = self.get(session_id)
        return self._store(
            session,
            "elegibilidade_consultada",
            f"cliente {eligibility.cliente_id} faixa {eligibility.faixa_sugerida}",
            eligibility=eligibility,
            validacao=None,
            parecer=None,
        )

    def store_validation(
        self,
        session_id: str,
        validacao: ValidationResult,
        eligibility: Optional[EligibilityResult] = None,
    ) -> AnalysisSession:
        """
        Attach a batch result to the eligibility it was validated against.

        Raises:
            SessionConflictError: the session no longer holds that eligibility
        """
        session = self.get(session_id)
        if eligibility is not None and session.eligibility is not eligibility:
            raise SessionConflictError(
                "A pre-analise foi alterada durante o processamento do lote. Envie os arquivos novamente."
            )
        return self._store(
            session,
            "lote_validado",
            f"lote '{validacao.nome_lote}' com {validacao.summary.total_notas} notas: {validacao.summary.status}",
            validacao=validacao,
        )

    def store_parecer(self, session_id: str, parecer: ParecerFinal) -> AnalysisSession:
        """Decision keeps its own snapshots; working results are cleared"""
        session = self.get(session_id)
        detalhe = f"decisao {parecer.decisao}"
        if parecer.observacoes:
            detalhe = f"{detalhe}: {parecer.observacoes}"
        return self._store(
            session,
            "parecer_registrado",
            detalhe,
            parecer=parecer,
            eligibility=None,
            validacao=None,
        )

    def reset(self, session_id: str) -> AnalysisSession:
        """Clear every result; the audit trail is kept"""
        session = self.get(session_id)
        return self._store(
            session,
            "sessao_reiniciada",
            "resultados descartados",
            eligibility=None,
            validacao=None,
            parecer=None,
        )


session_store = SessionStore(max_sessions=settings.session_max_entries)
