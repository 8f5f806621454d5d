# domain/workflow.py
"""
Approval workflow of a quote.

    Rascunho --submit--> Pendente Aprovação --approve--> Aprovado --send--> Enviado ao Comercial

`Rejeitado` exists as a status but no trigger produces it: it is reserved for
a workflow run outside this application.

Every transition works on a copy of the quote. The copy is persisted and
returned only when the guard passed, so a refused transition leaves the
caller's quote exactly as it was. Lifecycle timestamps keep their first value:
a handler only stamps a field that is still empty.
"""

import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .errors import (ExportFailedError, GuardViolationError, InvalidTransitionError,
                     SubmissionInProgressError)
from .quote import Quote, QuoteStatus, utc_now_iso


class Trigger(Enum):
    SUBMIT_FOR_APPROVAL = "submit-for-approval"
    APPROVE = "approve"
    SEND_TO_SALES = "send-to-sales"


# (from, trigger) -> (to, timestamp field)
TRANSITIONS: Dict[Tuple[QuoteStatus, Trigger], Tuple[QuoteStatus, str]] = {
    (QuoteStatus.DRAFT, Trigger.SUBMIT_FOR_APPROVAL): (QuoteStatus.PENDING_APPROVAL, "sent_for_approval_at"),
    (QuoteStatus.PENDING_APPROVAL, Trigger.APPROVE): (QuoteStatus.APPROVED, "approved_at"),
    (QuoteStatus.APPROVED, Trigger.SEND_TO_SALES): (QuoteStatus.SENT, "sent_to_sales_at"),
}

TERMINAL_STATUSES = (QuoteStatus.SENT, QuoteStatus.REJECTED)

# Exporter: renders the current snapshot, returns True on success.
Exporter = Callable[[Quote], bool]
# Persister: stores the quote (repository upsert); its result is handed back to the caller.
Persister = Callable[[Quote], object]


def available_triggers(status: QuoteStatus) -> List[Trigger]:
    """Triggers exposed for a status (at most one in practice)."""
    return [trigger for (source, trigger) in TRANSITIONS if source == status]


def is_terminal(status: QuoteStatus) -> bool:
    return status in TERMINAL_STATUSES


class ApprovalWorkflow:
    """Guarded transitions of a quote, each one stamping a timestamp and persisting."""

    def __init__(self, persist: Persister, clock: Callable[[], str] = utc_now_iso):
        self.persist = persist
        self.clock = clock
        self._export_lock = threading.Lock()
        self.last_result = None

    @property
    def is_exporting(self) -> bool:
        return self._export_lock.locked()

    def save(self, quote: Quote):
        """Persist the current field state, whatever the status. No transition."""
        self.last_result = self.persist(quote)
        return quote

    def submit_for_approval(self, quote: Quote, exporter: Exporter) -> Quote:
        """Export the snapshot, then (only on success) move to PendingApproval and persist."""
        self._check(quote, Trigger.SUBMIT_FOR_APPROVAL)

        if not self._export_lock.acquire(blocking=False):
            raise SubmissionInProgressError("Já existe uma exportação em curso para validação")
        try:
            try:
                exported = exporter(quote)
            except ExportFailedError:
                raise
            except Exception as e:
                raise ExportFailedError(f"Erro ao gerar imagem: {e}") from e
            if not exported:
                raise ExportFailedError("Erro ao gerar imagem. Tente novamente ou use Imprimir PDF.")
            return self._apply(quote, Trigger.SUBMIT_FOR_APPROVAL)
        finally:
            self._export_lock.release()

    def approve(self, quote: Quote) -> Quote:
        self._check(quote, Trigger.APPROVE)
        return self._apply(quote, Trigger.APPROVE)

    def send_to_sales(self, quote: Quote) -> Quote:
        self._check(quote, Trigger.SEND_TO_SALES)
        if not quote.has_quote_number:
            raise GuardViolationError(
                "quote_number",
                "BLOQUEIO: Para enviar ao comercial, deve primeiro emitir o orçamento no software "
                "e colocar o respetivo número no campo \"Nº ORÇAMENTO SOFTWARE\".",
            )
        return self._apply(quote, Trigger.SEND_TO_SALES)

    def fire(self, quote: Quote, trigger: Trigger, exporter: Optional[Exporter] = None) -> Quote:
        """Dispatch a trigger by value (used by the form's single action button)."""
        if trigger is Trigger.SUBMIT_FOR_APPROVAL:
            if exporter is None:
                raise ExportFailedError("Nenhum exportador configurado")
            return self.submit_for_approval(quote, exporter)
        if trigger is Trigger.APPROVE:
            return self.approve(quote)
        return self.send_to_sales(quote)

    def _check(self, quote: Quote, trigger: Trigger):
        if (quote.status, trigger) not in TRANSITIONS:
            raise InvalidTransitionError(quote.status, trigger)

    def _apply(self, quote: Quote, trigger: Trigger) -> Quote:
        target, stamp_field = TRANSITIONS[(quote.status, trigger)]
        updated = quote.copy()
        updated.status = target
        if not getattr(updated, stamp_field):
            setattr(updated, stamp_field, self.clock())
        self.last_result = self.persist(updated)
        return updated
