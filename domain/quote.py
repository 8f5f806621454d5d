# domain/quote.py
import copy
import datetime
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import LastMaterialLineError
from .material import INITIAL_ROWS, MaterialLine, to_amount

DEFAULT_KM_RATE = 0.5
DEFAULT_DESIGN_RATE = 35.0


class QuoteStatus(Enum):
    DRAFT = "Rascunho"
    PENDING_APPROVAL = "Pendente Aprovação"
    APPROVED = "Aprovado"
    REJECTED = "Rejeitado"  # réservé à un circuit de validation externe
    SENT = "Enviado ao Comercial"


def utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Quote:
    id: str
    commercial: str = ""
    date: str = ""
    client: str = ""
    nif: str = ""
    supplier: str = ""
    quote_number: str = ""
    materials: List[MaterialLine] = field(default_factory=list)
    labor_hours: float = 0.0
    labor_days: float = 0.0
    labor_people: int = 1
    distance_km: float = 0.0
    km_rate: float = DEFAULT_KM_RATE
    design_hours: float = 0.0
    design_rate: float = DEFAULT_DESIGN_RATE
    rounding: float = 0.0  # valor final fixo (0 = calculado)
    status: QuoteStatus = QuoteStatus.DRAFT
    notes: Optional[str] = None
    # Horodatages du circuit (ISO-8601)
    created_at: Optional[str] = None
    sent_for_approval_at: Optional[str] = None
    approved_at: Optional[str] = None
    sent_to_sales_at: Optional[str] = None

    @classmethod
    def new(cls, km_rate: float = DEFAULT_KM_RATE, design_rate: float = DEFAULT_DESIGN_RATE,
            now: Optional[str] = None) -> "Quote":
        """Create an empty draft with the default rows and rates."""
        now = now or utc_now_iso()
        return cls(
            id=str(uuid.uuid4()),
            date=now[:10],
            materials=[MaterialLine() for _ in range(INITIAL_ROWS)],
            km_rate=km_rate,
            design_rate=design_rate,
            status=QuoteStatus.DRAFT,
            created_at=now,
        )

    def copy(self) -> "Quote":
        return copy.deepcopy(self)

    # --- Labor: hours XOR days ---

    def set_labor_hours(self, raw):
        self.labor_hours = to_amount(raw)
        self.labor_days = 0.0

    def set_labor_days(self, raw):
        self.labor_days = to_amount(raw)
        self.labor_hours = 0.0

    def set_labor_people(self, people: int):
        self.labor_people = int(people)

    # --- Champs texte (majuscules comme dans le formulaire) ---

    def set_client(self, text: str):
        self.client = (text or "").upper()

    def set_quote_number(self, text: str):
        self.quote_number = (text or "").upper()

    def set_notes(self, text: str):
        self.notes = (text or "").upper() or None

    # --- Lignes de matériel ---

    def add_material(self) -> MaterialLine:
        line = MaterialLine()
        self.materials.append(line)
        return line

    def remove_material(self, line_id: str):
        if len(self.materials) <= 1:
            raise LastMaterialLineError("O orçamento deve manter pelo menos uma linha de material")
        self.materials = [m for m in self.materials if m.id != line_id]

    @property
    def has_quote_number(self) -> bool:
        return bool((self.quote_number or "").strip())
