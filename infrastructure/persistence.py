# infrastructure/persistence.py
"""
Record <-> Quote mapping.

The record shape is the one stored in the cloud table and in the local
backup: camelCase keys, materials embedded as an ordered list, timestamps as
ISO-8601 strings (omitted while unset).
"""
import json
from typing import Any, Dict, Iterable, List

from domain.material import MaterialLine, to_amount
from domain.quote import DEFAULT_DESIGN_RATE, DEFAULT_KM_RATE, Quote, QuoteStatus

# attribut Python -> clé de l'enregistrement
_QUOTE_FIELDS = {
    "id": "id",
    "commercial": "commercial",
    "date": "date",
    "client": "client",
    "nif": "nif",
    "supplier": "supplier",
    "quote_number": "quoteNumber",
}
_NUMERIC_FIELDS = {
    "labor_hours": "laborHours",
    "labor_days": "laborDays",
    "distance_km": "distanceKm",
    "km_rate": "kmRate",
    "design_hours": "designHours",
    "design_rate": "designRate",
    "rounding": "rounding",
}
_TIMESTAMP_FIELDS = {
    "created_at": "createdAt",
    "sent_for_approval_at": "sentForApprovalAt",
    "approved_at": "approvedAt",
    "sent_to_sales_at": "sentToSalesAt",
}


class PersistenceService:

    @staticmethod
    def material_to_record(line: MaterialLine) -> Dict[str, Any]:
        return {
            "id": line.id,
            "supplier": line.supplier,
            "description": line.description,
            "value": line.value,
            "valueWithMargin": line.value_with_margin,
        }

    @staticmethod
    def material_from_record(data: Dict[str, Any]) -> MaterialLine:
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        return MaterialLine(
            supplier=data.get("supplier") or "",
            description=data.get("description") or "",
            value=to_amount(data.get("value")),
            value_with_margin=to_amount(data.get("valueWithMargin")),
            **kwargs
        )

    @staticmethod
    def quote_to_record(quote: Quote) -> Dict[str, Any]:
        """Serialize a quote to its stored record."""
        record = {key: getattr(quote, attr) for attr, key in _QUOTE_FIELDS.items()}
        record["materials"] = [PersistenceService.material_to_record(m) for m in quote.materials]
        record.update({key: getattr(quote, attr) for attr, key in _NUMERIC_FIELDS.items()})
        record["laborPeople"] = quote.labor_people
        record["status"] = quote.status.value
        record["notes"] = quote.notes or None
        for attr, key in _TIMESTAMP_FIELDS.items():
            value = getattr(quote, attr)
            if value:
                record[key] = value
        return record

    @staticmethod
    def quote_from_record(data: Dict[str, Any]) -> Quote:
        """Rebuild a quote from a stored record. Missing or malformed numbers read as 0."""
        materials = [PersistenceService.material_from_record(m) for m in data.get("materials") or []]
        if not materials:
            materials = [MaterialLine()]

        try:
            status = QuoteStatus(data.get("status") or QuoteStatus.DRAFT.value)
        except ValueError:
            status = QuoteStatus.DRAFT

        try:
            people = int(data.get("laborPeople") or 1)
        except (TypeError, ValueError):
            people = 1

        quote = Quote(
            id=data["id"],
            materials=materials,
            labor_people=people,
            status=status,
            notes=data.get("notes") or None,
        )
        for attr, key in _QUOTE_FIELDS.items():
            if attr != "id":
                setattr(quote, attr, data.get(key) or "")
        for attr, key in _NUMERIC_FIELDS.items():
            setattr(quote, attr, to_amount(data.get(key)))
        # anciens enregistrements sans taux
        if data.get("kmRate") is None:
            quote.km_rate = DEFAULT_KM_RATE
        if data.get("designRate") is None:
            quote.design_rate = DEFAULT_DESIGN_RATE
        for attr, key in _TIMESTAMP_FIELDS.items():
            setattr(quote, attr, data.get(key) or None)
        return quote

    @staticmethod
    def quotes_to_json(quotes: Iterable[Quote]) -> str:
        return json.dumps([PersistenceService.quote_to_record(q) for q in quotes], ensure_ascii=False)

    @staticmethod
    def quotes_from_json(text: str) -> List[Quote]:
        data = json.loads(text)
        return [PersistenceService.quote_from_record(item) for item in data]
