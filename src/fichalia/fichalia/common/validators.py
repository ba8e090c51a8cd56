from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} no válido")
    return value.strip()


def optional_float(value, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} no válido") from None


def require_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
    if (latitude is None) != (longitude is None):
        raise ValidationError("La ubicación necesita latitud y longitud")
    if latitude is not None and not -90.0 <= latitude <= 90.0:
        raise ValidationError("Latitud fuera de rango")
    if longitude is not None and not -180.0 <= longitude <= 180.0:
        raise ValidationError("Longitud fuera de rango")


def optional_text(value, field_name: str, *, max_length: int) -> Optional[str]:
    """Strip a free-text field; empty means absent."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} no válido")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field_name} supera los {max_length} caracteres")
    return value or None
