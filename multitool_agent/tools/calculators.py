"""
Domain calculators: body mass index and VAT for DACH countries.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .numbers import round_half_up
from .registry import ToolName, ToolRegistry

# country -> (rate in percent, display name)
VAT_RATES: dict[str, tuple[float, str]] = {
    "DE": (19, "Deutschland"),
    "AT": (20, "Österreich"),
    "CH": (7.7, "Schweiz"),
}


class BMIParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    weight_kg: float = Field(..., alias="weightKg", gt=0)
    height_cm: float = Field(..., alias="heightCm", ge=50, le=250)


class VATParams(BaseModel):
    amount: float = Field(..., gt=0)
    country: Literal["DE", "AT", "CH"]
    direction: Literal["add", "remove"] = "add"


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Untergewicht"
    if bmi < 25:
        return "Normalgewicht"
    if bmi < 30:
        return "Übergewicht"
    return "Adipositas"


def calculate_bmi(weight_kg: float, height_cm: float) -> dict:
    height_m = height_cm / 100
    bmi = weight_kg / (height_m * height_m)
    return {
        "success": True,
        "weight": weight_kg,
        "height": height_cm,
        "bmi": round_half_up(bmi, 1),
        "category": bmi_category(bmi),
    }


def calculate_vat(amount: float, country: str, direction: str = "add") -> dict:
    """
    Add VAT to a net amount or extract it from a gross amount.

    Args:
        amount: Net amount for ``add``, gross amount for ``remove``
        country: One of DE, AT, CH
        direction: ``add`` (net -> gross) or ``remove`` (gross -> net)
    """
    rate, country_name = VAT_RATES[country]

    if direction == "add":
        net = amount
        vat = net * rate / 100
        gross = net + vat
    else:
        gross = amount
        net = gross / (1 + rate / 100)
        vat = gross - net

    return {
        "success": True,
        "country": country,
        "countryName": country_name,
        "vatRate": rate,
        "direction": "Netto → Brutto" if direction == "add" else "Brutto → Netto",
        "netAmount": round_half_up(net, 2),
        "vatAmount": round_half_up(vat, 2),
        "grossAmount": round_half_up(gross, 2),
    }


async def _handle_bmi(params: BMIParams) -> dict:
    return calculate_bmi(params.weight_kg, params.height_cm)


async def _handle_vat(params: VATParams) -> dict:
    return calculate_vat(params.amount, params.country, params.direction)


def _register():
    ToolRegistry.register(
        name=ToolName.BMI_CALCULATOR,
        description="Berechnet den Body Mass Index (BMI).",
        params_model=BMIParams,
        handler=_handle_bmi,
    )
    ToolRegistry.register(
        name=ToolName.VAT_CALCULATOR,
        description="Berechnet Mehrwertsteuer für verschiedene Länder.",
        params_model=VATParams,
        handler=_handle_vat,
    )


_register()
