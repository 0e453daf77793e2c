"""
Random tools: number in a range, dice, coin and password generator.

Numbers, dice and coins use the non-cryptographic ``random`` module;
passwords are drawn with ``secrets``.
"""

import random
import secrets
import string

from pydantic import BaseModel, ConfigDict, Field

from .registry import NoParams, ToolName, ToolRegistry

PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


class RandomNumberParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_value: int = Field(..., alias="min")
    max_value: int = Field(..., alias="max")


class DiceParams(BaseModel):
    sides: int = Field(default=6, ge=2, le=100)


class PasswordParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    length: int = Field(default=16, ge=8, le=64)
    include_symbols: bool = Field(default=True, alias="includeSymbols")


def random_number(min_value: int, max_value: int) -> dict:
    if min_value > max_value:
        return {"success": False, "error": "min muss kleiner als max sein"}
    return {
        "success": True,
        "result": random.randint(min_value, max_value),
        "range": f"{min_value}-{max_value}",
    }


def roll_dice(sides: int = 6) -> dict:
    return {"success": True, "result": random.randint(1, sides), "sides": sides}


def flip_coin() -> dict:
    return {"success": True, "result": random.choice(["Kopf", "Zahl"])}


def generate_password(length: int = 16, include_symbols: bool = True) -> dict:
    """Generate a password of the given length from letters and digits, plus symbols if enabled."""
    charset = string.ascii_lowercase + string.ascii_uppercase + string.digits
    if include_symbols:
        charset += PASSWORD_SYMBOLS

    password = "".join(secrets.choice(charset) for _ in range(length))
    return {
        "success": True,
        "password": password,
        "length": length,
        "includesSymbols": include_symbols,
    }


async def _handle_random_number(params: RandomNumberParams) -> dict:
    return random_number(params.min_value, params.max_value)


async def _handle_dice(params: DiceParams) -> dict:
    return roll_dice(params.sides)


async def _handle_coin(params: NoParams) -> dict:
    return flip_coin()


async def _handle_password(params: PasswordParams) -> dict:
    return generate_password(params.length, params.include_symbols)


def _register():
    ToolRegistry.register(
        name=ToolName.RANDOM_NUMBER,
        description="Generiert eine Zufallszahl zwischen min und max.",
        params_model=RandomNumberParams,
        handler=_handle_random_number,
    )
    ToolRegistry.register(
        name=ToolName.DICE_ROLL,
        description="Würfelt einen Würfel.",
        params_model=DiceParams,
        handler=_handle_dice,
    )
    ToolRegistry.register(
        name=ToolName.COIN_FLIP,
        description="Wirft eine Münze.",
        params_model=NoParams,
        handler=_handle_coin,
    )
    ToolRegistry.register(
        name=ToolName.PASSWORD_GENERATOR,
        description="Generiert ein sicheres Passwort.",
        params_model=PasswordParams,
        handler=_handle_password,
    )


_register()
