"""
OpenWeatherMap Weather Tool

Looks up current conditions for a city with a single GET request. Every
failure (missing key, unknown city, timeout) is reported as a tool failure.
"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..config import config
from .numbers import round_half_up
from .registry import ToolName, ToolRegistry

logger = logging.getLogger(__name__)


class WeatherParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str = Field(..., min_length=2)
    country_code: Optional[str] = Field(
        default=None, alias="countryCode", min_length=2, max_length=2
    )


async def fetch_weather(
    city: str,
    country_code: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> dict:
    """
    Fetch current weather for a city.

    Args:
        city: City name
        country_code: Optional ISO 3166 two-letter country code
        client: HTTP client to use; a short-lived one is created if omitted
        api_key: Overrides the configured OpenWeatherMap key

    Returns:
        Dictionary with weather data or an error
    """
    key = api_key if api_key is not None else config.tools.weather_api_key
    if not key:
        return {"success": False, "error": "API Key nicht konfiguriert"}

    location = f"{city},{country_code}" if country_code else city
    params = {
        "q": location,
        "appid": key,
        "units": config.tools.weather_units,
        "lang": config.tools.weather_lang,
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.tools.weather_timeout) as own_client:
                response = await own_client.get(config.tools.weather_url, params=params)
        else:
            response = await client.get(
                config.tools.weather_url,
                params=params,
                timeout=config.tools.weather_timeout,
            )
    except httpx.TimeoutException:
        logger.warning(f"Weather lookup for '{location}' timed out")
        return {"success": False, "error": "API Timeout"}
    except httpx.HTTPError as e:
        logger.error(f"Weather lookup failed: {e}")
        return {"success": False, "error": f"Network Error: {e}"}

    if response.status_code == 404:
        return {"success": False, "error": f'Stadt "{city}" nicht gefunden'}
    if not response.is_success:
        return {"success": False, "error": f"API Error: {response.status_code}"}

    data = response.json()
    return {
        "success": True,
        "city": data["name"],
        "country": data["sys"]["country"],
        "temperature": round_half_up(data["main"]["temp"]),
        "feelsLike": round_half_up(data["main"]["feels_like"]),
        "description": data["weather"][0]["description"],
        "humidity": data["main"]["humidity"],
        "windSpeed": round_half_up(data["wind"]["speed"], 1),
    }


async def _handle_weather(params: WeatherParams) -> dict:
    return await fetch_weather(params.city, params.country_code)


def _register():
    ToolRegistry.register(
        name=ToolName.WEATHER,
        description="Ruft aktuelles Wetter für eine Stadt ab.",
        params_model=WeatherParams,
        handler=_handle_weather,
    )


_register()
