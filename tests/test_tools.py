"""
Tests for the local tools.

These cover the pure tools (calculator, dates, randomness, BMI, VAT, JSON)
without any external services. The weather tool lives in test_weather.py.
"""

import string
import time
from datetime import date, datetime
from unittest.mock import patch

from multitool_agent.tools.calculators import bmi_category, calculate_bmi, calculate_vat
from multitool_agent.tools.clock import calculate_age, current_time
from multitool_agent.tools.json_validator import validate_json
from multitool_agent.tools.math_solver import calculate
from multitool_agent.tools.numbers import round_half_up
from multitool_agent.tools.randomness import (
    PASSWORD_SYMBOLS,
    flip_coin,
    generate_password,
    random_number,
    roll_dice,
)


class TestCalculator:
    """Tests for the calculator tool."""

    def test_multiplication(self):
        result = calculate("25 * 4")
        assert result == {"success": True, "expression": "25 * 4", "result": 100}

    def test_same_expression_same_result(self):
        """The calculator is a pure function."""
        assert calculate("(10 + 5) * 2 - 3") == calculate("(10 + 5) * 2 - 3")
        assert calculate("(10 + 5) * 2 - 3")["result"] == 27

    def test_division_keeps_fraction(self):
        result = calculate("10 / 4")
        assert result["success"] is True
        assert result["result"] == 2.5

    def test_whole_float_becomes_int(self):
        result = calculate("100 / 4")
        assert result["result"] == 25
        assert isinstance(result["result"], int)

    def test_caret_power(self):
        assert calculate("2^10")["result"] == 1024

    def test_sqrt(self):
        assert calculate("sqrt(144)")["result"] == 12

    def test_syntax_error(self):
        result = calculate("2 +* 2")
        assert result["success"] is False
        assert "Ungültiger Ausdruck" in result["error"]

    def test_unknown_symbol(self):
        result = calculate("x + 1")
        assert result["success"] is False
        assert "Ungültiger Ausdruck" in result["error"]

    def test_division_by_zero(self):
        result = calculate("1 / 0")
        assert result["success"] is False

    def test_empty_expression(self):
        result = calculate("   ")
        assert result["success"] is False

    def test_factorial_and_degrees(self):
        assert calculate("5!")["result"] == 120
        assert calculate("sin(30 degrees)")["result"] == 0.5

    def test_scientific_notation(self):
        assert calculate("1e3 + 1")["result"] == 1001


class TestCalculatorSafety:
    """The calculator must never run Python code or hang on huge numbers."""

    @patch("os.getpid")
    def test_import_is_rejected(self, mock_getpid):
        result = calculate("__import__('os').getpid()")
        assert result["success"] is False
        mock_getpid.assert_not_called()

    def test_no_side_effect_from_expression(self, tmp_path):
        target = tmp_path / "created"
        result = calculate(f"__import__('pathlib').Path('{target}').touch()")
        assert result["success"] is False
        assert not target.exists()

    def test_attribute_access_is_rejected(self):
        assert calculate("pi.evalf()")["success"] is False
        assert calculate("(1).real")["success"] is False

    def test_unknown_function_names_are_rejected(self):
        result = calculate("exec(1)")
        assert result["success"] is False
        assert "exec" in result["error"]

    def test_tower_of_powers_fails_fast(self):
        started = time.monotonic()
        result = calculate("9^9^9")
        assert result["success"] is False
        assert time.monotonic() - started < 5

    def test_huge_factorial_fails_fast(self):
        started = time.monotonic()
        result = calculate("1000000000!")
        assert result["success"] is False
        assert time.monotonic() - started < 5

    def test_large_but_bounded_power(self):
        assert calculate("2^100 / 2^98")["result"] == 4


class TestCurrentTime:
    """Tests for the current_time tool."""

    def test_german_formatting(self):
        now = datetime(2024, 3, 9, 14, 5, 7)
        result = current_time(now)
        assert result["success"] is True
        assert result["time"] == "14:05:07"
        assert result["date"] == "09.03.2024"


class TestAgeCalculator:
    """Tests for the age_calculator tool."""

    def test_simple_age(self):
        result = calculate_age("1990-05-15", today=date(2024, 5, 15))
        assert result["success"] is True
        assert (result["years"], result["months"], result["days"]) == (34, 0, 0)

    def test_day_borrow_uses_previous_month_length(self):
        result = calculate_age("2000-01-15", today=date(2024, 3, 10))
        # February 2024 has 29 days
        assert (result["years"], result["months"], result["days"]) == (24, 1, 24)

    def test_day_borrow_for_end_of_month_birthday(self):
        result = calculate_age("2000-01-31", today=date(2024, 3, 1))
        assert (result["years"], result["months"], result["days"]) == (24, 1, 1)

    def test_month_borrow(self):
        result = calculate_age("1990-12-20", today=date(2024, 3, 25))
        assert (result["years"], result["months"], result["days"]) == (33, 3, 5)

    def test_future_birth_date(self):
        result = calculate_age("2030-01-01", today=date(2024, 1, 1))
        assert result["success"] is False
        assert "Zukunft" in result["error"]

    def test_tomorrow_is_future(self):
        tomorrow = date.fromordinal(date.today().toordinal() + 1)
        result = calculate_age(tomorrow.isoformat())
        assert result["success"] is False
        assert result["error"] == "Geburtsdatum liegt in der Zukunft"

    def test_born_today(self):
        result = calculate_age(date.today().isoformat())
        assert result["success"] is True
        assert result["years"] == 0

    def test_invalid_calendar_date(self):
        result = calculate_age("2023-02-30", today=date(2024, 1, 1))
        assert result == {"success": False, "error": "Ungültiges Datum"}


class TestRandomTools:
    """Tests for random_number, dice_roll, coin_flip and password_generator."""

    def test_dice_in_range(self):
        for _ in range(200):
            result = roll_dice(20)
            assert 1 <= result["result"] <= 20
            assert result["sides"] == 20

    @patch("multitool_agent.tools.randomness.random.randint", return_value=4)
    def test_dice_uses_randint(self, mock_randint):
        assert roll_dice(6)["result"] == 4
        mock_randint.assert_called_once_with(1, 6)

    def test_random_number_inclusive_range(self):
        results = {random_number(1, 3)["result"] for _ in range(300)}
        assert results == {1, 2, 3}

    def test_random_number_equal_bounds(self):
        result = random_number(7, 7)
        assert result == {"success": True, "result": 7, "range": "7-7"}

    def test_random_number_out_of_order(self):
        result = random_number(10, 1)
        assert result["success"] is False
        assert "min" in result["error"]

    def test_coin_flip(self):
        assert flip_coin()["result"] in ("Kopf", "Zahl")

    def test_password_length_and_charset(self):
        result = generate_password(length=32, include_symbols=False)
        assert result["success"] is True
        assert len(result["password"]) == 32
        allowed = set(string.ascii_letters + string.digits)
        assert set(result["password"]) <= allowed
        assert result["includesSymbols"] is False

    def test_password_with_symbols_uses_symbol_charset(self):
        result = generate_password(length=64, include_symbols=True)
        allowed = set(string.ascii_letters + string.digits + PASSWORD_SYMBOLS)
        assert set(result["password"]) <= allowed


class TestBMICalculator:
    """Tests for the bmi_calculator tool."""

    def test_normal_weight(self):
        result = calculate_bmi(75, 180)
        assert result["bmi"] == 23.1
        assert result["category"] == "Normalgewicht"

    def test_categories(self):
        assert bmi_category(17.0) == "Untergewicht"
        assert bmi_category(18.5) == "Normalgewicht"
        assert bmi_category(25.0) == "Übergewicht"
        assert bmi_category(30.0) == "Adipositas"


class TestVATCalculator:
    """Tests for the vat_calculator tool."""

    def test_add_germany(self):
        result = calculate_vat(100, "DE", "add")
        assert result["netAmount"] == 100
        assert result["vatAmount"] == 19
        assert result["grossAmount"] == 119
        assert result["direction"] == "Netto → Brutto"

    def test_remove_austria(self):
        result = calculate_vat(120, "AT", "remove")
        assert result["netAmount"] == 100
        assert result["vatAmount"] == 20
        assert result["direction"] == "Brutto → Netto"

    def test_switzerland_rate(self):
        result = calculate_vat(100, "CH")
        assert result["vatRate"] == 7.7
        assert result["countryName"] == "Schweiz"
        assert result["grossAmount"] == 107.7


class TestJSONValidator:
    """Tests for the json_validator tool."""

    def test_valid_object(self):
        result = validate_json('{"a": 1, "b": 2}')
        assert result["success"] is True
        assert result["type"] == "object"
        assert result["itemCount"] == 2
        assert "formatted" not in result

    def test_array(self):
        result = validate_json("[1, 2, 3]")
        assert result["type"] == "array"
        assert result["itemCount"] == 3

    def test_scalars(self):
        assert validate_json("null")["type"] == "null"
        assert validate_json("true")["type"] == "boolean"
        assert validate_json("1.5")["type"] == "number"
        assert validate_json('"x"')["type"] == "string"

    def test_pretty_print(self):
        result = validate_json('{"key":"value"}', pretty_print=True)
        assert result["formatted"] == '{\n  "key": "value"\n}'

    def test_invalid(self):
        result = validate_json("{key: value}")
        assert result["success"] is False
        assert result["valid"] is False
        assert result["message"] == "JSON ist ungültig"


class TestRounding:
    """Tests for the half-up rounding used in tool results."""

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2

    def test_decimal_places(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(23.148, 1) == 23.1

    def test_zero_digits_returns_int(self):
        assert isinstance(round_half_up(21.6), int)

    def test_bmi_half_rounds_up(self):
        # 50.0625 / 1.5^2 is exactly 22.25
        assert calculate_bmi(50.0625, 150)["bmi"] == 22.3
