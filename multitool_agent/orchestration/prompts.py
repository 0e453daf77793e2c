"""
System prompt for the tool-calling assistant.
"""

from ..tools.registry import ToolRegistry

TOOL_EXAMPLES = [
    '- Calculator: {"tool": "calculator", "params": {"expression": "10 + 10"}}',
    '- Weather: {"tool": "weather", "params": {"city": "Berlin", "countryCode": "DE"}}',
    '- VAT: {"tool": "vat_calculator", "params": {"amount": 100, "country": "DE", "direction": "add"}}',
    '- JSON: {"tool": "json_validator", "params": {"jsonString": "{\\"key\\": \\"value\\"}", "prettyPrint": true}}',
    '- BMI: {"tool": "bmi_calculator", "params": {"weightKg": 75, "heightCm": 180}}',
    '- Password: {"tool": "password_generator", "params": {"length": 16, "includeSymbols": true}}',
    '- Age: {"tool": "age_calculator", "params": {"birthDate": "1990-05-15"}}',
]


def build_system_prompt(registry: type[ToolRegistry] = ToolRegistry) -> str:
    """Build the instruction prompt listing every registered tool."""
    prompt_parts = [
        f"Du bist ein hilfreicher Assistent mit Zugriff auf {registry.count()} verschiedene Tools.",
        "",
        "VERFÜGBARE TOOLS:",
        registry.get_tools_summary(),
        "",
        "REGELN:",
        "1. Nutze Tools wenn nötig",
        "2. Antworte auf Deutsch",
        "3. Sei präzise und freundlich",
        "",
        "Wenn du ein Tool nutzen willst, antworte NUR mit JSON:",
        '{"tool": "tool_name", "params": {...}}',
        "",
        "WICHTIGE BEISPIELE:",
        *TOOL_EXAMPLES,
        "",
        "Wenn du fertig bist, antworte normal OHNE JSON.",
    ]
    return "\n".join(prompt_parts)
