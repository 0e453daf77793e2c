"""
Tests for the tool-calling orchestration loop.

The completion API is replaced by the ``scripted_client`` fixture; the real
tool registry runs, so tool results flow through the transcript end to end.
"""

import asyncio
import json
from unittest.mock import MagicMock, patch

from multitool_agent.llm_call import CompletionClient, CompletionError
from multitool_agent.orchestration import (
    EXHAUSTED_MESSAGE,
    OrchestrationLoop,
    OutcomeStatus,
    Transcript,
)
from multitool_agent.orchestration.prompts import build_system_prompt

CALCULATOR_CALL = '{"tool":"calculator","params":{"expression":"25 * 4"}}'
COIN_CALL = '{"tool":"coin_flip","params":{}}'


def _run(client, message="Hallo", **kwargs):
    loop = OrchestrationLoop(client=client, **kwargs)
    return asyncio.run(loop.run(message))


def _last_turn(prompt: str) -> str:
    return prompt.rsplit("\n\n", 1)[1]


class TestTranscript:
    """Tests for the Transcript turn list."""

    def test_seed_and_render(self):
        transcript = Transcript.seed("SYSTEM", "Wie spät ist es?")
        transcript.add_assistant('{"tool": "current_time"}')
        transcript.add_user("Tool Result: {}")

        assert len(transcript) == 4
        assert transcript.render() == (
            "SYSTEM\n\n"
            "User: Wie spät ist es?\n\n"
            'Assistant: {"tool": "current_time"}\n\n'
            "User: Tool Result: {}"
        )


class TestDirectAnswer:
    """Tests for replies without a tool call."""

    def test_plain_answer(self, scripted_client):
        client = scripted_client("Hallo! Wie kann ich helfen?")

        outcome = _run(client)

        assert outcome.status is OutcomeStatus.ANSWERED
        assert outcome.response == "Hallo! Wie kann ich helfen?"
        assert outcome.tools_used == []
        assert outcome.tokens == 10
        assert outcome.iterations == 1

    def test_first_prompt_is_system_prompt_and_message(self, scripted_client):
        client = scripted_client("ok")

        _run(client, message="Was ist 2 + 2?")

        assert client.prompts == [f"{build_system_prompt()}\n\nUser: Was ist 2 + 2?"]

    def test_malformed_tool_json_is_returned_as_answer(self, scripted_client):
        reply = '{"tool": "calculator", "params": {"expression": }'
        client = scripted_client(reply)

        outcome = _run(client)

        assert outcome.status is OutcomeStatus.ANSWERED
        assert outcome.response == reply


class TestToolCalls:
    """Tests for the tool-calling path."""

    def test_calculator_end_to_end(self, scripted_client):
        client = scripted_client(CALCULATOR_CALL, "25 * 4 ergibt 100.")

        outcome = _run(client, message="Was ist 25 * 4?")

        assert outcome.status is OutcomeStatus.ANSWERED
        assert outcome.response == "25 * 4 ergibt 100."
        assert outcome.tools_used == ["calculator"]
        assert outcome.tokens == 20
        assert outcome.iterations == 2
        assert _last_turn(client.prompts[1]) == (
            'User: Tool Result: {"success": true, "expression": "25 * 4", "result": 100}'
        )

    def test_dice_roll_end_to_end(self, scripted_client):
        client = scripted_client(
            'Ich würfle: {"tool":"dice_roll","params":{"sides":20}}',
            "Du hast gewürfelt!",
        )

        outcome = _run(client, message="Würfle einen W20")

        assert outcome.tools_used == ["dice_roll"]
        feedback = _last_turn(client.prompts[1])
        assert feedback.startswith("User: Tool Result: ")
        data = json.loads(feedback[len("User: Tool Result: "):])
        assert 1 <= data["result"] <= 20
        assert data["sides"] == 20

    def test_transcript_grows_by_two_turns_per_tool_call(self, scripted_client):
        client = scripted_client(COIN_CALL, COIN_CALL, "fertig")

        _run(client)

        first, second, third = client.prompts
        assert second.startswith(first + "\n\nAssistant: " + COIN_CALL + "\n\nUser: Tool Result: ")
        assert third.startswith(second + "\n\nAssistant: " + COIN_CALL + "\n\nUser: ")
        assert third.count("\n\nAssistant: ") == 2

    def test_tools_used_is_deduplicated_in_order(self, scripted_client):
        client = scripted_client(COIN_CALL, CALCULATOR_CALL, COIN_CALL, "fertig")

        outcome = _run(client)

        assert outcome.tools_used == ["coin_flip", "calculator"]

    def test_unknown_tool_feedback(self, scripted_client):
        client = scripted_client('{"tool":"teleport","params":{}}', "Das kann ich nicht.")

        outcome = _run(client)

        assert outcome.status is OutcomeStatus.ANSWERED
        assert outcome.tools_used == []
        assert _last_turn(client.prompts[1]) == 'User: Error: Tool "teleport" not found.'

    def test_null_tool_name_gets_not_found_feedback(self, scripted_client):
        client = scripted_client('{"tool": null, "params": {}}', "Entschuldigung.")

        outcome = _run(client)

        assert outcome.iterations == 2
        assert outcome.response == "Entschuldigung."
        assert _last_turn(client.prompts[1]) == 'User: Error: Tool "null" not found.'

    def test_invalid_params_feedback(self, scripted_client):
        client = scripted_client(
            '{"tool":"bmi_calculator","params":{"weightKg":75,"heightCm":300}}',
            "Bitte gib eine gültige Größe an.",
        )

        outcome = _run(client)

        feedback = _last_turn(client.prompts[1])
        assert feedback.startswith("User: Error: Invalid parameters: ")
        assert "heightCm" in feedback
        assert outcome.tools_used == []

    def test_tool_error_feedback_not_counted_as_used(self, scripted_client):
        client = scripted_client(
            '{"tool":"random_number","params":{"min":10,"max":1}}',
            "Bitte tausche min und max.",
        )

        outcome = _run(client)

        assert _last_turn(client.prompts[1]) == "User: Tool Error: min muss kleiner als max sein"
        assert outcome.tools_used == []

    def test_tool_crash_feedback(self, scripted_client):
        client = scripted_client(CALCULATOR_CALL, "Da ging etwas schief.")

        with patch(
            "multitool_agent.tools.math_solver.calculate",
            side_effect=RuntimeError("boom"),
        ):
            outcome = _run(client)

        assert outcome.status is OutcomeStatus.ANSWERED
        assert _last_turn(client.prompts[1]) == "User: Tool execution failed: boom"
        assert outcome.tools_used == []


class TestTermination:
    """Tests for the exhausted and failed outcomes."""

    def test_exhausts_after_max_iterations(self, scripted_client):
        client = scripted_client(COIN_CALL)

        outcome = _run(client, max_iterations=5)

        assert outcome.status is OutcomeStatus.EXHAUSTED
        assert outcome.response == EXHAUSTED_MESSAGE
        assert client.complete.await_count == 5
        assert outcome.tools_used == ["coin_flip"]
        assert outcome.tokens == 50
        assert outcome.iterations == 5

    def test_single_iteration_limit(self, scripted_client):
        client = scripted_client(COIN_CALL, "nie erreicht")

        outcome = _run(client, max_iterations=1)

        assert outcome.status is OutcomeStatus.EXHAUSTED
        assert client.complete.await_count == 1

    def test_completion_failure_reports_error_and_zero_usage(self, scripted_client):
        client = scripted_client(COIN_CALL, CompletionError("Rate limit exceeded"))

        outcome = _run(client)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.response == "Error: Rate limit exceeded"
        assert outcome.tokens == 0
        assert outcome.cost == 0.0
        assert outcome.tools_used == []
        assert outcome.iterations == 2

    def test_missing_api_key_fails_request(self):
        outcome = _run(CompletionClient(api_key=""))

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.response.startswith("Error: ")
        assert "OPENAI_API_KEY" in outcome.response

    def test_loop_instance_can_be_reused(self, scripted_client):
        client = scripted_client(CALCULATOR_CALL, "100", "Hallo")
        loop = OrchestrationLoop(client=client)

        first = asyncio.run(loop.run("Was ist 25 * 4?"))
        second = asyncio.run(loop.run("Hallo"))

        assert first.tools_used == ["calculator"]
        assert second.tools_used == []
        assert second.tokens == 10


class TestTracing:
    """Tests for spans and generations when tracing is on."""

    def test_generation_and_span_recorded(self, scripted_client):
        client = scripted_client(CALCULATOR_CALL, "100")
        tracing_context = MagicMock()

        outcome = _run(client, tracing_context=tracing_context)

        assert outcome.tools_used == ["calculator"]
        generation_names = [
            call.kwargs["name"] for call in tracing_context.generation.call_args_list
        ]
        assert generation_names == ["completion_1", "completion_2"]
        tracing_context.span.assert_called_once()
        assert tracing_context.span.call_args.kwargs["name"] == "tool:calculator"
        assert tracing_context.span.call_args.kwargs["input"] == {"expression": "25 * 4"}

    def test_generation_marked_on_failure(self, scripted_client):
        client = scripted_client(CompletionError("down"))
        tracing_context = MagicMock()

        outcome = _run(client, tracing_context=tracing_context)

        assert outcome.status is OutcomeStatus.FAILED
        gen = tracing_context.generation.return_value.__enter__.return_value
        gen.set_status.assert_called_once_with("error")
