import pytest

from commander.compiler import ActionCompiler
from commander.intent import ActionType, NOT_UNDERSTOOD, ParsedIntent
from commander.models import DestinationEntry
from commander.resolver import MatchCandidate

compiler = ActionCompiler(trigger="/")

PDF_TYPES = [
    (ActionType.GENERATE_EMBARQUE_PDF, "embarque"),
    (ActionType.GENERATE_MOTORISTA_PDF, "motorista"),
    (ActionType.GENERATE_HOTEL_PDF, "hotel"),
]


def pdf_intent(action_type, phrase="aparecida do norte"):
    return ParsedIntent(
        understood=True,
        action_type=action_type,
        destination_phrase=phrase,
        destination_keywords=("aparecida", "norte"),
    )


class TestGeneratePdf:
    @pytest.mark.parametrize("action_type,kind", PDF_TYPES)
    def test_single_generation_action(self, action_type, kind):
        entry = DestinationEntry(id="d1", name="Aparecida do Norte")
        result = compiler.compile(pdf_intent(action_type), MatchCandidate(entry=entry, score=26), [entry])

        assert len(result.actions) == 1
        action = result.actions[0]
        assert action.type == "generate_pdf_direct"
        assert action.params["destinationId"] == "d1"
        assert action.params["destinationName"] == "Aparecida do Norte"
        assert action.params["pdfType"] == kind
        assert action.params["pdfKind"] == kind
        assert result.requires_user_action is True
        assert "**Aparecida do Norte**" in result.message

    @pytest.mark.parametrize("action_type,kind", PDF_TYPES)
    def test_not_found_lists_active_destinations(self, action_type, kind, destinations):
        result = compiler.compile(pdf_intent(action_type, phrase="paris"), None, destinations)

        assert not result.actions
        assert '"paris"' in result.message
        assert "• Aparecida do Norte" in result.message
        assert "• Gramado Natal Luz" in result.message

    def test_empty_directory_same_as_not_found(self):
        result = compiler.compile(pdf_intent(ActionType.GENERATE_HOTEL_PDF), None, [])
        assert not result.actions
        assert "Nenhum destino ativo" in result.message

    def test_missing_phrase(self, destinations):
        result = compiler.compile(pdf_intent(ActionType.GENERATE_HOTEL_PDF, phrase=None), None, destinations)
        assert not result.actions
        assert "Destinos disponíveis" in result.message


class TestNavigate:
    def test_navigate_then_notification(self):
        intent = ParsedIntent(
            understood=True,
            action_type=ActionType.NAVIGATE,
            target_path="/caixa",
            confirmation_message="Vou abrir o caixa",
        )
        result = compiler.compile(intent)

        assert [a.type for a in result.actions] == ["navigate", "show_notification"]
        assert result.actions[0].params == {"path": "/caixa"}
        assert result.actions[1].params == {"type": "success"}
        assert "Vou abrir o caixa" in result.message
        assert result.requires_user_action is True

    def test_navigate_without_confirmation(self):
        intent = ParsedIntent(understood=True, action_type=ActionType.NAVIGATE, target_path="/reports")
        assert "/reports" in compiler.compile(intent).message


class TestHelp:
    def test_not_understood_has_examples(self):
        result = compiler.compile(NOT_UNDERSTOOD)
        assert not result.actions
        assert "/gera o pdf embarque da gramado" in result.message

    def test_unknown_action_lists_commands(self):
        result = compiler.compile(ParsedIntent(understood=True, action_type=ActionType.UNKNOWN))
        assert not result.actions
        assert "/abrir caixa" in result.message

    def test_examples_follow_trigger(self):
        result = ActionCompiler(trigger="!").compile(NOT_UNDERSTOOD)
        assert "!ver parcelas" in result.message

    def test_extraction_failed(self):
        result = compiler.extraction_failed()
        assert not result.actions
        assert "Tente novamente" in result.message


class TestPayload:
    def test_camel_case_and_omitted_fields(self):
        payload = compiler.compile(NOT_UNDERSTOOD).to_payload()
        assert payload["isCommand"] is True
        assert "actions" not in payload
        assert "requiresUserAction" not in payload

    def test_actions_serialized(self):
        intent = ParsedIntent(understood=True, action_type=ActionType.NAVIGATE, target_path="/caixa")
        payload = compiler.compile(intent).to_payload()
        assert payload["requiresUserAction"] is True
        assert payload["actions"][0] == {"type": "navigate", "description": "Abrindo /caixa", "params": {"path": "/caixa"}}
