from commander.directory import StaticDestinationDirectory
from commander.resolver import DestinationResolver

APARECIDA_EMBARQUE = {
    "understood": True,
    "actionType": "generate_embarque_pdf",
    "destination": "aparecida do norte",
    "destinationSearchTerms": ["aparecida", "norte"],
    "confirmationMessage": "Vou gerar o PDF de embarque de Aparecida do Norte",
}


class CountingDirectory(StaticDestinationDirectory):
    def __init__(self, entries):
        super().__init__(entries)
        self.calls = 0

    def list_active_destinations(self):
        self.calls += 1
        return super().list_active_destinations()


class RecordingResolver(DestinationResolver):
    def resolve(self, phrase, keywords, destinations):
        match = super().resolve(phrase, keywords, destinations)
        RecordingResolver.calls.append((phrase, list(keywords), match))
        return match


RecordingResolver.calls = []


class TestCommandOrchestrator:
    def test_pdf_command_end_to_end(self, make_orchestrator):
        orchestrator, completion = make_orchestrator(APARECIDA_EMBARQUE)
        result = orchestrator.run("/gera o pdf embarque da aparecida do norte 12/12")

        assert completion.calls[0][1] == "Comando: gera o pdf embarque da aparecida do norte 12/12"
        assert len(result.actions) == 1
        assert result.actions[0].params["destinationId"] == "d1"
        assert result.requires_user_action is True

    def test_paris_lists_destinations(self, make_orchestrator):
        orchestrator, _ = make_orchestrator({
            "understood": True,
            "actionType": "generate_motorista_pdf",
            "destination": "paris",
            "destinationSearchTerms": ["paris"],
        })
        result = orchestrator.run("/gera o pdf motorista de paris")

        assert not result.actions
        assert "Aparecida do Norte" in result.message
        assert "Gramado Natal Luz" in result.message

    def test_navigate_skips_directory(self, make_orchestrator, destinations):
        directory = CountingDirectory(destinations)
        orchestrator, _ = make_orchestrator(
            {"understood": True, "actionType": "navigate", "targetPath": "/clients/new"},
            directory_override=directory,
        )
        result = orchestrator.run("/adicionar cliente")

        assert [a.type for a in result.actions] == ["navigate", "show_notification"]
        assert directory.calls == 0

    def test_directory_read_fresh_per_command(self, make_orchestrator, destinations):
        directory = CountingDirectory(destinations)
        orchestrator, _ = make_orchestrator(APARECIDA_EMBARQUE, directory_override=directory)

        orchestrator.run("/gera o pdf embarque da aparecida")
        directory.entries = [d for d in destinations if d.id != "d1"]
        second = orchestrator.run("/gera o pdf embarque da aparecida")

        assert directory.calls == 2
        assert not second.actions
        assert "Aparecida do Norte" not in second.message

    def test_unreachable_directory_is_not_found(self, make_orchestrator, failing_directory):
        orchestrator, _ = make_orchestrator(APARECIDA_EMBARQUE, directory_override=failing_directory)
        result = orchestrator.run("/gera o pdf embarque da aparecida")
        assert not result.actions
        assert "Nenhum destino ativo" in result.message

    def test_extraction_failure_is_soft(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(error=TimeoutError("read timeout"))
        result = orchestrator.run("/ver parcelas")
        assert result.is_command is True
        assert not result.actions
        assert "Tente novamente" in result.message

    def test_not_understood_shows_examples(self, make_orchestrator):
        orchestrator, _ = make_orchestrator({"understood": False})
        result = orchestrator.run("/qual a previsão do tempo")
        assert not result.actions
        assert "/ver parcelas" in result.message

    def test_trigger_only(self, make_orchestrator):
        orchestrator, completion = make_orchestrator(APARECIDA_EMBARQUE)
        result = orchestrator.run("/")
        assert completion.calls == []
        assert not result.actions

    def test_unexpected_error_never_escapes(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(APARECIDA_EMBARQUE)

        class BrokenResolver:
            def resolve(self, *args):
                raise RuntimeError("boom")

        orchestrator.resolver = BrokenResolver()
        result = orchestrator.run("/gera o pdf embarque da aparecida")
        assert not result.actions
        assert "Tente novamente" in result.message

    def test_resolution_goes_through_resolve(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(APARECIDA_EMBARQUE)
        RecordingResolver.calls = []
        orchestrator.resolver = RecordingResolver()

        result = orchestrator.run("/gera o pdf embarque da aparecida do norte")

        [(phrase, keywords, match)] = RecordingResolver.calls
        assert phrase == "aparecida do norte"
        assert keywords == ["aparecida", "norte"]
        assert match.entry.id == result.actions[0].params["destinationId"] == "d1"
