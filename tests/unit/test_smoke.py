"""Basic smoke tests for the interview scaffolding."""

def test_imports():
    import api_server  # noqa: F401
    from config.settings import settings

    assert settings.MAX_HISTORY_ENTRIES == 10
