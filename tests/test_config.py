from storage.config import BackendSettings
from workflows.notifications import Level, NoticeBoard


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://xyz.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("MEDISYNC_HTTP_TIMEOUT", "5")

    settings = BackendSettings(_env_file=None)

    assert settings.configured
    assert settings.http_timeout == 5.0
    assert settings.token_refresh_margin == 60.0


def test_unconfigured_without_key(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://xyz.supabase.co")
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    assert not BackendSettings(_env_file=None).configured


def test_notice_board_drain():
    board = NoticeBoard()
    board.success("saved")
    board.error("broken")

    assert board.messages(Level.error) == ["broken"]
    assert [n.message for n in board.drain()] == ["saved", "broken"]
    assert board.items == []
