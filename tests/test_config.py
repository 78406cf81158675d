import pytest

from src.utils.config import load_settings

ENV_KEYS = (
    "NTFY_URL",
    "NTFY_RECONNECT_DELAY",
    "OVERLAY_SETTLE_DELAY_MS",
    "OVERLAY_CLOSE_DELAY_MS",
    "OVERLAY_HOST",
    "OVERLAY_PORT",
    "OVERLAY_SERVER",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # load_dotenv 가 os.environ 에 직접 쓰므로 테스트 후 원래대로 지워지도록 기록해 둠
    for k in ENV_KEYS:
        monkeypatch.setenv(k, "")
        monkeypatch.delenv(k)


def test_defaults(tmp_path):
    settings = load_settings(tmp_path / "missing.env")
    assert settings.ntfy_url is None
    assert settings.reconnect_delay == 2.0
    assert settings.settle_delay == pytest.approx(0.3)
    assert settings.close_delay == pytest.approx(0.1)
    assert settings.overlay_port == 8765
    assert settings.overlay_server is True


def test_env_file(tmp_path):
    env = tmp_path / ".env"
    env.write_text(
        "NTFY_URL=https://ntfy.sh/widgets\n"
        "OVERLAY_SETTLE_DELAY_MS=500\n"
        "OVERLAY_PORT=9000\n"
        "OVERLAY_SERVER=0\n",
        encoding="utf-8",
    )
    settings = load_settings(env)
    assert settings.ntfy_url == "https://ntfy.sh/widgets"
    assert settings.settle_delay == pytest.approx(0.5)
    assert settings.overlay_port == 9000
    assert settings.overlay_server is False


def test_blank_url_is_none(tmp_path, monkeypatch):
    monkeypatch.setenv("NTFY_URL", "   ")
    assert load_settings(tmp_path / "missing.env").ntfy_url is None


def test_bad_number_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("NTFY_RECONNECT_DELAY", "soon")
    monkeypatch.setenv("OVERLAY_PORT", "eighty")
    settings = load_settings(tmp_path / "missing.env")
    assert settings.reconnect_delay == 2.0
    assert settings.overlay_port == 8765


def test_underscored_port_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("OVERLAY_PORT", "8_080")
    monkeypatch.setenv("OVERLAY_CLOSE_DELAY_MS", "0")
    settings = load_settings(tmp_path / "missing.env")
    assert settings.overlay_port == 8765
    assert settings.close_delay == 0.0
