from storefront.utils.logging import get_log_level, mask_guest_token


class TestMaskGuestToken:
    def test_token_is_cut_to_last_four(self):
        event = mask_guest_token(None, "info", {"event": "Merged guest cart", "guest_token": "guest-7f3a9c21"})
        assert event["guest_token"] == "****9c21"
        assert event["event"] == "Merged guest cart"

    def test_events_without_token_pass_through(self):
        event = {"event": "Order placed", "order_number": "2510180001"}
        assert mask_guest_token(None, "info", dict(event)) == event

    def test_empty_token_is_left_alone(self):
        assert mask_guest_token(None, "info", {"guest_token": None}) == {"guest_token": None}


class TestLogLevel:
    def test_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert get_log_level() == "DEBUG"

    def test_unknown_environment_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "qa")
        assert get_log_level() == "INFO"
