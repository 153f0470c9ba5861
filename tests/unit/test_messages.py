"""Tests for kb_notify.messages."""

from src.kb_notify.messages import render_message


class TestRenderMessage:
    def test_english_balance_notification(self) -> None:
        text = render_message("en", "balance_notification", "Ravi", "Sharma Stores", "₹800.00")
        assert text.startswith("Hi Ravi, this is Sharma Stores.")
        assert "₹800.00" in text

    def test_hindi_balance_notification(self) -> None:
        text = render_message("hi", "balance_notification", "Ravi", "Sharma Stores", "₹800.00")
        assert "Ravi" in text
        assert "₹800.00" in text
        assert "बकाया" in text

    def test_low_balance_warning(self) -> None:
        text = render_message("en", "low_balance_warning", "Ravi", "Sharma Stores", "₹50.00")
        assert "Sharma Stores" in text
        assert "₹50.00" in text

    def test_unknown_language_falls_back_to_english(self) -> None:
        assert render_message("fr", "balance_notification", "A", "B", "₹1.00").startswith("Hi A")
        assert render_message(None, "balance_notification", "A", "B", "₹1.00").startswith("Hi A")

    def test_unknown_key_is_empty(self) -> None:
        assert render_message("en", "birthday_wishes", "A", "B", "C") == ""
