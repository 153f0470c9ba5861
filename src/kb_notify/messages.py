"""Localised customer-facing message templates.

render_message("hi", "balance_notification", "Ravi", "Sharma Stores", "₹800.00")
Unknown languages fall back to English; unknown template keys render "".
"""

from collections.abc import Callable

from src.kb_common.enums import Language

_Template = Callable[..., str]

_MESSAGES: dict[str, dict[str, _Template]] = {
    Language.EN: {
        "balance_notification": lambda customer_name, seller_name, amount: (
            f"Hi {customer_name}, this is {seller_name}. You have an outstanding "
            f"balance of {amount}. Please settle the payment at your earliest convenience."
        ),
        "low_balance_warning": lambda customer_name, seller_name, amount: (
            f"Seller Name <{seller_name}> Dear {customer_name}, your account balance "
            f"is {amount}. Please pay soon."
        ),
    },
    Language.HI: {
        "balance_notification": lambda customer_name, seller_name, amount: (
            f"नमस्ते {customer_name}, मैं {seller_name} बोल रहा हूँ। आपके खाते में "
            f"{amount} की बकाया राशि है। कृपया जल्द भुगतान करें।"
        ),
        "low_balance_warning": lambda customer_name, seller_name, amount: (
            f"विक्रेता नाम <{seller_name}> नमस्ते प्रिय {customer_name}, आपके खाते में "
            f"{amount} की राशि है। कृपया जल्द भुगतान करें।"
        ),
    },
}


def render_message(language: str | None, key: str, *args: str) -> str:
    lang = Language.HI if language == Language.HI else Language.EN
    template = _MESSAGES[lang].get(key)
    return template(*args) if template else ""
