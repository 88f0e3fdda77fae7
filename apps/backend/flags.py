import os


def enabled(name: str, default: str = "false") -> bool:
    return (os.getenv(name, default) or "").lower() == "true"


def chat_enabled() -> bool:
    return enabled("CHAT_ENABLED", "true")


def recommendations_enabled() -> bool:
    return enabled("RECOMMENDATIONS_ENABLED", "true")


def demo_fallbacks() -> bool:
    return enabled("DEMO_FALLBACKS", "true")
