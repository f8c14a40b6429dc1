from aidbridge.presentation.routes import auth, chat, items

__all__ = ["auth", "chat", "items"]
