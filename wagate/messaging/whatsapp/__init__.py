"""WhatsApp-specific messaging helpers."""

from .addressing import phone_from_user_id, to_jid

__all__ = ["phone_from_user_id", "to_jid"]
