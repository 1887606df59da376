"""
WhatsApp addressing helpers.

A JID (Jabber ID) is the protocol address of an account:
"5551234@s.whatsapp.net" for users, "<id>@g.us" for groups. The session's own
user id also carries a device suffix: "5551234:7@s.whatsapp.net".
"""

USER_SERVER = "s.whatsapp.net"


def is_jid(target: str) -> bool:
    """Check if a target is already in JID form."""
    return "@" in target


def to_jid(target: str) -> str:
    """Normalize a phone number or JID into JID form.

    Examples:
        >>> to_jid("5551234")
        '5551234@s.whatsapp.net'
        >>> to_jid("120363@g.us")
        '120363@g.us'
    """
    target = target.strip()
    if is_jid(target):
        return target
    return f"{target.lstrip('+')}@{USER_SERVER}"


def phone_from_user_id(user_id: str) -> str:
    """Extract the phone number from the session's own user id.

    Examples:
        >>> phone_from_user_id("5551234:7@s.whatsapp.net")
        '5551234'
        >>> phone_from_user_id("5551234")
        '5551234'
    """
    return user_id.split("@", 1)[0].split(":", 1)[0]
