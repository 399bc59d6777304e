import secrets, string

# Codes are read aloud and typed on phones; leave out look-alikes
ALPHABET = "".join(c for c in string.ascii_uppercase + string.digits if c not in "0O1IL")

def generate_code(length: int = 6) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))

def normalize_code(code: str) -> str:
    """Upper-case and drop the spaces or dashes people add when copying a code."""
    return "".join(ch for ch in (code or "").upper() if ch.isalnum())
