# Local application imports
from civiclink.services.auth.token_services import create_access_token, decode_access_token

__all__ = [
    "create_access_token",
    "decode_access_token",
]
