import hashlib
import hmac


class CardFingerprinter:
    """
    Derives the token cache key for a card.

    The key is an HMAC-SHA256 over the card number and CVV, so neither ever
    ends up in a cache key in readable form.
    """

    def __init__(self, secret: str) -> None:
        self.__secret = secret.encode()

    def fingerprint(self, card_number: str, cvv: str) -> str:
        message = f"{card_number}:{cvv}".encode()
        return hmac.new(self.__secret, message, hashlib.sha256).hexdigest()
