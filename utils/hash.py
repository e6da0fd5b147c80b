"""Hash utilities for abbrlink generation."""

import hashlib
import secrets
from typing import Optional

from config import Config, Encoding

RANDOM_BYTES = 32

HEX_ALPHABET = "0123456789abcdef"
DECIMAL_ALPHABET = "0123456789"


def encode_digest(
    digest: bytes, length: int, encoding: Encoding = Encoding.HEX, reduction: str = "truncate"
) -> str:
    """
    Render raw hash bytes as a fixed-length identifier.

    Args:
        digest: Raw hash bytes
        length: Target number of characters
        encoding: Alphabet to render with (hex or decimal)
        reduction: How decimal values longer than ``length`` are shortened,
            "truncate" keeps the trailing digits (value mod 10**length),
            "leading" keeps the leading digits

    Returns:
        Identifier of exactly ``length`` characters
    """
    if Encoding(encoding) is Encoding.HEX:
        return digest.hex()[:length]

    decimal = str(int.from_bytes(digest, "big"))
    if len(decimal) < length:
        return decimal.zfill(length)
    if reduction == "leading":
        return decimal[:length]
    return decimal[-length:]


def hash_from_name(
    name: str, hash_length: int, encoding: Encoding = Encoding.HEX, reduction: str = "truncate"
) -> str:
    """
    Compute a deterministic identifier from a document name.

    Args:
        name: Document name (file stem)
        hash_length: Identifier length
        encoding: Identifier alphabet
        reduction: Decimal reduction mode

    Returns:
        Identifier derived from SHA-256 of the name
    """
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return encode_digest(digest, hash_length, encoding, reduction)


def random_hash(
    hash_length: int, encoding: Encoding = Encoding.HEX, reduction: str = "truncate"
) -> str:
    """
    Draw an identifier from the system CSPRNG.

    Args:
        hash_length: Identifier length
        encoding: Identifier alphabet
        reduction: Decimal reduction mode

    Returns:
        Identifier derived from SHA-256 of 32 random bytes
    """
    digest = hashlib.sha256(secrets.token_bytes(RANDOM_BYTES)).digest()
    return encode_digest(digest, hash_length, encoding, reduction)


def generate_abbrlink(name: str, config: Config, random_mode: Optional[bool] = None) -> str:
    """
    Generate an abbrlink for a document according to the configuration.

    Args:
        name: Document name, ignored in random mode
        config: Active configuration
        random_mode: Overrides ``config.use_random_mode`` for this call only

    Returns:
        New identifier
    """
    use_random = config.use_random_mode if random_mode is None else random_mode
    if use_random:
        return random_hash(config.hash_length, config.encoding, config.decimal_reduction)
    return hash_from_name(name, config.hash_length, config.encoding, config.decimal_reduction)


def alphabet_for(encoding: Encoding) -> str:
    """Characters an identifier may contain for the given encoding."""
    return HEX_ALPHABET if Encoding(encoding) is Encoding.HEX else DECIMAL_ALPHABET
