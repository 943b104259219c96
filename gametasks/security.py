"""
Hash de senha com scrypt (KDF com custo de memoria) e verificacao em tempo
constante. Formato armazenado: "<hex(chave derivada)>.<hex(salt)>".
"""
import hashlib
import hmac
import secrets

SALT_BYTES = 16
KEY_LENGTH = 64

# Parametros padrao do scrypt (N=16384, r=8, p=1).
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_MAXMEM = 64 * 1024 * 1024


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=SCRYPT_MAXMEM,
        dklen=KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{_derive(password, salt).hex()}.{salt.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """
    Retorna False para senha errada. Levanta ValueError apenas se o valor
    armazenado estiver malformado.
    """
    try:
        key_hex, salt_hex = stored.split(".")
        stored_key = bytes.fromhex(key_hex)
        salt = bytes.fromhex(salt_hex)
    except (AttributeError, ValueError) as exc:
        raise ValueError("Credencial armazenada malformada.") from exc

    if len(stored_key) != KEY_LENGTH or len(salt) != SALT_BYTES:
        raise ValueError("Credencial armazenada malformada.")

    return hmac.compare_digest(_derive(password, salt), stored_key)
