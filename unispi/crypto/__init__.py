from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

GCM_TAG_SIZE = 16
KEY_SIZES = (16, 24, 32)


def key_from_hex(key_hex: str) -> bytes:
    key = bytes.fromhex(key_hex)
    if len(key) not in KEY_SIZES:
        raise ValueError(f"AES key must be 16, 24 or 32 bytes, got {len(key)}")
    return key


def aes_cbc_encrypt(data: bytes, key: bytes, iv: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.encrypt(pad(data, AES.block_size))


def aes_cbc_decrypt(enc: bytes, key: bytes, iv: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return unpad(cipher.decrypt(enc), AES.block_size)


def aes_gcm_encrypt(data: bytes, key: bytes, iv: bytes, aad: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_GCM, nonce=iv, mac_len=GCM_TAG_SIZE)
    cipher.update(aad)
    enc, tag = cipher.encrypt_and_digest(data)
    return enc + tag


def aes_gcm_decrypt(enc_and_tag: bytes, key: bytes, iv: bytes, aad: bytes) -> bytes:
    if len(enc_and_tag) < GCM_TAG_SIZE:
        raise ValueError("MAC check failed: payload shorter than the GCM tag")
    cipher = AES.new(key, AES.MODE_GCM, nonce=iv, mac_len=GCM_TAG_SIZE)
    cipher.update(aad)
    return cipher.decrypt_and_verify(enc_and_tag[:-GCM_TAG_SIZE], enc_and_tag[-GCM_TAG_SIZE:])


__all__ = [
    "GCM_TAG_SIZE",
    "KEY_SIZES",
    "aes_cbc_decrypt",
    "aes_cbc_encrypt",
    "aes_gcm_decrypt",
    "aes_gcm_encrypt",
    "key_from_hex",
]
