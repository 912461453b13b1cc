"""
Commit 服務：commit-reveal 的 hash 計算與驗證

The client commits to a prediction by publishing
``sha256(text + "::" + salt)`` as lowercase hex. When the author later
reveals ``(text, salt)`` the server recomputes the digest; any change to the
text or the salt produces a different hash.
"""
import hashlib
import hmac
import re
from typing import Optional

COMMIT_SEPARATOR = "::"
COMMIT_HASH_PATTERN = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)


def to_well_formed(text: str) -> str:
    """
    把孤立的 surrogate 換成 U+FFFD

    瀏覽器的 TextEncoder 在計算 commit 前就是這樣處理的，
    所以伺服器重新計算時也要先做同樣的轉換。
    """
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


def hash_commit(text: str, salt: str) -> str:
    payload = to_well_formed(f"{text}{COMMIT_SEPARATOR}{salt}")
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def is_valid_commit_hash(value: Optional[str]) -> bool:
    """64 個十六進位字元，大小寫皆可"""
    return isinstance(value, str) and COMMIT_HASH_PATTERN.match(value) is not None


def verify_commit(text: str, salt: str, commit_hash: str) -> bool:
    """
    檢查揭露的 (text, salt) 是否符合先前的 commit

    參數：
        text: 揭露的原文（逐字，不做 trim）
        salt: 揭露的 salt
        commit_hash: 存下來的 commit hash

    返回：
        True 如果重新計算的 hash 與 commit_hash 相同
    """
    if not is_valid_commit_hash(commit_hash):
        return False
    return hmac.compare_digest(hash_commit(text, salt), commit_hash.lower())
