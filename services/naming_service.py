"""
命名服務：生成 Party Code、識別碼，整理顯示名稱

純計算邏輯，不涉及狀態轉換
"""
import random
import uuid
from typing import Optional

from services.commit_service import to_well_formed

# 去掉容易看錯的字元：I, O, 0, 1
PARTY_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PARTY_CODE_LENGTH = 6
MAX_NAME_LENGTH = 24


def generate_party_code() -> str:
    """
    生成隨機的 6 位 Party 代碼

    範例：K7QX2M, ABC234

    注意：
    - 不檢查唯一性（由 PartyStore 負責）
    - 32^6 ≈ 10 億種可能，碰撞機率極低
    """
    return ''.join(random.choices(PARTY_CODE_ALPHABET, k=PARTY_CODE_LENGTH))


def normalize_party_code(code: Optional[str]) -> str:
    """Join codes are matched case-insensitively."""
    return str(code or "").strip().upper()


def create_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"


def clean_display_name(name: Optional[str]) -> str:
    """
    Trim and cap a member's display name.

    Returns an empty string for a missing or blank name; the caller decides
    whether that is an error.
    """
    return to_well_formed(str(name or "")).strip()[:MAX_NAME_LENGTH]
