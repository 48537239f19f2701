# backend/app/utils/config.py

"""
環境変数読み取り用のユーティリティ。
mail / notifications / main で共通利用する。

起動時に一度だけ `.env` を読み込み、以降は os.environ を参照する。
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    """環境変数による設定が不正な場合の基底例外。"""


class EnvVarMissingError(ConfigError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


class EnvVarInvalidError(ConfigError):
    """環境変数の値が想定外の場合に投げる例外。"""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(
            f"Environment variable '{name}' has unsupported value '{value}'. "
            f"Expected one of: {expected}."
        )
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> str:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value


def get_env_int(name: str, default: int) -> int:
    """
    整数の環境変数を取得する。

    - 未設定 or パース不能の場合は default を返す。
    """
    raw = get_env(name, default=None, required=False)
    if raw is None:
        return default

    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def get_env_bool(name: str, default: bool) -> bool:
    """
    真偽値の環境変数を取得する（true/false, 1/0, yes/no, on/off）。
    """
    raw = get_env(name, default=None, required=False)
    if raw is None:
        return default

    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def is_env_set(name: str) -> bool:
    """環境変数が空文字以外で設定されているかどうか。"""
    return bool(os.getenv(name))
