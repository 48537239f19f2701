# backend/app/mail/schemas.py

"""
送信するメール 1通分と、送信結果のスキーマ定義。

RenderedMessage はリクエストごとに生成され、送信後は破棄される。
永続化はしない。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RenderedMessage(BaseModel):
    """
    テンプレート描画済みの、そのまま送信できるメール。
    """

    sender_address: str = Field(..., description="送信元メールアドレス。")
    sender_name: Optional[str] = Field(None, description="送信元の表示名。")
    recipient_addresses: List[str] = Field(
        ...,
        min_length=1,
        description="宛先アドレス（順序を保持、1件以上）。",
    )
    subject: str = Field(..., description="件名。")
    html_body: str = Field(..., description="HTML 本文。")
    text_body: Optional[str] = Field(
        None,
        description="HTML 非対応メーラー向けのプレーンテキスト本文。",
    )
    reply_to_address: Optional[str] = Field(
        None,
        description="返信先アドレス（お問い合わせ通知で送信者に直接返信させる用途）。",
    )


class DeliveryReceipt(BaseModel):
    """
    送信が受け付けられたときにトランスポートが返す結果。

    message_id はプロバイダ側の不透明な ID で、レスポンスに載せる以外の意味はない。
    """

    message_id: str = Field(..., description="プロバイダのメッセージ ID。")
    provider_response: Optional[Dict[str, Any]] = Field(
        None,
        description="プロバイダの生レスポンス（デバッグ用）。",
    )
