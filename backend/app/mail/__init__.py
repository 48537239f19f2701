# backend/app/mail/__init__.py

"""
メール送信レイヤ用モジュール群。

通知ディスパッチャから見た「外部のメール配信サービス」との境界。
send(RenderedMessage) が成功すれば DeliveryReceipt を返し、
失敗すれば MailTransportError を投げる、という契約だけを持つ。

構成:
- config: 送信元アドレス・プロバイダ認証情報などの設定
- schemas: RenderedMessage / DeliveryReceipt
- client: Brevo HTTP API クライアントと共通例外
- smtp: SMTP トランスポート
- service: MailSender インターフェースとログ出力のみの実装
- factory: アプリ全体で共有する MailSender の生成
"""
