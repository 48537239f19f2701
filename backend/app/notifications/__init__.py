# backend/app/notifications/__init__.py

"""
通知ディスパッチャ用モジュール群。

リクエスト → 入力チェック → テンプレート描画 → メール送信 → レスポンス、の一本道のみを扱う。
状態・永続化・キュー・リトライは持たない。

構成イメージ:
- schemas: インテントごとのリクエスト・送信結果・レスポンスのスキーマ
- validators: 入力チェック（NG なら送信せずに 400）
- templates: Jinja2 によるメール本文の描画（email_templates/ 配下）
- service: NotificationDispatcher（描画済みメールを MailSender に渡す）
- factory: 設定から NotificationDispatcher を組み立てる
- responses: 送信結果・エラーの HTTP レスポンスへの変換
- router: HTTP エンドポイント
"""
