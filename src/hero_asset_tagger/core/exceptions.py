"""Hero asset tagger exceptions.

カスタム例外クラスを定義します。
"""


class InvalidCharacterRecordError(ValueError):
    """キャラクターテーブルのレコードが形式に合わない場合の例外.

    ID形式（4桁）・スキンID形式（7桁、キャラクターIDで始まる）・名前の空欄を検出した場合に送出します。

    Attributes:
        record: 検証に失敗したレコード
        reason: 失敗理由
    """

    def __init__(self, record: object, reason: str) -> None:
        """例外初期化.

        Args:
            record: 検証に失敗したレコード
            reason: 失敗理由（人間向けメッセージ）
        """
        self.record = record
        self.reason = reason
        super().__init__(reason)
