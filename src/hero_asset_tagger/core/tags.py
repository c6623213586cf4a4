"""タグ列の配列化.

mod メタデータの `tags` は「文字列1つ」「文字列の配列」「欠損」のどれでも届くため、
呼び出し側が常に配列として扱えるように揃えます。
"""

from __future__ import annotations


def to_tag_array(tags: list[str] | tuple[str, ...] | str | None) -> list[str] | tuple[str, ...]:
    """タグ値を文字列の配列に揃える.

    Args:
        tags: 配列・単一文字列・None のいずれか

    Returns:
        - 配列（list/tuple）ならそのまま同じオブジェクト（tuple は tuple のまま返る）
        - 真値の単一値なら 1 要素の list
        - それ以外（None, "" など）は空 list

    Examples:
        >>> to_tag_array("solo")
        ['solo']
        >>> to_tag_array(["a", "b"])
        ['a', 'b']
        >>> to_tag_array(None)
        []
    """
    if isinstance(tags, (list, tuple)):
        return tags
    return [tags] if tags else []
