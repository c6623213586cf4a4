"""キャラクターテーブル（id → name）の読み込みと検索.

ヒーロー検出で使う参照テーブルを扱います。

設計方針:
    - テーブルはレコードの配列（JSON）。検出に必要なのは `id` と `name` のみ
    - 同梱テーブルはプロセス内で一度だけ読み込み、以後は読み取り専用（tuple）で共有する
    - 同じ id が複数あっても先頭のレコードを採用する
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from functools import cache
from importlib.resources import files
from pathlib import Path

from loguru import logger

from .exceptions import InvalidCharacterRecordError

BUNDLED_CHARACTER_DATA = "character_data.json"

_CHARACTER_ID = re.compile(r"^[0-9]{4}$")
_SKIN_ID = re.compile(r"^[0-9]{7}$")


@dataclass(frozen=True)
class CharacterSkin:
    """キャラクターテーブルの1レコード.

    Attributes:
        id: キャラクターID（例: "1011"）
        name: 表示名（例: "Hulk"）
        skinid: スキンID（例: "1011001"）。キャラクターIDで始まる7桁
        skin_name: スキン表示名
    """

    id: str
    name: str
    skinid: str = ""
    skin_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> CharacterSkin:
        """JSONオブジェクトからレコードを作る.

        Raises:
            ValueError: `id` / `name` が欠損、または文字列でない場合
        """
        char_id = data.get("id")
        name = data.get("name")
        if not isinstance(char_id, str) or not isinstance(name, str):
            raise ValueError(f"Character record requires string 'id' and 'name': {dict(data)}")
        return cls(
            id=char_id,
            name=name,
            skinid=str(data.get("skinid") or ""),
            skin_name=str(data.get("skin_name") or ""),
        )

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "id": self.id, "skinid": self.skinid, "skin_name": self.skin_name}


def validate_skin(skin: CharacterSkin) -> None:
    """レコードの形式を検証する.

    Raises:
        InvalidCharacterRecordError: ID/スキンID/名前のいずれかが不正な場合
    """
    if not _CHARACTER_ID.match(skin.id):
        raise InvalidCharacterRecordError(skin, f"Invalid character ID '{skin.id}' for {skin.name}")

    if not _SKIN_ID.match(skin.skinid):
        raise InvalidCharacterRecordError(
            skin, f"Invalid skin ID '{skin.skinid}' for {skin.name} - {skin.skin_name}"
        )

    if not skin.skinid.startswith(skin.id):
        raise InvalidCharacterRecordError(
            skin,
            f"Skin ID '{skin.skinid}' doesn't start with character ID '{skin.id}' "
            f"for {skin.name} - {skin.skin_name}",
        )

    if not skin.name.strip() or not skin.skin_name.strip():
        raise InvalidCharacterRecordError(skin, f"Empty name fields for skin ID {skin.skinid}")


# 正規化後も表記を固定したいキャラクター名
_CHARACTER_NAME_OVERRIDES = {
    "the punisher": "Punisher",
    "punisher": "Punisher",
    "the thing": "The Thing",
    "cloak and dagger": "Cloak & Dagger",
    "cloak & dagger": "Cloak & Dagger",
    "jeff the landshark": "Jeff the Landshark",
    "jeff the land shark": "Jeff the Landshark",
    "spider-man": "Spider-Man",
    "spider man": "Spider-Man",
    "spiderman": "Spider-Man",
    "star-lord": "Star-Lord",
    "star lord": "Star-Lord",
    "starlord": "Star-Lord",
    "iron man": "Iron Man",
    "ironman": "Iron Man",
    "iron fist": "Iron Fist",
    "ironfist": "Iron Fist",
    "doctor strange": "Doctor Strange",
    "dr strange": "Doctor Strange",
    "dr. strange": "Doctor Strange",
    "mister fantastic": "Mister Fantastic",
    "mr fantastic": "Mister Fantastic",
    "mr. fantastic": "Mister Fantastic",
}

# スキン名の大文字→タイトルケース変換で保持する語
_PRESERVED_SKIN_WORDS = {"VFX", "SFX", "UI", "MVP", "AI", "AIM", "IGNITE", "2099", "1872"}


def _title_word(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def normalize_character_name(raw_name: str) -> str:
    """キャラクター名の表記を揃える.

    Examples:
        >>> normalize_character_name("SPIDER MAN")
        'Spider-Man'
        >>> normalize_character_name("scarlet witch")
        'Scarlet Witch'
    """
    key = raw_name.strip().lower()
    if key in _CHARACTER_NAME_OVERRIDES:
        return _CHARACTER_NAME_OVERRIDES[key]
    return " ".join(_title_word(w) for w in raw_name.split())


def normalize_skin_name(raw_name: str) -> str:
    """スキン名の全大文字表記をタイトルケースにする.

    小文字を1文字でも含む場合は意図的な表記とみなしてそのまま返す。
    数字・記号だけの語と既知の略語（VFX 等）は保持する。
    """
    s = raw_name.strip()
    if any(ch.islower() for ch in s):
        return s

    words: list[str] = []
    for word in s.split():
        if all(ch.isdigit() or ch in "'-&" for ch in word) or word in _PRESERVED_SKIN_WORDS:
            words.append(word)
        else:
            words.append(_title_word(word))
    return " ".join(words)


def _records_from_json(data: object, source: str) -> list[CharacterSkin]:
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"Character data must be a JSON array: {source}")

    records: list[CharacterSkin] = []
    skipped = 0
    for item in data:
        if not isinstance(item, dict):
            skipped += 1
            continue
        try:
            records.append(CharacterSkin.from_dict(item))
        except ValueError as e:
            logger.warning(f"Skipping character record: {e}")
            skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} malformed character records in {source}")
    return records


def normalize_record_names(skin: CharacterSkin) -> CharacterSkin:
    """レコードのキャラクター名・スキン名の表記を揃えた新しいレコードを返す."""
    return replace(
        skin,
        name=normalize_character_name(skin.name),
        skin_name=normalize_skin_name(skin.skin_name),
    )


def validate_character_data(records: Iterable[CharacterSkin]) -> list[InvalidCharacterRecordError]:
    """テーブル全体を検証し、不正なレコードの例外を集めて返す.

    1件ずつ `logger.warning` に出し、読み込み自体は止めない。

    Returns:
        検証に失敗したレコードの例外（問題が無ければ空リスト）
    """
    errors: list[InvalidCharacterRecordError] = []
    for skin in records:
        try:
            validate_skin(skin)
        except InvalidCharacterRecordError as e:
            logger.warning(f"Invalid character record: {e.reason}")
            errors.append(e)
    return errors


def load_character_data(path: Path | str, normalize_names: bool = False) -> list[CharacterSkin]:
    """JSONファイルからキャラクターテーブルを読み込む.

    Args:
        path: キャラクターテーブルJSONのパス
        normalize_names: True の場合、`normalize_character_name` / `normalize_skin_name`
            で表記を揃える（全大文字の外部データを取り込むとき用）

    Returns:
        ファイル内の順序を保ったレコードのリスト

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: JSON形式が不正、またはルートが配列でない場合
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Character data file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in character data file: {path}") from e

    records = _records_from_json(data, str(path))
    if normalize_names:
        records = [normalize_record_names(skin) for skin in records]
    logger.info(f"Loaded {len(records)} character skins from {path}")
    return records


@cache
def load_bundled_character_data() -> tuple[CharacterSkin, ...]:
    """パッケージ同梱のキャラクターテーブルを読み込む（初回のみ、以後はキャッシュ）."""
    resource = files("hero_asset_tagger.core").joinpath(BUNDLED_CHARACTER_DATA)
    try:
        data = json.loads(resource.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in bundled character data: {resource}") from e

    records = tuple(_records_from_json(data, BUNDLED_CHARACTER_DATA))
    logger.info(f"Loaded {len(records)} character skins from bundled file")
    return records


def _field(record: CharacterSkin | Mapping[str, object], key: str) -> object:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


class CharacterIndex:
    """キャラクターテーブルの索引（id → name / skinid → レコード）.

    レコードは `CharacterSkin` でも `{"id": ..., "name": ...}` 形式の辞書でもよい。
    同じキーが複数ある場合はテーブル順で先頭のレコードを採用します。
    `id` / `name` が文字列でないレコードは索引に載せません。
    """

    def __init__(self, records: Iterable[CharacterSkin | Mapping[str, object]]) -> None:
        self._records = tuple(records)
        self._names: dict[str, str] = {}
        self._skins: dict[str, CharacterSkin] = {}
        for record in self._records:
            char_id = _field(record, "id")
            name = _field(record, "name")
            if not isinstance(char_id, str) or not isinstance(name, str):
                continue
            self._names.setdefault(char_id, name)

            skin = record if isinstance(record, CharacterSkin) else CharacterSkin.from_dict(record)
            if skin.skinid:
                self._skins.setdefault(skin.skinid, skin)

    def __len__(self) -> int:
        return len(self._records)

    def name_for(self, char_id: str) -> str | None:
        return self._names.get(char_id)

    def skin(self, skinid: str) -> CharacterSkin | None:
        return self._skins.get(skinid)
