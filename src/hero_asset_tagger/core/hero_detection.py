"""ファイルパスからのヒーロー検出.

mod アーカイブ内のファイルパス一覧から、キャラクターID（4桁）を抽出して表示名に解決します。

判定ルール（パスごとに優先順で評価）:
    1. パス: `Characters/` `Hero_ST/` `Hero/` の直後の4桁をIDとする。
       一致した場合、ファイル名ルールは評価しない（共有アセットの誤検出を避ける）
    2. ファイル名: 最後の `/` 以降をファイル名とし、`mi_` で始まるもの（大小無視）は除外。
       `_` または `/` の直後にある 7桁（`10[1-6]` + 1桁 + 3桁）の先頭4桁をIDとする

抽出したIDは重複除去し、テーブル順で最初に一致したレコードの `name` に解決する。
テーブルに無いIDは黙って捨てる。
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Literal

import polars as pl
from loguru import logger

from .character_data import CharacterIndex, CharacterSkin, load_bundled_character_data

# 数字は ASCII の 0-9 のみ（`\d` は全角・アラビア数字なども拾うため使わない）
_PATH_PATTERN = re.compile(r"(?:Characters|Hero_ST|Hero)/([0-9]{4})")
# NOTE: ファイル名だけを走査するので `/` 側は実質発火しないが、パス全体に適用する実装との互換のため残す
_FILENAME_PATTERN = re.compile(r"[_/](10[1-6][0-9])([0-9]{3})")
_EXCLUDED_FILENAME_PREFIX = "mi_"

# mod 単位の識別用（スキンID → キャラクターIDの順で探す）
_SKIN_ID_PATTERN = re.compile(r"[0-9]{7}")
_HERO_DIR_PATTERN = re.compile(r"/(?:Hero|Characters?)/([0-9]{4})/")
UNKNOWN_SKIN = "Unknown Skin"

CharacterRecord = CharacterSkin | Mapping[str, object]
DetectionRule = Literal["path", "filename"]


@dataclass(frozen=True)
class HeroMatch:
    """1パス分の検出結果."""

    hero_id: str
    rule: DetectionRule


def match_hero_id(path: str) -> HeroMatch | None:
    """1つのパスからキャラクターIDを抽出する.

    Examples:
        >>> match_hero_id("Characters/1021/texture.png")
        HeroMatch(hero_id='1021', rule='path')
        >>> match_hero_id("SK_1021001_Body.uasset")
        HeroMatch(hero_id='1021', rule='filename')
        >>> match_hero_id("MI_1021001_Icon.uasset") is None
        True
    """
    path_match = _PATH_PATTERN.search(path)
    if path_match:
        return HeroMatch(path_match.group(1), "path")

    filename = path.rsplit("/", 1)[-1]
    if filename.lower().startswith(_EXCLUDED_FILENAME_PREFIX):
        return None

    filename_match = _FILENAME_PATTERN.search(filename)
    if filename_match:
        return HeroMatch(filename_match.group(1), "filename")
    return None


def _iter_matches(paths: Iterable[object]) -> Iterable[tuple[str, HeroMatch | None]]:
    for path in paths:
        if not isinstance(path, str):
            logger.debug(f"Skipping non-string path entry: {path!r}")
            continue
        yield path, match_hero_id(path)


def extract_hero_ids(paths: Iterable[str]) -> list[str]:
    """パス一覧からキャラクターIDを抽出する（初出順、重複なし）.

    文字列でない要素は一致なしとして読み飛ばす。
    """
    hero_ids: dict[str, None] = {}
    for _path, match in _iter_matches(paths):
        if match is not None:
            hero_ids.setdefault(match.hero_id)
    return list(hero_ids)


def _resolve_names(hero_ids: Iterable[str], index: CharacterIndex) -> list[str]:
    names: dict[str, None] = {}
    for hero_id in hero_ids:
        name = index.name_for(hero_id)
        if name is not None:
            names.setdefault(name)
    return list(names)


def _detect(paths: Iterable[str], character_data: Iterable[CharacterRecord]) -> list[str]:
    hero_ids = extract_hero_ids(paths)
    names = _resolve_names(hero_ids, CharacterIndex(character_data))
    logger.debug(f"Detected {len(hero_ids)} hero ids, resolved {len(names)} names")
    return names


def detect_heroes(paths: Iterable[str]) -> list[str]:
    """同梱のキャラクターテーブルでヒーロー名を検出する.

    Args:
        paths: mod 内のファイルパス一覧（`/` 区切り）

    Returns:
        検出したヒーロー表示名（重複なし）
    """
    return _detect(paths, load_bundled_character_data())


def detect_heroes_with_data(
    paths: Iterable[str],
    character_data: Iterable[CharacterRecord],
) -> list[str]:
    """呼び出し側が渡したキャラクターテーブルでヒーロー名を検出する.

    テーブルを更新しても同梱データの再配布が不要になるように、判定ルールは
    `detect_heroes()` と共通で、テーブルの出所だけが異なる。

    Args:
        paths: mod 内のファイルパス一覧
        character_data: `CharacterSkin` または `id`/`name` を持つ辞書の配列

    Returns:
        検出したヒーロー表示名（重複なし）
    """
    return _detect(paths, character_data)


def detect_heroes_frame(
    paths: Iterable[str],
    character_data: Iterable[CharacterRecord] | None = None,
) -> pl.DataFrame:
    """パスごとの検出結果を DataFrame で返す（レポート用）.

    Returns:
        列: path, hero_id, rule, name（一致/解決できなかった箇所は null）
    """
    index = CharacterIndex(load_bundled_character_data() if character_data is None else character_data)

    rows: dict[str, list[str | None]] = {"path": [], "hero_id": [], "rule": [], "name": []}
    for path, match in _iter_matches(paths):
        rows["path"].append(path)
        rows["hero_id"].append(match.hero_id if match else None)
        rows["rule"].append(match.rule if match else None)
        rows["name"].append(index.name_for(match.hero_id) if match else None)

    return pl.DataFrame(
        rows,
        schema={"path": pl.String, "hero_id": pl.String, "rule": pl.String, "name": pl.String},
    )


def identify_mod_from_paths(
    paths: Iterable[str],
    character_data: Iterable[CharacterRecord] | None = None,
) -> tuple[str, str] | None:
    """mod のファイルパスからキャラクターとスキンを特定する.

    パスを先頭から順に見て、最初に特定できたものを返す。各パスでは
        1. 7桁の数字列をスキンIDとして検索し、一致すれば (name, skin_name)
        2. `/Hero/` `/Character/` `/Characters/` 直下の4桁をキャラクターIDとして検索し、
           一致すれば (name, "Unknown Skin")
    の順に試す。

    Args:
        paths: mod 内のファイルパス一覧
        character_data: キャラクターテーブル（省略時は同梱データ）

    Returns:
        (キャラクター名, スキン名)。特定できなければ None
    """
    index = CharacterIndex(load_bundled_character_data() if character_data is None else character_data)

    for path in paths:
        if not isinstance(path, str):
            continue

        for m in _SKIN_ID_PATTERN.finditer(path):
            skin = index.skin(m.group(0))
            if skin is not None:
                return skin.name, skin.skin_name

        hero_match = _HERO_DIR_PATTERN.search(path)
        if hero_match:
            name = index.name_for(hero_match.group(1))
            if name is not None:
                return name, UNKNOWN_SKIN

    return None
