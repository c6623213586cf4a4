"""mod のファイル一覧からヒーロー検出結果をCSVに出力する。"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

import polars as pl
from loguru import logger

from hero_asset_tagger.core.character_data import (
    CharacterSkin,
    load_bundled_character_data,
    load_character_data,
    validate_character_data,
)
from hero_asset_tagger.core.hero_detection import detect_heroes_frame, identify_mod_from_paths


def read_path_listing(listing_path: Path) -> list[str]:
    """1行1パスのファイル一覧を読み込む（空行は無視、`\\` は `/` に揃える）."""
    listing_path = Path(listing_path)
    if not listing_path.exists():
        raise FileNotFoundError(f"Path listing not found: {listing_path}")

    with open(listing_path, encoding="utf-8") as f:
        return [line.strip().replace("\\", "/") for line in f if line.strip()]


def load_report_characters(
    characters_path: Path | None = None,
    *,
    normalize_names: bool = False,
    validate: bool = False,
) -> Sequence[CharacterSkin]:
    """レポート用のキャラクターテーブルを読み込む.

    Args:
        characters_path: キャラクターテーブルJSON（省略時は同梱データ）
        normalize_names: 名前表記を揃える（外部JSONのみ）
        validate: 読み込んだレコードを検証し、不正なものを warning に出す
    """
    character_data: Sequence[CharacterSkin]
    if characters_path is None:
        character_data = load_bundled_character_data()
    else:
        character_data = load_character_data(characters_path, normalize_names=normalize_names)

    if validate:
        errors = validate_character_data(character_data)
        logger.info(f"Validated {len(character_data)} character skins: {len(errors)} invalid")
    return character_data


def write_hero_detection_report(
    listing_path: Path,
    out_path: Path,
    character_data: Sequence[CharacterSkin] | None = None,
) -> pl.DataFrame:
    """パスごとの検出結果をCSVに書き出す.

    Args:
        listing_path: 1行1パスのファイル一覧
        out_path: 出力CSVのパス
        character_data: キャラクターテーブル（省略時は同梱データ）

    Returns:
        書き出した DataFrame（path, hero_id, rule, name）
    """
    paths = read_path_listing(listing_path)
    df = detect_heroes_frame(paths, character_data)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(out_path)
    logger.info(f"Wrote {len(df)} rows: {out_path}")
    return df


def detected_names(df: pl.DataFrame) -> list[str]:
    """レポートから解決済みのヒーロー名を初出順・重複なしで取り出す."""
    return df["name"].drop_nulls().unique(maintain_order=True).to_list()


def main() -> None:
    parser = argparse.ArgumentParser(description="Detect heroes from a mod file listing and write a CSV report")
    parser.add_argument("--paths", type=Path, required=True, help="Text file with one archive path per line")
    parser.add_argument("--out", type=Path, required=True, help="Output CSV path")
    parser.add_argument(
        "--characters",
        type=Path,
        default=None,
        help="Character data JSON (default: bundled character_data.json)",
    )
    parser.add_argument(
        "--normalize-names",
        action="store_true",
        help="Normalize character/skin name casing when loading --characters",
    )
    parser.add_argument("--validate", action="store_true", help="Validate character records and log invalid ones")
    args = parser.parse_args()

    character_data = load_report_characters(
        args.characters, normalize_names=args.normalize_names, validate=args.validate
    )
    df = write_hero_detection_report(args.paths, args.out, character_data)

    names = detected_names(df)
    print(f"Detected heroes ({len(names)}): {', '.join(names) if names else '-'}")

    identified = identify_mod_from_paths(df["path"].to_list(), character_data)
    if identified:
        print(f"Identified mod: {identified[0]} - {identified[1]}")
    else:
        print("Identified mod: -")


if __name__ == "__main__":
    main()
