"""ヒーロー検出のコア処理群.

- タグ値の配列化
- ファイルパスからのキャラクターID抽出と表示名への解決
- キャラクターテーブルの読み込み・検証
"""

from .character_data import CharacterIndex, CharacterSkin, load_bundled_character_data, load_character_data
from .hero_detection import detect_heroes, detect_heroes_with_data, extract_hero_ids, identify_mod_from_paths
from .tags import to_tag_array

__all__ = [
    "to_tag_array",
    "extract_hero_ids",
    "detect_heroes",
    "detect_heroes_with_data",
    "identify_mod_from_paths",
    "CharacterSkin",
    "CharacterIndex",
    "load_character_data",
    "load_bundled_character_data",
]
