"""Integration tests for the hero detection report tool."""

import json
import sys
from pathlib import Path

import polars as pl
import pytest

from hero_asset_tagger.tools.report_hero_detection import (
    detected_names,
    load_report_characters,
    main,
    read_path_listing,
    write_hero_detection_report,
)

LISTING = """Marvel/Content/Marvel/Characters/1021/Meshes/SK_1021001_Body.uasset
Marvel\\Content\\Marvel\\Characters\\1021\\Textures\\T_Body_D.uasset

Marvel/Content/Marvel/Shared/MI_1034001_Icon.uasset
Marvel/Content/Marvel/Shared/SK_1034001_Lod0.uasset
Marvel/Content/Marvel/Audio/ui_click.wem
"""


@pytest.mark.integration
class TestHeroDetectionReport:
    """検出レポート出力の統合テスト."""

    def test_read_path_listing(self, tmp_path: Path) -> None:
        """空行を除き、区切りを / に揃えて読み込むこと."""
        listing = tmp_path / "files.txt"
        listing.write_text(LISTING, encoding="utf-8")

        paths = read_path_listing(listing)

        assert len(paths) == 5
        assert paths[1] == "Marvel/Content/Marvel/Characters/1021/Textures/T_Body_D.uasset"

    def test_read_missing_listing(self, tmp_path: Path) -> None:
        """一覧ファイルが無ければ FileNotFoundError になること."""
        with pytest.raises(FileNotFoundError, match="Path listing not found"):
            read_path_listing(tmp_path / "missing.txt")

    def test_report_with_bundled_table(self, tmp_path: Path) -> None:
        """同梱テーブルでパスごとのCSVが書き出されること."""
        listing = tmp_path / "files.txt"
        listing.write_text(LISTING, encoding="utf-8")
        out = tmp_path / "reports" / "heroes.csv"

        df = write_hero_detection_report(listing, out)

        assert out.exists()
        written = pl.read_csv(out, schema_overrides={"hero_id": pl.String})
        assert len(written) == 5
        assert written["hero_id"].to_list() == ["1021", "1021", None, "1034", None]
        assert detected_names(df) == ["Hawkeye", "Iron Man"]

    def test_report_with_custom_table(self, tmp_path: Path) -> None:
        """外部JSONのテーブルで名前が解決されること."""
        listing = tmp_path / "files.txt"
        listing.write_text(LISTING, encoding="utf-8")
        characters = tmp_path / "character_data.json"
        characters.write_text(json.dumps([{"name": "Clint Barton", "id": "1021"}]), encoding="utf-8")

        df = write_hero_detection_report(listing, tmp_path / "heroes.csv", load_report_characters(characters))

        assert detected_names(df) == ["Clint Barton"]

    def test_load_report_characters_normalize_and_validate(self, tmp_path: Path) -> None:
        """名前を揃えて読み込み、検証は不正レコードがあっても読み込みを止めないこと."""
        characters = tmp_path / "character_data.json"
        characters.write_text(
            json.dumps(
                [
                    {"name": "HAWKEYE", "id": "1021", "skinid": "1021001", "skin_name": "DEFAULT"},
                    {"name": "Hulk", "id": "1011", "skinid": "99", "skin_name": "Broken"},
                ]
            ),
            encoding="utf-8",
        )

        records = load_report_characters(characters, normalize_names=True, validate=True)

        assert [(r.name, r.skin_name) for r in records] == [("Hawkeye", "Default"), ("Hulk", "Broken")]

    def test_main(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        """CLI がCSVを書き、検出ヒーローと mod の特定結果を表示すること."""
        listing = tmp_path / "files.txt"
        listing.write_text(LISTING, encoding="utf-8")
        out = tmp_path / "heroes.csv"
        monkeypatch.setattr(
            sys, "argv", ["hero-asset-report", "--paths", str(listing), "--out", str(out), "--validate"]
        )

        main()

        assert out.exists()
        output = capsys.readouterr().out
        assert "Detected heroes (2): Hawkeye, Iron Man" in output
        assert "Identified mod: Hawkeye - Default" in output

    def test_main_unidentified(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """特定できない一覧では "-" を表示すること."""
        listing = tmp_path / "files.txt"
        listing.write_text("Marvel/Content/Marvel/Audio/ui_click.wem\n", encoding="utf-8")
        out = tmp_path / "heroes.csv"
        monkeypatch.setattr(sys, "argv", ["hero-asset-report", "--paths", str(listing), "--out", str(out)])

        main()

        output = capsys.readouterr().out
        assert "Detected heroes (0): -" in output
        assert "Identified mod: -" in output
