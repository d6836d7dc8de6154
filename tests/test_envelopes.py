"""Envelope / CheckupPatch / ParseProgress 모델 테스트"""

import pytest

from kenshin.models.envelopes import (
    CheckupPatch,
    DocumentData,
    DocumentEnvelope,
    DocumentMeta,
    MergePolicy,
    ParseProgress,
    Table,
    to_user_facing,
)


class TestTable:
    """Table 모델 테스트"""

    def test_from_texts(self):
        t = Table.from_texts([["a", "b", "c"], ["d"]])
        assert t.row_count == 2
        assert t.max_cols == 3
        assert t.row_texts() == [["a", "b", "c"], ["d"]]

    def test_cell_text_out_of_range(self):
        t = Table.from_texts([["a"]])
        assert t.cell_text(0, 0) == "a"
        assert t.cell_text(0, 5) == ""
        assert t.cell_text(3, 0) == ""

    def test_empty_table(self):
        t = Table()
        assert t.row_count == 0
        assert t.max_cols == 0


class TestDocumentEnvelope:
    """DocumentEnvelope 생성 테스트"""

    def test_create(self):
        env = DocumentEnvelope(
            stage="recognize",
            data=DocumentData(text_lines=["x"]),
            meta=DocumentMeta(tables=0, lines=1, source="bytes", engine="Dummy"),
        )
        assert env.stage == "recognize"
        assert env.version == "1.0"
        assert env.data.tables == []


# =============================================================================
# CheckupPatch 병합
# =============================================================================

class TestCheckupPatch:
    """CheckupPatch 테스트"""

    def test_empty(self):
        assert CheckupPatch().is_empty
        assert not CheckupPatch(ast=28).is_empty

    def test_field_names(self):
        names = CheckupPatch.field_names()
        assert len(names) == 25
        assert "hba1c_ngsp_percent" in names

    def test_filled_fields(self):
        p = CheckupPatch(ast=28, hdl=55)
        assert p.filled_fields() == {"ast": 28, "hdl": 55}

    def test_merge_with_empty_is_identity(self):
        p = CheckupPatch(ast=28, ldl=130)
        assert p.merge(CheckupPatch()) == p
        assert p.merge(CheckupPatch(), MergePolicy.PREFER_INCOMING) == p
        for policy in MergePolicy:
            assert CheckupPatch().merge(p, policy) == p

    def test_prefer_existing(self):
        a = CheckupPatch(ast=28)
        b = CheckupPatch(ast=40, alt=31)
        merged = a.merge(b, MergePolicy.PREFER_EXISTING)
        assert merged.ast == 28
        assert merged.alt == 31

    def test_prefer_incoming(self):
        a = CheckupPatch(ast=28, ggt=45)
        b = CheckupPatch(ast=40)
        merged = a.merge(b, MergePolicy.PREFER_INCOMING)
        assert merged.ast == 40
        assert merged.ggt == 45

    def test_merge_does_not_mutate(self):
        a = CheckupPatch(ast=28)
        a.merge(CheckupPatch(alt=31))
        assert a.alt is None


class TestParseProgress:
    """ParseProgress 테스트"""

    def test_fraction(self):
        assert ParseProgress(completed=9, total=18).fraction == pytest.approx(0.5)
        assert ParseProgress(completed=20, total=18).fraction == 1.0
        assert ParseProgress.zero().fraction == 0.0

    @pytest.mark.parametrize("completed,expected", [
        (0, "Preparing…"),
        (5, "Analyzing document…"),
        (18, "Finalizing…"),
    ])
    def test_user_facing(self, completed, expected):
        shown = to_user_facing(ParseProgress(
            completed=completed, total=18, phase="Reading Tables...", detail="Scale 2400 • Crop 1/6",
        ))
        assert shown.phase == expected
        assert shown.detail == ""
        assert shown.completed == completed
