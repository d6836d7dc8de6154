"""파이프라인 Envelope 모델

인식(recognize) → 스윕(sweep) → 추출(extract) → 병합(merge) 단계에서 오가는
데이터와 메타데이터를 일관되고 타입 안전하게 관리하는 Pydantic 모델 정의.

- 문서 구조: TableCell / Table / DocumentData (외부 인식기 출력)
- 결과 레코드: CheckupPatch (모든 필드 Optional, 필드별 표준 단위 고정)
- 진행 상황: ParseProgress (정보 전달용, 제어 흐름에 영향 없음)
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Generic, List, Literal, Optional, TypeVar
from typing_extensions import TypeAlias

from pydantic import BaseModel, Field


# =============================================================================
# 기본 타입 정의
# =============================================================================

Stage: TypeAlias = Literal['recognize', 'sweep', 'extract', 'merge', 'probe']
"""파이프라인 처리 단계"""

TData = TypeVar('TData')
TMeta = TypeVar('TMeta')


class Envelope(BaseModel, Generic[TData, TMeta]):
    """파이프라인 단계별 데이터와 메타데이터를 감싸는 공통 Envelope 모델"""
    stage: Stage
    data: TData
    meta: TMeta
    version: str = '1.0'


# =============================================================================
# 인식(recognize) 단계 모델
# =============================================================================

class TableCell(BaseModel):
    """표의 단일 셀 (텍스트만 사용, 좌표는 인식기 쪽에만 존재)"""
    text: str = Field(default="", description="셀 텍스트 전사")


class Table(BaseModel):
    """행/셀 순서를 보존하는 표 추상화"""
    rows: List[List[TableCell]] = Field(default_factory=list, description="행 목록 (각 행은 셀 목록)")

    @classmethod
    def from_texts(cls, rows: List[List[str]]) -> "Table":
        """문자열 2차원 리스트로부터 Table 생성"""
        return cls(rows=[[TableCell(text=t or "") for t in row] for row in rows])

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def max_cols(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def cell_text(self, row: int, col: int) -> str:
        """범위를 벗어나면 빈 문자열"""
        if row < 0 or row >= len(self.rows):
            return ""
        cells = self.rows[row]
        if col < 0 or col >= len(cells):
            return ""
        return cells[col].text

    def row_texts(self) -> List[List[str]]:
        return [[c.text for c in row] for row in self.rows]


class DocumentData(BaseModel):
    """인식 단계 결과 데이터 (문서 하나)"""
    title: Optional[str] = Field(default=None, description="문서 제목 (인식기가 제공하는 경우)")
    tables: List[Table] = Field(default_factory=list, description="인식된 표 목록")
    text_lines: List[str] = Field(default_factory=list, description="읽기 순서의 텍스트 라인")
    lists: List[List[str]] = Field(default_factory=list, description="목록 블록 (항목 텍스트)")
    paragraphs: List[str] = Field(default_factory=list, description="문단 텍스트")


class DocumentMeta(BaseModel):
    """인식 단계 결과 메타데이터"""
    tables: Optional[int] = Field(default=None, description="인식된 표 개수")
    lines: Optional[int] = Field(default=None, description="인식된 텍스트 라인 개수")
    source: Optional[Literal['bytes', 'image', 'sweep']] = Field(default=None, description="입력 소스 타입")
    lang: Optional[str] = Field(default=None, description="인식 언어")
    engine: Optional[str] = Field(default=None, description="사용된 인식 엔진명")


# =============================================================================
# 결과 레코드 (CheckupPatch)
# =============================================================================

class MergePolicy(str, Enum):
    """패치 병합 시 충돌 해결 정책"""
    PREFER_EXISTING = "prefer_existing"  # 비어 있는 필드만 채움
    PREFER_INCOMING = "prefer_incoming"  # 들어오는 값이 있으면 덮어씀


class CheckupPatch(BaseModel):
    """검진 결과 희소 레코드

    모든 필드는 Optional이며 None은 "검출되지 않음"을 뜻합니다 (0으로 검출된 것이 아님).
    각 필드는 하나의 표준 단위로 정규화된 값만 저장합니다.
    """

    # 신체 계측
    height_cm: Optional[float] = Field(default=None, description="신장 (cm)")
    weight_kg: Optional[float] = Field(default=None, description="체중 (kg)")
    waist_cm: Optional[float] = Field(default=None, description="복위 (cm)")
    fat_percent: Optional[float] = Field(default=None, description="체지방률 (%)")
    bmi: Optional[float] = Field(default=None, description="BMI (무차원)")

    # 혈압
    systolic: Optional[float] = Field(default=None, description="수축기 혈압 (mmHg)")
    diastolic: Optional[float] = Field(default=None, description="이완기 혈압 (mmHg)")

    # 혈구 (CBC)
    rbc_million_per_ul: Optional[float] = Field(default=None, description="적혈구 (10^6/µL)")
    hgb_g_per_dl: Optional[float] = Field(default=None, description="헤모글로빈 (g/dL)")
    hct_percent: Optional[float] = Field(default=None, description="헤마토크릿 (%)")
    wbc_thousand_per_ul: Optional[float] = Field(default=None, description="백혈구 (10^3/µL)")
    plt_thousand_per_ul: Optional[float] = Field(default=None, description="혈소판 (10^3/µL)")

    # 간 기능
    ast: Optional[float] = Field(default=None, description="AST(GOT) (U/L)")
    alt: Optional[float] = Field(default=None, description="ALT(GPT) (U/L)")
    ggt: Optional[float] = Field(default=None, description="γ-GT (U/L)")
    total_protein: Optional[float] = Field(default=None, description="총단백 (g/dL)")
    albumin: Optional[float] = Field(default=None, description="알부민 (g/dL)")

    # 신장 / 요산
    creatinine: Optional[float] = Field(default=None, description="크레아티닌 (mg/dL)")
    uric_acid: Optional[float] = Field(default=None, description="요산 (mg/dL)")

    # 대사
    fasting_glucose_mgdl: Optional[float] = Field(default=None, description="공복 혈당 (mg/dL)")
    hba1c_ngsp_percent: Optional[float] = Field(default=None, description="HbA1c NGSP (%)")

    # 지질
    total_chol: Optional[float] = Field(default=None, description="총콜레스테롤 (mg/dL)")
    ldl: Optional[float] = Field(default=None, description="LDL 콜레스테롤 (mg/dL)")
    hdl: Optional[float] = Field(default=None, description="HDL 콜레스테롤 (mg/dL)")
    triglycerides: Optional[float] = Field(default=None, description="중성지방 (mg/dL)")

    @classmethod
    def field_names(cls) -> List[str]:
        return list(cls.model_fields.keys())

    @property
    def is_empty(self) -> bool:
        """모든 필드가 None이면 True"""
        return all(getattr(self, name) is None for name in self.field_names())

    def filled_fields(self) -> Dict[str, float]:
        """값이 있는 필드만 dict로 반환 (로깅/디버그용)"""
        return {
            name: getattr(self, name)
            for name in self.field_names()
            if getattr(self, name) is not None
        }

    def merge(self, other: "CheckupPatch", policy: MergePolicy = MergePolicy.PREFER_EXISTING) -> "CheckupPatch":
        """다른 패치를 병합한 새 패치를 반환합니다 (self는 변경하지 않음).

        Args:
            other: 병합할 패치
            policy: PREFER_EXISTING이면 빈 필드만 채우고,
                PREFER_INCOMING이면 들어오는 값이 있을 때 항상 덮어씁니다.

        Returns:
            병합된 새 CheckupPatch
        """
        updates: Dict[str, float] = {}
        for name in self.field_names():
            incoming = getattr(other, name)
            if incoming is None:
                continue
            if policy == MergePolicy.PREFER_INCOMING or getattr(self, name) is None:
                updates[name] = incoming
        return self.model_copy(update=updates)


# =============================================================================
# 진행 상황 모델
# =============================================================================

class ParseProgress(BaseModel):
    """진행 스냅샷 (완료 단계, 전체 단계, 단계 라벨, 상세 텍스트)"""
    completed: int = Field(default=0, description="완료된 단계 수")
    total: int = Field(default=0, description="전체 단계 수")
    phase: str = Field(default="", description="단계 라벨")
    detail: str = Field(default="", description="상세 텍스트")

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(1.0, self.completed / self.total)

    @classmethod
    def zero(cls) -> "ParseProgress":
        return cls()


def to_user_facing(progress: ParseProgress) -> ParseProgress:
    """내부 단계 메시지를 사용자용 문구로 바꾼 스냅샷을 반환합니다.

    스케일/크롭 같은 내부 정보는 숨기고 상세 텍스트는 비웁니다.
    """
    if progress.completed == 0:
        label = "Preparing…"
    elif progress.completed < progress.total:
        label = "Analyzing document…"
    else:
        label = "Finalizing…"
    return ParseProgress(
        completed=progress.completed,
        total=progress.total,
        phase=label,
        detail="",
    )


# =============================================================================
# 타입 별칭 (Type Aliases)
# =============================================================================

DocumentEnvelope = Envelope[DocumentData, DocumentMeta]


__all__ = [
    'Stage',
    'Envelope',
    'TableCell',
    'Table',
    'DocumentData',
    'DocumentMeta',
    'DocumentEnvelope',
    'MergePolicy',
    'CheckupPatch',
    'ParseProgress',
    'to_user_facing',
]
