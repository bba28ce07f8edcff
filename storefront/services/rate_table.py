"""배송비 요금표

CSV 요금표(地域, 都道府県名, 2kg/5kg/10kg 요금)를 한 번만 읽어서 메모리에 캐시합니다.

- load(): 최초 1회만 파싱, 이후에는 캐시 반환 (멀티스레드 동시 호출 시에도 파싱은 1회)
- lookup(): 도도부현명 정확 일치 검색
- 파일 누락, 헤더 누락, 숫자가 아닌 요금 등은 DataSourceUnavailable 로 실패
"""

from __future__ import annotations

import csv
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from .base import ServiceError

logger = logging.getLogger(__name__)


# CSV 컬럼명
REGION_COLUMN = "地域"
PREFECTURE_COLUMN = "都道府県名"
TIER2_COLUMN = "2kgまでの料金"
TIER5_COLUMN = "5kgまでの料金"
TIER10_COLUMN = "10kgまでの料金"

REQUIRED_COLUMNS = (REGION_COLUMN, PREFECTURE_COLUMN, TIER2_COLUMN, TIER5_COLUMN, TIER10_COLUMN)


class DataSourceUnavailable(ServiceError):
    """요금표를 읽을 수 없음 (파일 없음, 형식 오류)"""

    default_code = "RATE_TABLE_UNAVAILABLE"


@dataclass(frozen=True)
class TierRates:
    """중량 구간별 요금 (엔)"""

    tier2: int
    tier5: int
    tier10: int

    def to_dict(self) -> dict[str, int]:
        return {"tier2": self.tier2, "tier5": self.tier5, "tier10": self.tier10}


@dataclass(frozen=True)
class RateEntry:
    """요금표 한 행"""

    region: str
    prefecture: str
    rates: TierRates

    def to_dict(self) -> dict[str, Any]:
        return {
            "region": self.region,
            "prefecture": self.prefecture,
            "rates": self.rates.to_dict(),
        }


class RateTable:
    """
    도도부현 → 중량 구간 → 요금 테이블

    프로세스 수명 동안 불변으로 취급합니다. 로드 실패는 캐시하지 않으므로
    파일을 복구하면 다음 호출에서 다시 읽습니다.

    사용법:
        table = RateTable("storefront/data/postage.csv")
        entry = table.lookup("東京都")
    """

    def __init__(self, source_path: str | Path):
        self.source_path = Path(source_path)
        self._entries: tuple[RateEntry, ...] | None = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._entries is not None

    def load(self) -> tuple[RateEntry, ...]:
        """
        요금표 로드 (멱등)

        Returns:
            요금표 전체 (CSV 순서)

        Raises:
            DataSourceUnavailable: 파일이 없거나 형식이 잘못된 경우
        """
        entries = self._entries
        if entries is not None:
            return entries

        # 동시에 들어온 최초 호출들은 락에서 대기하다가 같은 결과를 받는다
        with self._lock:
            if self._entries is None:
                self._entries = self._read_source()
                logger.info(
                    "배송비 요금표 로드 완료: path=%s, rows=%d",
                    self.source_path,
                    len(self._entries),
                )
            return self._entries

    def lookup(self, prefecture: str) -> RateEntry | None:
        """도도부현명 정확 일치 검색 (없으면 None)"""
        for entry in self.load():
            if entry.prefecture == prefecture:
                return entry
        return None

    def entries(self) -> tuple[RateEntry, ...]:
        return self.load()

    @property
    def prefectures(self) -> tuple[str, ...]:
        """요금표 순서대로의 도도부현명 목록"""
        return tuple(entry.prefecture for entry in self.load())

    def _read_source(self) -> tuple[RateEntry, ...]:
        if not self.source_path.is_file():
            logger.error("배송비 요금표 파일을 찾을 수 없습니다: %s", self.source_path)
            raise DataSourceUnavailable(
                f"配送料金表が見つかりません: {self.source_path}",
                details={"path": str(self.source_path)},
            )

        try:
            # utf-8-sig: 엑셀에서 저장한 BOM 포함 CSV 대응
            with self.source_path.open(encoding="utf-8-sig", newline="") as fp:
                return self._parse(fp)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error("배송비 요금표 읽기 실패: path=%s, error=%s", self.source_path, e)
            raise DataSourceUnavailable(
                f"配送料金表を読み込めません: {self.source_path}",
                details={"path": str(self.source_path), "error": str(e)},
            ) from e

    def _parse(self, fp: TextIO) -> tuple[RateEntry, ...]:
        reader = csv.DictReader(fp)
        headers = [h.strip() for h in (reader.fieldnames or [])]
        missing = [column for column in REQUIRED_COLUMNS if column not in headers]
        if missing:
            raise DataSourceUnavailable(
                f"配送料金表の列が不足しています: {', '.join(missing)}",
                details={"path": str(self.source_path), "missing_columns": missing},
            )
        reader.fieldnames = headers

        entries = []
        # 헤더가 1행이므로 데이터는 2행부터
        for line_no, row in enumerate(reader, start=2):
            prefecture = (row.get(PREFECTURE_COLUMN) or "").strip()
            if not prefecture:
                raise DataSourceUnavailable(
                    f"配送料金表 {line_no}行目: 都道府県名が空です",
                    details={"path": str(self.source_path), "line": line_no},
                )
            entries.append(
                RateEntry(
                    region=(row.get(REGION_COLUMN) or "").strip(),
                    prefecture=prefecture,
                    rates=TierRates(
                        tier2=self._parse_price(row, TIER2_COLUMN, line_no),
                        tier5=self._parse_price(row, TIER5_COLUMN, line_no),
                        tier10=self._parse_price(row, TIER10_COLUMN, line_no),
                    ),
                )
            )

        if not entries:
            raise DataSourceUnavailable(
                "配送料金表にデータがありません",
                details={"path": str(self.source_path)},
            )
        return tuple(entries)

    def _parse_price(self, row: dict[str, str | None], column: str, line_no: int) -> int:
        raw = (row.get(column) or "").strip()
        try:
            price = int(raw)
        except ValueError:
            raise DataSourceUnavailable(
                f"配送料金表 {line_no}行目: {column} が数値ではありません ({raw!r})",
                details={"path": str(self.source_path), "line": line_no, "column": column},
            )
        if price < 0:
            raise DataSourceUnavailable(
                f"配送料金表 {line_no}行目: {column} が負の値です ({price})",
                details={"path": str(self.source_path), "line": line_no, "column": column},
            )
        return price
