"""RateTable 단위 테스트"""

import threading
from unittest.mock import patch

import pytest

from storefront.services.rate_table import DataSourceUnavailable, RateEntry, RateTable, TierRates
from storefront.tests.conftest import RATE_CSV_HEADER, RATE_CSV_ROWS


class TestRateTableLoad:
    """요금표 로드 테스트"""

    def test_load_parses_all_rows_in_order(self, rate_table):
        """CSV 순서대로 모든 행 로드"""
        # Act
        entries = rate_table.load()

        # Assert
        assert len(entries) == len(RATE_CSV_ROWS)
        assert entries[0].prefecture == "北海道"
        assert entries[1] == RateEntry(region="関東", prefecture="東京都", rates=TierRates(600, 800, 1200))
        assert rate_table.is_loaded

    def test_load_is_idempotent(self, rate_table):
        """두 번째 호출은 캐시 반환 (파일을 다시 읽지 않음)"""
        # Arrange
        first = rate_table.load()

        # Act
        with patch.object(RateTable, "_read_source") as mock_read:
            second = rate_table.load()

        # Assert
        assert second is first
        mock_read.assert_not_called()

    def test_load_accepts_utf8_bom(self, write_rate_csv):
        """엑셀에서 저장한 BOM 포함 CSV"""
        # Arrange
        path = write_rate_csv(RATE_CSV_ROWS, encoding="utf-8-sig")

        # Act
        entries = RateTable(path).load()

        # Assert
        assert entries[0].region == "北海道"

    def test_load_strips_whitespace(self, write_rate_csv):
        """헤더/값 앞뒤 공백 제거"""
        # Arrange
        header = " 地域 , 都道府県名 ,2kgまでの料金,5kgまでの料金,10kgまでの料金"
        path = write_rate_csv([" 関東 , 東京都 , 600 , 800 , 1200 "], header=header)

        # Act
        entry = RateTable(path).lookup("東京都")

        # Assert
        assert entry.region == "関東"
        assert entry.rates == TierRates(600, 800, 1200)

    def test_to_dict(self, rate_table):
        """JSON 응답 형식"""
        entry = rate_table.lookup("東京都")

        assert entry.to_dict() == {
            "region": "関東",
            "prefecture": "東京都",
            "rates": {"tier2": 600, "tier5": 800, "tier10": 1200},
        }


class TestRateTableLookup:
    """도도부현 검색 테스트"""

    def test_lookup_exact_match(self, rate_table):
        assert rate_table.lookup("大阪府").rates.tier10 == 1250

    def test_lookup_is_exact_only(self, rate_table):
        """접미사 없는 이름, 부분 문자열은 찾지 않음 (변환은 LocationResolver 담당)"""
        assert rate_table.lookup("東京") is None
        assert rate_table.lookup("東京都 ") is None
        assert rate_table.lookup("") is None

    def test_prefectures_in_table_order(self, rate_table):
        assert rate_table.prefectures == ("北海道", "東京都", "神奈川県", "京都府", "大阪府", "兵庫県")


class TestRateTableFailures:
    """요금표 로드 실패 테스트"""

    def test_missing_file(self, tmp_path):
        """파일 없음"""
        table = RateTable(tmp_path / "missing.csv")

        with pytest.raises(DataSourceUnavailable) as exc_info:
            table.load()

        assert exc_info.value.code == "RATE_TABLE_UNAVAILABLE"
        assert not table.is_loaded

    def test_missing_column(self, write_rate_csv):
        """필수 컬럼 누락"""
        # Arrange
        path = write_rate_csv(["関東,東京都,600,800"], header="地域,都道府県名,2kgまでの料金,5kgまでの料金")

        # Act & Assert
        with pytest.raises(DataSourceUnavailable) as exc_info:
            RateTable(path).load()

        assert exc_info.value.details["missing_columns"] == ["10kgまでの料金"]

    def test_non_numeric_price(self, write_rate_csv):
        """숫자가 아닌 요금은 부분 로드 없이 실패"""
        # Arrange
        path = write_rate_csv(["北海道,北海道,1100,1300,1600", "関東,東京都,600,abc,1200"])

        # Act & Assert
        with pytest.raises(DataSourceUnavailable) as exc_info:
            RateTable(path).load()

        assert exc_info.value.details == {
            "path": str(path),
            "line": 3,
            "column": "5kgまでの料金",
        }

    @pytest.mark.parametrize("value", ["", "12.5", "-100"])
    def test_invalid_price_values(self, write_rate_csv, value):
        """빈 값, 소수, 음수"""
        path = write_rate_csv([f"関東,東京都,600,800,{value}"])

        with pytest.raises(DataSourceUnavailable):
            RateTable(path).load()

    def test_empty_prefecture(self, write_rate_csv):
        path = write_rate_csv(["関東,,600,800,1200"])

        with pytest.raises(DataSourceUnavailable):
            RateTable(path).load()

    def test_header_only(self, write_rate_csv):
        """데이터 행 없음"""
        path = write_rate_csv([])

        with pytest.raises(DataSourceUnavailable):
            RateTable(path).load()

    def test_invalid_encoding(self, tmp_path):
        """UTF-8 이 아닌 파일"""
        path = tmp_path / "postage.csv"
        path.write_bytes((RATE_CSV_HEADER + "\n関東,東京都,600,800,1200\n").encode("cp932"))

        with pytest.raises(DataSourceUnavailable):
            RateTable(path).load()

    def test_failure_is_not_cached(self, tmp_path):
        """실패 후 파일을 복구하면 다음 호출에서 로드"""
        # Arrange
        path = tmp_path / "postage.csv"
        table = RateTable(path)
        with pytest.raises(DataSourceUnavailable):
            table.load()

        # Act
        path.write_text(RATE_CSV_HEADER + "\n関東,東京都,600,800,1200\n", encoding="utf-8")

        # Assert
        assert table.lookup("東京都").rates.tier2 == 600

    def test_lookup_propagates_failure(self, tmp_path):
        """lookup 도 로드 실패를 그대로 전달"""
        with pytest.raises(DataSourceUnavailable):
            RateTable(tmp_path / "missing.csv").lookup("東京都")


class TestRateTableConcurrency:
    """최초 로드 동시 호출 테스트"""

    def test_concurrent_first_load_reads_source_once(self, rate_csv):
        """동시에 load() 를 호출해도 파일은 한 번만 파싱"""
        # Arrange
        table = RateTable(rate_csv)
        original_read = RateTable._read_source
        read_count = 0
        count_lock = threading.Lock()
        start = threading.Barrier(8)

        def counting_read(self):
            nonlocal read_count
            with count_lock:
                read_count += 1
            return original_read(self)

        results = []
        errors = []

        def worker():
            try:
                start.wait()
                results.append(table.load())
            except Exception as e:  # pragma: no cover
                errors.append(e)

        # Act
        with patch.object(RateTable, "_read_source", counting_read):
            threads = [threading.Thread(target=worker) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        # Assert
        assert errors == []
        assert read_count == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)
