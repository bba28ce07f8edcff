"""우편번호 → 주소 검색 (zipcloud)

공식 문서: https://zipcloud.ibsnet.co.jp/doc/api

검색 실패는 수동 주소 입력을 막으면 안 되므로 예외 대신 None 을 반환합니다.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from django.conf import settings

import requests
from asgiref.sync import sync_to_async

logger = logging.getLogger(__name__)

POSTAL_CODE_DIGITS = 7


@dataclass(frozen=True)
class PostalAddress:
    """우편번호 검색 결과"""

    postal_code: str  # XXX-XXXX
    prefecture: str  # address1
    city: str  # address2
    town: str  # address3

    @property
    def street_address(self) -> str:
        return f"{self.city}{self.town}"


def normalize_postal_code(postal_code: str | None) -> str | None:
    """숫자만 남겨서 7자리면 반환, 아니면 None"""
    digits = re.sub(r"\D", "", postal_code or "")
    if len(digits) != POSTAL_CODE_DIGITS:
        return None
    return digits


def format_postal_code(digits: str) -> str:
    return f"{digits[:3]}-{digits[3:]}"


class ZipcloudClient:
    """
    zipcloud 우편번호 검색 API 클라이언트

    사용법:
        address = ZipcloudClient().lookup("100-0001")
        if address:
            address.prefecture  # "東京都"
    """

    def __init__(self, base_url: str | None = None, timeout: int | None = None) -> None:
        self.base_url: str = base_url or settings.POSTAL_CODE_API_URL
        self.timeout: int = timeout or settings.POSTAL_CODE_API_TIMEOUT

    def lookup(self, postal_code: str) -> PostalAddress | None:
        """
        우편번호로 주소 검색

        Args:
            postal_code: 하이픈 포함 여부 무관 (예: "1000001", "100-0001")

        Returns:
            첫 번째 검색 결과. 형식 오류, 결과 없음, 통신 오류는 None
        """
        digits = normalize_postal_code(postal_code)
        if digits is None:
            return None

        try:
            response = requests.get(
                self.base_url,
                params={"zipcode": digits},
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("우편번호 검색 실패: postal_code=%s, error=%s", digits, e)
            return None

        return self._parse(digits, data)

    async def alookup(self, postal_code: str) -> PostalAddress | None:
        """OrderComposer.prefill_from_postal_code 용 비동기 버전"""
        return await sync_to_async(self.lookup, thread_sensitive=False)(postal_code)

    def _parse(self, digits: str, data: Any) -> PostalAddress | None:
        if not isinstance(data, dict) or data.get("status") != 200:
            logger.info("우편번호 검색 결과 없음: postal_code=%s, response=%r", digits, data)
            return None

        results = data.get("results") or []
        if not results or not isinstance(results[0], dict):
            return None

        result = results[0]
        prefecture = result.get("address1") or ""
        if not prefecture:
            return None

        return PostalAddress(
            postal_code=format_postal_code(digits),
            prefecture=prefecture,
            city=result.get("address2") or "",
            town=result.get("address3") or "",
        )
