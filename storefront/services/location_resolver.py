"""배송지 문자열 → 요금표 도도부현 키 변환

사용자 입력은 시/구 이름, 접미사(都/道/府/県) 유무가 다른 도도부현명, 일부만 입력한 이름 등
제각각이므로 아래 전략을 순서대로 시도하고 처음 성공한 결과를 사용합니다.

1. match_alias:   별칭 테이블 정확 일치 (예: 札幌市 → 北海道)
2. match_direct:  접미사 1글자를 제거한 뒤 요금표 도도부현과 일치 (예: 東京 → 東京都)
3. match_partial: 접미사 제거 후 부분 문자열 일치, 요금표 순서상 첫 번째 (신뢰도 낮음)

모두 실패하면 LocationNotResolved 를 발생시킵니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from .base import ServiceError
from .location_aliases import LOCATION_ALIASES

logger = logging.getLogger(__name__)

PREFECTURE_SUFFIXES = ("都", "道", "府", "県")

# (입력, 요금표 도도부현 목록, 별칭) -> 도도부현 또는 None
MatchStrategy = Callable[[str, Sequence[str], Mapping[str, str]], Optional[str]]


class LocationNotResolved(ServiceError):
    """배송지 문자열을 도도부현으로 변환할 수 없음"""

    default_code = "LOCATION_NOT_RESOLVED"


def strip_suffix(name: str) -> str:
    """끝의 都/道/府/県 한 글자만 제거"""
    if name.endswith(PREFECTURE_SUFFIXES):
        return name[:-1]
    return name


def match_alias(text: str, prefectures: Sequence[str], aliases: Mapping[str, str]) -> Optional[str]:
    return aliases.get(text)


def match_direct(text: str, prefectures: Sequence[str], aliases: Mapping[str, str]) -> Optional[str]:
    stripped = strip_suffix(text)
    if not stripped:
        return None
    for prefecture in prefectures:
        if strip_suffix(prefecture) == stripped:
            return prefecture
    return None


def match_partial(text: str, prefectures: Sequence[str], aliases: Mapping[str, str]) -> Optional[str]:
    stripped = strip_suffix(text)
    if not stripped:
        return None
    for prefecture in prefectures:
        candidate = strip_suffix(prefecture)
        if not candidate:
            continue
        # 가장 잘 맞는 행이 아니라 요금표 순서상 첫 번째 행을 사용한다
        if stripped in candidate or candidate in stripped:
            return prefecture
    return None


DEFAULT_STRATEGIES: tuple[MatchStrategy, ...] = (match_alias, match_direct, match_partial)

# 이 전략으로 찾은 결과는 호출자가 신뢰도 낮음으로 취급해야 한다
LOW_CONFIDENCE_STRATEGIES = frozenset({"match_partial"})


@dataclass(frozen=True)
class Resolution:
    """변환 결과"""

    prefecture: str
    strategy: str
    low_confidence: bool = False


class LocationResolver:
    """
    배송지 문자열을 요금표 도도부현 키로 변환

    사용법:
        resolver = LocationResolver(rate_table.prefectures)
        resolver.resolve("札幌市").prefecture  # "北海道"
    """

    def __init__(
        self,
        prefectures: Sequence[str],
        aliases: Mapping[str, str] = LOCATION_ALIASES,
        strategies: Sequence[MatchStrategy] = DEFAULT_STRATEGIES,
    ):
        self.prefectures = tuple(prefectures)
        self.aliases = aliases
        self.strategies = tuple(strategies)

    def resolve(self, destination: str) -> Resolution:
        """
        배송지 문자열 변환

        Raises:
            LocationNotResolved: 어떤 전략으로도 도도부현을 찾지 못한 경우
        """
        text = (destination or "").strip()
        if text:
            for strategy in self.strategies:
                prefecture = strategy(text, self.prefectures, self.aliases)
                if prefecture is None:
                    continue

                name = getattr(strategy, "__name__", repr(strategy))
                resolution = Resolution(
                    prefecture=prefecture,
                    strategy=name,
                    low_confidence=name in LOW_CONFIDENCE_STRATEGIES,
                )
                if resolution.low_confidence:
                    logger.info("배송지 부분 일치 사용: input=%s → %s", text, prefecture)
                else:
                    logger.debug("배송지 변환: input=%s → %s (%s)", text, prefecture, name)
                return resolution

        raise LocationNotResolved(
            f"配送先の都道府県を特定できません: {destination!r}",
            details={"destination": destination},
        )
